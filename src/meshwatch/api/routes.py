"""Reading endpoints.

Public ingestion endpoints check the optional shared secret before the body
is read. Protected endpoints consult the app's :class:`Authorizer`.

Store writes per endpoint:

- ``POST /api/readings``               durable only (protected)
- ``POST /api/readings/public``        durable only
- ``POST /api/readings/public/batch``  durable only, per item
- ``POST /api/readings/public/relay``  latest-value store only
- ``POST /api/readings/public/room``   latest-value store only
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.concurrency import run_in_threadpool

from meshwatch._constants import API_KEY_HEADER
from meshwatch.exceptions import InvalidInputError, UnauthorizedError
from meshwatch.ingestion.routes import IngestionRoute
from meshwatch.models.batch import IngestResult
from meshwatch.models.query import ReadingFilter
from meshwatch.service import MeshService

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/readings", tags=["Readings"])


def get_service(request: Request) -> MeshService:
    return request.app.state.service


def require_authorized(
    request: Request,
    authorization: str | None = Header(default=None),
) -> None:
    if not request.app.state.authorizer.is_authorized(authorization):
        raise UnauthorizedError("Not authorized")


def require_shared_secret(
    service: MeshService = Depends(get_service),
    api_key: str | None = Header(default=None, alias=API_KEY_HEADER),
) -> None:
    service.router.verify_shared_secret(api_key)


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        raise InvalidInputError("Request body is required")
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"Request body is not valid JSON: {exc}") from exc


def _filter(node_id: str | None, device_id: str | None, admin_id: str | None) -> ReadingFilter:
    return ReadingFilter(node_id=node_id or device_id, admin_id=admin_id)


def _parse_limit(limit: str | None) -> int | None:
    if limit is None or not limit.strip():
        return None
    try:
        return int(limit)
    except ValueError as exc:
        raise InvalidInputError(f"limit must be an integer, got {limit!r}") from exc


def _ingest_response(result: IngestResult, message: str) -> dict[str, Any]:
    data = result.reading.to_api()
    if result.record_id is not None:
        data["id"] = result.record_id
    return {"success": True, "message": message, "data": data}


# ----------------------------------------------------------------------
# Queries (protected)
# ----------------------------------------------------------------------


@router.get("", dependencies=[Depends(require_authorized)])
def list_history(
    service: MeshService = Depends(get_service),
    node_id: str | None = Query(default=None, alias="nodeId"),
    device_id: str | None = Query(default=None, alias="deviceId"),
    admin_id: str | None = Query(default=None, alias="adminId"),
    limit: str | None = Query(default=None),
) -> dict[str, Any]:
    """Durable history, newest first."""
    records = service.queries.history(_filter(node_id, device_id, admin_id), _parse_limit(limit))
    return {"success": True, "count": len(records), "data": [record.to_api() for record in records]}


@router.get("/latest", dependencies=[Depends(require_authorized)])
def latest_for_node(
    service: MeshService = Depends(get_service),
    node_id: str | None = Query(default=None, alias="nodeId"),
    device_id: str | None = Query(default=None, alias="deviceId"),
    admin_id: str | None = Query(default=None, alias="adminId"),
) -> dict[str, Any]:
    record = service.queries.latest_for_node(_filter(node_id, device_id, admin_id))
    return {"success": True, "data": record.to_api()}


@router.get("/latest/all-nodes", dependencies=[Depends(require_authorized)])
def latest_all_nodes(
    service: MeshService = Depends(get_service),
    admin_id: str | None = Query(default=None, alias="adminId"),
) -> dict[str, Any]:
    """Live latest reading per node, ordered by node id."""
    readings = service.queries.latest_all_nodes(ReadingFilter(admin_id=admin_id))
    return {"success": True, "count": len(readings), "data": [reading.to_api() for reading in readings]}


@router.get("/presence", dependencies=[Depends(require_authorized)])
def presence(
    service: MeshService = Depends(get_service),
    admin_id: str | None = Query(default=None, alias="adminId"),
) -> dict[str, Any]:
    summary = service.queries.presence(ReadingFilter(admin_id=admin_id))
    return {"success": True, **summary.to_api()}


# ----------------------------------------------------------------------
# Ingestion
# ----------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_authorized)])
async def ingest_direct(request: Request, service: MeshService = Depends(get_service)) -> dict[str, Any]:
    """Admin ingestion. Writes the durable store only."""
    payload = await _read_json(request)
    result = await run_in_threadpool(service.router.ingest, payload, IngestionRoute.DIRECT)
    return _ingest_response(result, "Data saved successfully")


@router.post("/public", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_shared_secret)])
async def ingest_public(request: Request, service: MeshService = Depends(get_service)) -> dict[str, Any]:
    """Gateway ingestion. Writes the durable store only."""
    payload = await _read_json(request)
    result = await run_in_threadpool(service.router.ingest, payload, IngestionRoute.DIRECT)
    return _ingest_response(result, "Data received successfully")


@router.post("/public/batch", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_shared_secret)])
async def ingest_batch(request: Request, service: MeshService = Depends(get_service)) -> dict[str, Any]:
    """Gateway batch ingestion. Each accepted item is written to the durable store."""
    payload = await _read_json(request)
    result = await run_in_threadpool(service.router.ingest_batch, payload)
    total = result.accepted_count + result.failed_count
    return {"success": True, "message": f"Processed {total} records", **result.to_api()}


@router.post("/public/relay", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_shared_secret)])
async def ingest_relay(request: Request, service: MeshService = Depends(get_service)) -> dict[str, Any]:
    """High-frequency relay ingestion. Writes the latest-value store only."""
    payload = await _read_json(request)
    result = await run_in_threadpool(service.router.ingest, payload, IngestionRoute.RELAY)
    return _ingest_response(result, "Data received successfully")


@router.post("/public/room", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_shared_secret)])
async def ingest_room(request: Request, service: MeshService = Depends(get_service)) -> dict[str, Any]:
    """Room-firmware relay ingestion. Writes the latest-value store only."""
    payload = await _read_json(request)
    result = await run_in_threadpool(service.router.ingest_room, payload)
    return _ingest_response(result, "Data received successfully")
