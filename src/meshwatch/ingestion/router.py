"""Ingestion router.

Turns raw gateway payloads into :class:`~meshwatch.models.reading.Reading`
objects and writes them to the stores named by the route's policy:

- parse and normalize aliases (``deviceId`` -> ``nodeId``)
- stamp ``receivedAt`` from the router clock, default ``adminId``
- coerce firmware flags and the ``gas`` variant
- write live and/or durable per :mod:`meshwatch.ingestion.routes`

The live and durable writes are not transactional with each other: a
durable failure does not roll back a live write already performed.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from meshwatch._constants import UNKNOWN_NODE_ID
from meshwatch._redact import redact_for_log
from meshwatch.config import MeshConfig
from meshwatch.exceptions import InvalidInputError, StoreFailureError, UnauthorizedError
from meshwatch.ingestion.normalize import fold_node_alias, parse_timestamp, safe_str
from meshwatch.ingestion.routes import DEFAULT_POLICIES, IngestionRoute, RoutePolicy, route_policy
from meshwatch.models.batch import BatchFailure, BatchResult, IngestResult
from meshwatch.models.reading import Reading, RoomPayload
from meshwatch.state.store import LatestValueStore
from meshwatch.storage.base import ReadingRepository

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _describe_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid reading"


def _item_node_id(item: Any) -> str:
    if not isinstance(item, Mapping):
        return UNKNOWN_NODE_ID
    return safe_str(item.get("nodeId")) or safe_str(item.get("deviceId")) or UNKNOWN_NODE_ID


class IngestionRouter:
    """Accept single and batched readings and route them to the stores."""

    def __init__(
        self,
        *,
        live_store: LatestValueStore,
        repository: ReadingRepository,
        config: MeshConfig | None = None,
        policies: Mapping[IngestionRoute, RoutePolicy] = DEFAULT_POLICIES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._live_store = live_store
        self._repository = repository
        self._config = config or MeshConfig()
        self._policies = policies
        self._clock = clock

    # ------------------------------------------------------------------
    # Shared-secret gate
    # ------------------------------------------------------------------

    def verify_shared_secret(self, provided: str | None) -> None:
        """Check the ``X-API-Key`` value for public ingestion endpoints.

        No-op when no secret is configured.

        Raises
        ------
        UnauthorizedError
            If a secret is configured and *provided* is missing or wrong.
        """
        expected = self._config.api_key
        if expected is None:
            return
        if not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
            _logger.warning("Rejected public ingestion: API key missing or mismatched")
            raise UnauthorizedError("Unauthorized")

    # ------------------------------------------------------------------
    # Single reading
    # ------------------------------------------------------------------

    def ingest(self, payload: Any, route: IngestionRoute = IngestionRoute.DIRECT) -> IngestResult:
        """Normalize one reading and write it per *route*'s policy.

        ``DIRECT`` writes the durable store only; ``RELAY`` writes the
        latest-value store only.

        Raises
        ------
        InvalidInputError
            Empty node identity or an uncoercible field.
        StoreFailureError
            The durable write failed.
        """
        received_at = self._clock()
        self._log_payload(route, payload)
        reading = self._build_reading(payload, received_at=received_at)
        return self._write(reading, IngestionRoute(route))

    def ingest_room(self, payload: Any) -> IngestResult:
        """Ingest the room-firmware shape (``room_id``, ``rain``, ``ts``) via ``RELAY``.

        Writes the latest-value store only.
        """
        received_at = self._clock()
        self._log_payload(IngestionRoute.RELAY, payload)
        if not isinstance(payload, Mapping):
            raise InvalidInputError("reading payload must be a JSON object")
        try:
            room = RoomPayload.model_validate(dict(payload))
            data = room.to_reading_input()
        except ValidationError as exc:
            raise InvalidInputError("room_id is required") from exc
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        reading = self._build_reading(data, received_at=received_at)
        return self._write(reading, IngestionRoute.RELAY)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def ingest_batch(self, payload: Any) -> BatchResult:
        """Ingest ``{adminId, sensorData: [...]}`` item by item via ``BATCH``.

        A bad item is recorded as a failure and never aborts the batch;
        accepted items are persisted individually. Only a malformed container
        rejects the whole request.

        Raises
        ------
        InvalidInputError
            ``sensorData`` is missing, not a list, or empty.
        """
        if not isinstance(payload, Mapping):
            raise InvalidInputError("batch payload must be a JSON object")
        sensor_data = payload.get("sensorData")
        if (
            not isinstance(sensor_data, Sequence)
            or isinstance(sensor_data, (str, bytes, bytearray))
            or len(sensor_data) == 0
        ):
            raise InvalidInputError("Sensor data array is required")

        self._log_payload(IngestionRoute.BATCH, payload)
        admin_id = safe_str(payload.get("adminId")) or self._config.default_admin_id
        failures: list[BatchFailure] = []
        record_ids: list[str] = []

        for item in sensor_data:
            received_at = self._clock()
            node_id = _item_node_id(item)
            try:
                reading = self._build_reading(item, received_at=received_at, admin_id=admin_id)
                outcome = self._write(reading, IngestionRoute.BATCH)
            except (InvalidInputError, StoreFailureError) as exc:
                _logger.warning("Batch item for node %s from %s rejected: %s", node_id, admin_id, exc)
                failures.append(BatchFailure(node_id=node_id, reason=str(exc)))
                continue
            if outcome.record_id is not None:
                record_ids.append(outcome.record_id)

        result = BatchResult(
            accepted_count=len(sensor_data) - len(failures),
            failed_count=len(failures),
            failures=failures,
            record_ids=record_ids,
        )
        _logger.info(
            "Processed batch from %s: %d accepted, %d failed",
            admin_id,
            result.accepted_count,
            result.failed_count,
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_reading(
        self,
        payload: Any,
        *,
        received_at: datetime,
        admin_id: str | None = None,
    ) -> Reading:
        if not isinstance(payload, Mapping):
            raise InvalidInputError("reading payload must be a JSON object")

        data = fold_node_alias(payload)
        node_id = safe_str(data.get("nodeId"))
        if node_id is None:
            raise InvalidInputError("Node ID or Device ID is required")

        data["nodeId"] = node_id
        data["adminId"] = admin_id or safe_str(data.get("adminId")) or self._config.default_admin_id
        data["timestamp"] = parse_timestamp(data.get("timestamp")) or received_at
        # Presence is computed from the server clock only.
        data["receivedAt"] = received_at
        data.pop("received_at", None)

        try:
            return Reading.model_validate(data)
        except ValidationError as exc:
            raise InvalidInputError(
                f"Invalid reading for node {node_id}: {_describe_validation_error(exc)}",
                node_id=node_id,
            ) from exc

    def _write(self, reading: Reading, route: IngestionRoute) -> IngestResult:
        policy = route_policy(route, self._policies)
        wrote_live = False
        record_id: str | None = None

        if policy.writes_live:
            self._live_store.put(reading.node_id, reading)
            wrote_live = True

        if policy.writes_durable:
            try:
                record_id = self._repository.append(reading)
            except StoreFailureError:
                _logger.error("Durable write failed for node %s", reading.node_id, exc_info=True)
                raise
            except Exception as exc:
                _logger.error("Durable write failed for node %s", reading.node_id, exc_info=True)
                raise StoreFailureError(
                    f"Failed to persist reading for node {reading.node_id}: {exc}",
                    node_id=reading.node_id,
                ) from exc

        _logger.debug("Ingested node %s via %s (live=%s durable=%s)", reading.node_id, route, wrote_live, record_id)
        return IngestResult(
            route=str(route),
            reading=reading,
            record_id=record_id,
            wrote_durable=record_id is not None,
            wrote_live=wrote_live,
        )

    def _log_payload(self, route: IngestionRoute, payload: Any) -> None:
        if self._config.debug_payloads and _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Inbound %s payload: %s", route, redact_for_log(payload))
