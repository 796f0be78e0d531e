"""Async HTTP client for a running meshwatch server.

Used by the ``meshwatch check`` and ``meshwatch send-test`` commands to
verify that a gateway can reach the server, and handy for scripting test
traffic against a deployment.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from meshwatch._constants import API_KEY_HEADER
from meshwatch.exceptions import MeshTransportError

_logger = logging.getLogger(__name__)

_READINGS = "/api/readings"


class MeshClient:
    """Thin JSON client for the meshwatch HTTP API.

    Usage::

        async with MeshClient("http://localhost:5000", api_key="secret") as client:
            await client.send_room({"room_id": 1, "temperature": 25.5})
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        access_token: str | None = None,
        timeout: float = 3.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._external_session = session is not None
        self._http = session

    async def __aenter__(self) -> MeshClient:
        if self._http is None:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http is not None:
            await self._http.close()
        self._http = None

    def _headers(self, *, public: bool) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if public and self._api_key:
            headers[API_KEY_HEADER] = self._api_key
        if not public and self._access_token:
            headers["authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        public: bool,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        if self._http is None:
            raise MeshTransportError("Client not started; use 'async with MeshClient(...)'", endpoint=endpoint)

        url = f"{self._base_url}{endpoint}"
        body = json.dumps(payload) if payload is not None else None
        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                params=params,
                headers=self._headers(public=public),
            ) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    raise MeshTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except MeshTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise MeshTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MeshTransportError(f"Invalid JSON from {endpoint}: {text[:200]}", endpoint=endpoint) from exc
        if not isinstance(decoded, dict):
            raise MeshTransportError(f"Unexpected response shape from {endpoint}", endpoint=endpoint)
        return decoded

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/health", public=True)

    async def send_reading(self, reading: Mapping[str, Any]) -> dict[str, Any]:
        """POST to the public durable endpoint."""
        return await self._request("POST", f"{_READINGS}/public", public=True, payload=reading)

    async def send_relay(self, reading: Mapping[str, Any]) -> dict[str, Any]:
        """POST to the live-only relay endpoint."""
        return await self._request("POST", f"{_READINGS}/public/relay", public=True, payload=reading)

    async def send_room(self, reading: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"{_READINGS}/public/room", public=True, payload=reading)

    async def send_batch(self, admin_id: str, readings: list[Mapping[str, Any]]) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"{_READINGS}/public/batch",
            public=True,
            payload={"adminId": admin_id, "sensorData": list(readings)},
        )

    async def latest_all_nodes(self, admin_id: str | None = None) -> dict[str, Any]:
        params = {"adminId": admin_id} if admin_id else None
        return await self._request("GET", f"{_READINGS}/latest/all-nodes", public=False, params=params)

    async def presence(self) -> dict[str, Any]:
        return await self._request("GET", f"{_READINGS}/presence", public=False)
