"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meshwatch import __version__
from meshwatch._constants import API_KEY_HEADER
from meshwatch.api.auth import Authorizer, BearerTokenAuthorizer
from meshwatch.api.routes import router as readings_router
from meshwatch.config import MeshConfig
from meshwatch.exceptions import (
    InvalidInputError,
    MeshError,
    ReadingNotFoundError,
    StoreFailureError,
    UnauthorizedError,
)
from meshwatch.service import MeshService

_logger = logging.getLogger(__name__)

_LOCAL_DEV_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")

_ERROR_STATUS: dict[type[MeshError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ReadingNotFoundError: status.HTTP_404_NOT_FOUND,
    StoreFailureError: status.HTTP_502_BAD_GATEWAY,
}


def _status_for(exc: MeshError) -> int:
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_mesh_error(_request: Request, exc: MeshError) -> JSONResponse:
    code = _status_for(exc)
    if code >= 500:
        _logger.error("Request failed: %s", exc)
    return JSONResponse(status_code=code, content={"success": False, "message": str(exc)})


def _cors_origins(config: MeshConfig) -> list[str]:
    if config.frontend_url is None:
        return ["*"]
    return [config.frontend_url, *_LOCAL_DEV_ORIGINS]


def create_app(
    config: MeshConfig | None = None,
    *,
    service: MeshService | None = None,
    authorizer: Authorizer | None = None,
) -> FastAPI:
    """Build the HTTP application around a :class:`MeshService`.

    Parameters
    ----------
    config
        Service configuration. Defaults to ``service.config`` or
        :meth:`MeshConfig.from_env`.
    service
        Pre-built components (stores, router, facade). A fresh one is built
        from *config* when omitted.
    authorizer
        Predicate for protected endpoints. Defaults to a bearer-token check
        against ``config.access_token``.
    """

    if service is None:
        service = MeshService(config or MeshConfig.from_env())
    config = service.config

    app = FastAPI(title="meshwatch", version=__version__)
    app.state.service = service
    app.state.authorizer = authorizer or BearerTokenAuthorizer(config.access_token)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(config),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", API_KEY_HEADER],
        allow_credentials=False,
    )

    @app.middleware("http")
    async def _log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        started = time.monotonic()
        response = await call_next(request)
        if request.url.path.startswith(readings_router.prefix):
            _logger.debug(
                "%s %s -> %d (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.monotonic() - started) * 1000,
            )
        return response

    app.add_exception_handler(MeshError, _handle_mesh_error)
    app.include_router(readings_router)

    @app.get("/health", tags=["Health"])
    def health() -> dict[str, object]:
        return {
            "status": "ok",
            "service": "meshwatch",
            "version": __version__,
            "nodes": len(service.live_store),
            "gatewayOnline": service.presence.is_gateway_online(),
        }

    if not config.shared_secret_enabled:
        _logger.info("No API key configured; public ingestion endpoints accept any caller")

    return app
