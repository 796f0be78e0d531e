"""Service configuration for meshwatch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from meshwatch._constants import (
    DEFAULT_ADMIN_ID,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_PRESENCE_THRESHOLD_SECONDS,
    MAX_HISTORY_LIMIT,
)
from meshwatch.exceptions import MeshConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError as exc:
        raise MeshConfigError(f"{env_key} must be a {kind.__name__}, got {value!r}") from exc


def _env_secret(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclasses.dataclass(frozen=True)
class MeshConfig:
    """Service configuration.

    Parameters
    ----------
    api_key : str or None
        Shared secret expected in the ``X-API-Key`` header on public
        ingestion endpoints. The check is disabled when unset.
    access_token : str or None
        Bearer token accepted on protected query/admin endpoints. When
        unset, protected endpoints are open.
    default_admin_id : str
        Gateway identity assigned to readings without ``adminId``.
    presence_threshold_seconds : float
        A node is online while its last reading is younger than this.
    history_default_limit : int
        Limit applied to history queries that don't pass one.
    history_max_limit : int
        Upper bound for any history query limit.
    host : str
        Bind address for ``meshwatch serve``.
    port : int
        Bind port for ``meshwatch serve``.
    frontend_url : str or None
        Dashboard origin allowed by CORS (plus localhost:3000). Any origin
        is allowed when unset.
    debug_payloads : bool
        Log (redacted) inbound payloads at DEBUG level.
    """

    api_key: str | None = None
    access_token: str | None = None
    default_admin_id: str = DEFAULT_ADMIN_ID
    presence_threshold_seconds: float = DEFAULT_PRESENCE_THRESHOLD_SECONDS
    history_default_limit: int = DEFAULT_HISTORY_LIMIT
    history_max_limit: int = MAX_HISTORY_LIMIT
    host: str = "0.0.0.0"
    port: int = 5000
    frontend_url: str | None = None
    debug_payloads: bool = False

    def __post_init__(self) -> None:
        if self.presence_threshold_seconds <= 0:
            raise MeshConfigError("presence_threshold_seconds must be positive")
        if self.history_default_limit <= 0 or self.history_max_limit <= 0:
            raise MeshConfigError("history limits must be positive")
        if not self.default_admin_id.strip():
            raise MeshConfigError("default_admin_id must be non-empty")

    @property
    def shared_secret_enabled(self) -> bool:
        return self.api_key is not None

    @classmethod
    def from_env(cls, **overrides: Any) -> MeshConfig:
        """Create configuration from ``MESH_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        MeshConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        api_key = _env_secret(env.get("MESH_API_KEY"))
        if api_key is not None:
            config_kwargs["api_key"] = api_key
        access_token = _env_secret(env.get("MESH_ACCESS_TOKEN"))
        if access_token is not None:
            config_kwargs["access_token"] = access_token

        _ENV_STR_MAP = {
            "MESH_DEFAULT_ADMIN_ID": "default_admin_id",
            "MESH_HOST": "host",
            "MESH_FRONTEND_URL": "frontend_url",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "MESH_PRESENCE_THRESHOLD_SECONDS": ("presence_threshold_seconds", float),
            "MESH_HISTORY_DEFAULT_LIMIT": ("history_default_limit", int),
            "MESH_HISTORY_MAX_LIMIT": ("history_max_limit", int),
            "MESH_PORT": ("port", int),
        }
        for env_key, (field_name, kind) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, kind)

        if "debug_payloads" not in overrides:
            config_kwargs["debug_payloads"] = _env_bool(env.get("MESH_DEBUG_PAYLOADS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
