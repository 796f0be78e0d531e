"""Helpers for safe debug logging.

Inbound gateway requests can carry the shared secret or bearer tokens in
headers, and some firmware echoes them into the JSON body. This module
masks those before payloads reach DEBUG logs.
"""

from __future__ import annotations

from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"password", "token", "accesstoken", "apikey", "api_key", "x-api-key", "authorization", "cookie", "secret"}
)

_MAX_DEPTH = 20
_REDACTED = "<redacted>"


def _is_sensitive(key: str) -> bool:
    return key.lower() in _SENSITIVE_KEYS


def redact_for_log(payload: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of a decoded JSON *payload* safe for debug logs.

    Values under sensitive keys are masked at any depth and long strings are
    cut to *max_string* characters. Anything that is not a JSON type is
    logged as its ``repr``.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(payload, dict):
        return {
            str(key): _REDACTED
            if _is_sensitive(str(key))
            else redact_for_log(value, max_string=max_string, _depth=_depth + 1)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in payload]
    if isinstance(payload, str):
        return payload if len(payload) <= max_string else f"{payload[:max_string]}…<truncated>"
    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    return repr(payload)
