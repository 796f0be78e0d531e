"""Normalization helpers.

Centralizes defensive parsing of gateway payloads: numeric sentinels from
constrained firmware, flag coercion, and timestamps in any of the shapes the
nodes send (ISO strings, epoch seconds, epoch milliseconds).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from meshwatch._constants import MS_THRESHOLD

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def coerce_flag(value: Any) -> bool | None:
    """Coerce a firmware flag to ``bool``.

    ``True``/``False``, the integer sentinels ``1``/``0`` and their string
    forms are accepted. ``None`` stays ``None``. Anything else raises
    :class:`ValueError`.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ValueError(f"cannot interpret {value!r} as a flag")


def is_flag_sentinel(value: Any) -> bool:
    """Return True for values that encode a flag rather than a measurement.

    Booleans, the *integer* sentinels ``0``/``1`` and their exact string
    forms ``"0"``/``"1"``. Floats such as ``1.0`` (or ``"1.0"``) are
    measurements.
    """

    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return value.strip() in ("0", "1")
    return type(value) is int and value in (0, 1)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a node/gateway timestamp into an aware UTC datetime.

    - ``datetime`` -> made tz-aware (naive values are treated as UTC)
    - ISO-8601 string (``Z`` suffix accepted) -> datetime
    - numeric or numeric string -> epoch seconds, or milliseconds above 1e11
    - empty, non-positive or unparseable -> ``None``
    """

    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            numeric = safe_float(text)
            if numeric is None:
                return None
            return _from_epoch(numeric)
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)

    numeric = safe_float(value)
    if numeric is None:
        return None
    return _from_epoch(numeric)


def _from_epoch(ts: float) -> datetime | None:
    if ts <= 0:
        return None
    if ts > MS_THRESHOLD:
        ts /= 1000.0
    try:
        return datetime.fromtimestamp(ts, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def fold_node_alias(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Fold the legacy ``deviceId`` key into ``nodeId``.

    ``nodeId`` wins when both are present and non-empty. The returned dict
    never contains ``deviceId``.
    """

    working = dict(payload)
    legacy = working.pop("deviceId", None)
    if safe_str(working.get("nodeId")) is None and safe_str(legacy) is not None:
        working["nodeId"] = legacy
    return working
