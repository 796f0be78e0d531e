"""Tagged sensor value types.

Some sensors report either a measurement or an alert flag for the same
field (``gas`` is a percentage on analog boards and a threshold flag on
digital ones). The value is decoded once at ingestion into
:class:`Numeric` or :class:`Flag`; consumers match on ``kind`` instead of
probing the runtime type.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from meshwatch.ingestion.normalize import coerce_flag, is_flag_sentinel, safe_float


class Numeric(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    value: float


class Flag(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["flag"] = "flag"
    value: bool


NumericOrFlag = Annotated[Numeric | Flag, Field(discriminator="kind")]


def decode_numeric_or_flag(value: Any) -> dict[str, Any] | Numeric | Flag | None:
    """Decode a raw payload value into tagged-variant input.

    - already tagged (model instance or ``{"kind": ...}`` dict) -> unchanged
    - ``bool``, integer ``0``/``1`` or string ``"0"``/``"1"`` -> flag, matching
      how ``motion`` is coerced
    - ``"true"``/``"false"`` -> flag
    - any other number (or numeric string) -> numeric
    - missing/unparseable -> ``None``
    """

    if value is None or isinstance(value, (Numeric, Flag)):
        return value
    if isinstance(value, dict):
        return value if "kind" in value else None
    if is_flag_sentinel(value):
        return {"kind": "flag", "value": coerce_flag(value)}
    numeric = safe_float(value)
    if numeric is not None:
        return {"kind": "numeric", "value": numeric}
    try:
        flag = coerce_flag(value)
    except ValueError:
        return None
    return {"kind": "flag", "value": flag}


def plain_value(tagged: Numeric | Flag | None) -> float | bool | None:
    """Unwrap a tagged value for JSON responses (number or boolean)."""
    if tagged is None:
        return None
    if tagged.kind == "flag":
        return bool(tagged.value)
    return float(tagged.value)
