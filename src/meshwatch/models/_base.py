"""Base model for meshwatch payloads and records.

Every model inherits from :class:`MeshBaseModel` which provides:

* ``alias_generator=to_camel`` so the gateway's camelCase keys map
  automatically to snake_case fields, and responses dump back to camelCase.
* A ``model_validator(mode="before")`` that strips firmware sentinel values
  (``""``, ``"--"``, NaN) so the field default is used.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from meshwatch.ingestion.normalize import parse_timestamp

# Sentinel strings some node firmware sends for "sensor not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


MeshTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch seconds/ms to UTC datetimes.

Unparseable values become ``None``.
"""


class MeshBaseModel(BaseModel):
    """Base for meshwatch models.

    Handles:
    * camelCase <-> snake_case via ``alias_generator=to_camel``
    * sentinel values (``""``, ``"--"``, NaN) dropped so the field default
      is used instead
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_sentinels(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return MeshBaseModel._clean_dict(values)

    def to_api(self) -> dict[str, Any]:
        """JSON-safe camelCase dict for HTTP responses."""
        return self.model_dump(mode="json", by_alias=True)
