"""Sensor reading models."""

from __future__ import annotations

from typing import Any

from pydantic import field_serializer, field_validator

from meshwatch._constants import DRY_WATER_LEVEL, RAIN_WATER_LEVEL, ROOM_NODE_PREFIX
from meshwatch.ingestion.normalize import coerce_flag, safe_float, safe_str
from meshwatch.models._base import MeshBaseModel, MeshTimestamp
from meshwatch.models.values import NumericOrFlag, decode_numeric_or_flag, plain_value


class Reading(MeshBaseModel):
    """One accepted sensor reading.

    Readings are immutable; corrections arrive as new readings.

    Parameters
    ----------
    node_id : str
        Originating sensor node (``nodeId``; legacy ``deviceId`` is folded
        in before validation).
    admin_id : str
        Gateway that relayed the reading.
    temperature, humidity, soil_moisture, water_level : float or None
        Numeric sensor values; ``None`` when absent or unparseable.
    gas : Numeric, Flag or None
        Gas sensor value, either a measurement or an alert flag.
    motion : bool or None
        PIR detection flag.
    sensor1, sensor2 : float or None
        Legacy generic channels from first-generation boards.
    timestamp : datetime or None
        When the node produced the reading.
    received_at : datetime or None
        When the server accepted it. Always set by the ingestion router.
    additional_data : dict or None
        Opaque extension bag, passed through unmodified.
    """

    node_id: str
    admin_id: str
    temperature: float | None = None
    humidity: float | None = None
    soil_moisture: float | None = None
    water_level: float | None = None
    gas: NumericOrFlag | None = None
    motion: bool | None = None
    sensor1: float | None = None
    sensor2: float | None = None
    timestamp: MeshTimestamp = None
    received_at: MeshTimestamp = None
    additional_data: dict[str, Any] | None = None

    @field_validator("node_id", "admin_id", mode="before")
    @classmethod
    def _require_identity(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("identity must be non-empty")
        return text

    @field_validator(
        "temperature",
        "humidity",
        "soil_moisture",
        "water_level",
        "sensor1",
        "sensor2",
        mode="before",
    )
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("motion", mode="before")
    @classmethod
    def _coerce_motion(cls, value: Any) -> bool | None:
        return coerce_flag(value)

    @field_validator("gas", mode="before")
    @classmethod
    def _decode_gas(cls, value: Any) -> Any:
        return decode_numeric_or_flag(value)

    @field_serializer("gas")
    def _serialize_gas(self, gas: Any) -> float | bool | None:
        return plain_value(gas)


class StoredReading(MeshBaseModel):
    """A reading as held by the durable store, with its record id."""

    id: str
    reading: Reading

    def to_api(self) -> dict[str, Any]:
        return {"id": self.id, **self.reading.to_api()}


class RoomPayload(MeshBaseModel):
    """Payload shape sent by the room-based relay firmware.

    ``{"room_id": 1, "temperature": 25.5, "humidity": 60, "motion": 0,
    "rain": 0, "gas": 0, "ts": 1700000000000}``
    """

    room_id: str
    temperature: Any = None
    humidity: Any = None
    motion: Any = None
    rain: Any = None
    gas: Any = None
    ts: Any = None

    @field_validator("room_id", mode="before")
    @classmethod
    def _coerce_room_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("room_id is required")
        return text

    @property
    def node_id(self) -> str:
        return f"{ROOM_NODE_PREFIX}{self.room_id}"

    def to_reading_input(self) -> dict[str, Any]:
        """Map the room shape onto the canonical reading keys."""
        data: dict[str, Any] = {
            "nodeId": self.node_id,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "motion": self.motion,
            "gas": self.gas,
            "timestamp": self.ts,
        }
        if self.rain is not None:
            data["waterLevel"] = RAIN_WATER_LEVEL if coerce_flag(self.rain) else DRY_WATER_LEVEL
        return data
