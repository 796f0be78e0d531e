from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from meshwatch.models import Flag, Numeric, Reading, RoomPayload, StoredReading
from meshwatch.models.values import decode_numeric_or_flag, plain_value


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _reading(**overrides: object) -> Reading:
    data: dict[str, object] = {
        "nodeId": "NODE_1",
        "adminId": "ADMIN_001",
        "timestamp": _dt(),
        "receivedAt": _dt(),
    }
    data.update(overrides)
    return Reading.model_validate(data)


def test_gas_integer_sentinel_decodes_to_flag() -> None:
    assert _reading(gas=0).gas == Flag(value=False)
    assert _reading(gas=1).gas == Flag(value=True)
    assert _reading(gas=True).gas == Flag(value=True)


def test_gas_string_sentinel_matches_motion_coercion() -> None:
    reading = _reading(gas="1", motion="1")

    assert reading.gas == Flag(value=True)
    assert reading.motion is True
    assert _reading(gas="0").gas == Flag(value=False)
    assert _reading(gas="1.0").gas == Numeric(value=1.0)


def test_gas_measurement_decodes_to_numeric() -> None:
    reading = _reading(gas=42.5)

    assert isinstance(reading.gas, Numeric)
    assert reading.gas.value == 42.5
    # 1.0 is a measurement, not the integer flag sentinel.
    assert _reading(gas=1.0).gas == Numeric(value=1.0)


def test_gas_serializes_as_plain_json_value() -> None:
    assert _reading(gas=0).to_api()["gas"] is False
    assert _reading(gas=37.0).to_api()["gas"] == 37.0
    assert _reading().to_api()["gas"] is None


def test_gas_tag_survives_api_round_trip() -> None:
    flagged = _reading(gas=False)
    numeric = _reading(gas=12.0)

    assert Reading.model_validate(flagged.to_api()).gas == Flag(value=False)
    assert Reading.model_validate(numeric.to_api()).gas == Numeric(value=12.0)


def test_decode_numeric_or_flag_passes_tagged_values_through() -> None:
    assert decode_numeric_or_flag(Flag(value=True)) == Flag(value=True)
    assert decode_numeric_or_flag({"kind": "numeric", "value": 3}) == {"kind": "numeric", "value": 3}
    assert decode_numeric_or_flag("not a number") is None
    assert plain_value(None) is None


def test_motion_sentinels_coerced_to_bool() -> None:
    assert _reading(motion=1).motion is True
    assert _reading(motion=0).motion is False


def test_motion_rejects_non_flag_values() -> None:
    with pytest.raises(ValidationError):
        _reading(motion=5)


def test_sensor_sentinels_become_none() -> None:
    reading = _reading(temperature="--", humidity="", soilMoisture="41.5", waterLevel="abc")

    assert reading.temperature is None
    assert reading.humidity is None
    assert reading.soil_moisture == 41.5
    assert reading.water_level is None


def test_empty_node_id_rejected() -> None:
    with pytest.raises(ValidationError):
        _reading(nodeId="   ")


def test_reading_is_frozen() -> None:
    reading = _reading(temperature=20.0)

    with pytest.raises(ValidationError):
        reading.temperature = 21.0  # type: ignore[misc]


def test_unparseable_timestamps_become_none() -> None:
    reading = _reading(timestamp="garbage", receivedAt=None)

    assert reading.timestamp is None
    assert reading.received_at is None


def test_additional_data_passed_through() -> None:
    extra = {"firmware": "1.2.0", "rssi": -71, "nested": {"a": [1, 2]}}

    assert _reading(additionalData=extra).additional_data == extra


def test_api_dump_uses_camel_case_keys() -> None:
    dumped = _reading(soilMoisture=10, additionalData={"k": "v"}).to_api()

    assert dumped["nodeId"] == "NODE_1"
    assert dumped["adminId"] == "ADMIN_001"
    assert dumped["soilMoisture"] == 10.0
    assert dumped["receivedAt"].startswith("2026-01-01T00:00:00")
    assert "node_id" not in dumped


def test_stored_reading_api_includes_id() -> None:
    stored = StoredReading(id="abc123", reading=_reading())

    assert stored.to_api()["id"] == "abc123"
    assert stored.to_api()["nodeId"] == "NODE_1"


def test_room_payload_maps_to_reading_keys() -> None:
    room = RoomPayload.model_validate(
        {"room_id": 2, "temperature": 22.0, "motion": 1, "rain": 1, "gas": 0, "ts": 1_770_928_447_000}
    )

    data = room.to_reading_input()
    assert data["nodeId"] == "ROOM_2"
    assert data["waterLevel"] == 100.0
    assert data["timestamp"] == 1_770_928_447_000


def test_room_payload_without_rain_leaves_water_level_unset() -> None:
    data = RoomPayload.model_validate({"room_id": 0}).to_reading_input()

    assert data["nodeId"] == "ROOM_0"
    assert "waterLevel" not in data


def test_room_payload_requires_room_id() -> None:
    with pytest.raises(ValidationError):
        RoomPayload.model_validate({"temperature": 20})
