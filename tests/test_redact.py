from __future__ import annotations

from meshwatch._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "nodeId": "NODE_1",
        "apiKey": "secret",
        "X-API-Key": "secret",
        "additionalData": {"token": "abc", "firmware": "1.2.0"},
    }

    redacted = redact_for_log(payload)
    assert redacted["nodeId"] == "NODE_1"
    assert redacted["apiKey"] == "<redacted>"
    assert redacted["X-API-Key"] == "<redacted>"
    assert redacted["additionalData"]["token"] == "<redacted>"
    assert redacted["additionalData"]["firmware"] == "1.2.0"


def test_redact_for_log_truncates_long_strings_in_lists() -> None:
    redacted = redact_for_log({"sensorData": [{"note": "x" * 600}]}, max_string=10)

    note = redacted["sensorData"][0]["note"]
    assert note.startswith("x" * 10)
    assert "<truncated>" in note


def test_redact_for_log_keeps_scalars_and_reprs_other_types() -> None:
    redacted = redact_for_log({"motion": True, "gas": 0, "temperature": 21.5, "note": None, "raw": b"\x01"})

    assert redacted == {"motion": True, "gas": 0, "temperature": 21.5, "note": None, "raw": "b'\\x01'"}
