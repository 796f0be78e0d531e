from __future__ import annotations

from datetime import UTC, datetime, timedelta

from meshwatch.models.query import ReadingFilter
from meshwatch.models.reading import Reading
from meshwatch.state.presence import PresenceEvaluator, reference_time
from meshwatch.state.store import LatestValueStore

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


def _reading(
    node_id: str,
    *,
    received_at: object = None,
    timestamp: object = None,
    admin_id: str = "ADMIN_001",
) -> Reading:
    return Reading.model_validate(
        {"nodeId": node_id, "adminId": admin_id, "receivedAt": received_at, "timestamp": timestamp}
    )


def _evaluator(store: LatestValueStore, threshold: float = 10.0) -> PresenceEvaluator:
    return PresenceEvaluator(store, threshold_seconds=threshold, clock=lambda: NOW)


def test_absent_node_is_offline() -> None:
    evaluator = _evaluator(LatestValueStore())

    assert evaluator.is_online("NODE_1", NOW, 10.0) is False


def test_unparseable_reference_time_is_offline() -> None:
    store = LatestValueStore()
    store.put("NODE_1", _reading("NODE_1", received_at="not-a-date", timestamp="also-bad"))

    assert evaluator_online(store, "NODE_1") is False


def evaluator_online(store: LatestValueStore, node_id: str) -> bool:
    return _evaluator(store).is_online(node_id, NOW, 10.0)


def test_received_at_preferred_over_device_timestamp() -> None:
    store = LatestValueStore()
    # Device clock claims a fresh reading, but the server saw it long ago.
    reading = _reading("NODE_1", received_at=NOW - timedelta(minutes=5), timestamp=NOW)
    store.put("NODE_1", reading)

    assert reference_time(reading) == NOW - timedelta(minutes=5)
    assert evaluator_online(store, "NODE_1") is False


def test_timestamp_used_when_received_at_missing() -> None:
    store = LatestValueStore()
    store.put("NODE_1", _reading("NODE_1", timestamp=NOW - timedelta(seconds=3)))

    assert evaluator_online(store, "NODE_1") is True


def test_online_boundary_is_strict() -> None:
    store = LatestValueStore()
    store.put("NODE_1", _reading("NODE_1", received_at=NOW - timedelta(seconds=10)))
    evaluator = _evaluator(store)

    assert evaluator.is_online("NODE_1", NOW - timedelta(microseconds=1), 10.0) is True
    assert evaluator.is_online("NODE_1", NOW, 10.0) is False
    assert evaluator.is_online("NODE_1", NOW + timedelta(seconds=1), 10.0) is False


def test_defaults_come_from_clock_and_configured_threshold() -> None:
    store = LatestValueStore()
    store.put("NODE_1", _reading("NODE_1", received_at=NOW - timedelta(seconds=20)))

    assert _evaluator(store, threshold=10.0).is_online("NODE_1") is False
    assert _evaluator(store, threshold=30.0).is_online("NODE_1") is True


def test_gateway_offline_when_store_empty() -> None:
    assert _evaluator(LatestValueStore()).is_gateway_online(NOW, 10.0) is False


def test_gateway_online_iff_any_node_online() -> None:
    store = LatestValueStore()
    store.put("NODE_1", _reading("NODE_1", received_at=NOW - timedelta(seconds=60)))
    store.put("NODE_2", _reading("NODE_2", received_at=NOW - timedelta(seconds=30)))
    evaluator = _evaluator(store)

    assert evaluator.is_gateway_online(NOW, 10.0) is False

    store.put("NODE_2", _reading("NODE_2", received_at=NOW - timedelta(seconds=1)))

    assert evaluator.is_gateway_online(NOW, 10.0) is True


def test_node_status_sorted_and_filtered() -> None:
    store = LatestValueStore()
    store.put("NODE_B", _reading("NODE_B", received_at=NOW - timedelta(seconds=2)))
    store.put("NODE_A", _reading("NODE_A", received_at=NOW - timedelta(seconds=50)))
    store.put("NODE_C", _reading("NODE_C", received_at=NOW, admin_id="ADMIN_002"))
    evaluator = _evaluator(store)

    statuses = evaluator.node_status(ReadingFilter(admin_id="ADMIN_001"))

    assert [s.node_id for s in statuses] == ["NODE_A", "NODE_B"]
    assert [s.online for s in statuses] == [False, True]
    assert statuses[0].age_seconds == 50.0
