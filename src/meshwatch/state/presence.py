"""Presence inference from the latest-value store.

A node is online while its last reading is fresh; the gateway is online
while any node it relays is. There is no heartbeat protocol: freshness of
the latest reading is the only signal.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from meshwatch._constants import DEFAULT_PRESENCE_THRESHOLD_SECONDS
from meshwatch.models.query import NodePresence, ReadingFilter
from meshwatch.models.reading import Reading
from meshwatch.state.store import LatestValueStore


def _utcnow() -> datetime:
    return datetime.now(UTC)


def reference_time(reading: Reading) -> datetime | None:
    """Instant presence is measured from.

    ``received_at`` (server clock) wins over the node-reported
    ``timestamp``, which may be skewed.
    """
    return reading.received_at or reading.timestamp or None


def age_seconds(reading: Reading, now: datetime) -> float | None:
    ref = reference_time(reading)
    if ref is None:
        return None
    return (now - ref).total_seconds()


def is_fresh(reading: Reading | None, now: datetime, threshold_seconds: float) -> bool:
    """Online iff ``now - reference < threshold`` (strict).

    No reading or no usable reference time is offline.
    """
    if reading is None:
        return False
    age = age_seconds(reading, now)
    if age is None:
        return False
    return age < threshold_seconds


class PresenceEvaluator:
    """Derive node and gateway presence from a :class:`LatestValueStore`."""

    def __init__(
        self,
        store: LatestValueStore,
        *,
        threshold_seconds: float = DEFAULT_PRESENCE_THRESHOLD_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._threshold_seconds = threshold_seconds
        self._clock = clock

    @property
    def threshold_seconds(self) -> float:
        return self._threshold_seconds

    def now(self) -> datetime:
        return self._clock()

    def _resolve(self, now: datetime | None, threshold_seconds: float | None) -> tuple[datetime, float]:
        resolved_now = now if now is not None else self._clock()
        if resolved_now.tzinfo is None:
            resolved_now = resolved_now.replace(tzinfo=UTC)
        threshold = threshold_seconds if threshold_seconds is not None else self._threshold_seconds
        return resolved_now, threshold

    def is_online(
        self,
        node_id: str,
        now: datetime | None = None,
        threshold_seconds: float | None = None,
    ) -> bool:
        now, threshold = self._resolve(now, threshold_seconds)
        return is_fresh(self._store.get(node_id), now, threshold)

    def is_gateway_online(
        self,
        now: datetime | None = None,
        threshold_seconds: float | None = None,
    ) -> bool:
        """True iff at least one node in the store is online."""
        now, threshold = self._resolve(now, threshold_seconds)
        return any(is_fresh(reading, now, threshold) for reading in self._store.list_all())

    def node_status(
        self,
        reading_filter: ReadingFilter | None = None,
        now: datetime | None = None,
        threshold_seconds: float | None = None,
    ) -> list[NodePresence]:
        """Presence of every stored node matching *reading_filter*, by ``node_id``."""
        now, threshold = self._resolve(now, threshold_seconds)
        reading_filter = reading_filter or ReadingFilter()
        statuses: list[NodePresence] = []
        for reading in self._store.list_all():
            if not reading_filter.matches(reading.node_id, reading.admin_id):
                continue
            statuses.append(
                NodePresence(
                    node_id=reading.node_id,
                    admin_id=reading.admin_id,
                    online=is_fresh(reading, now, threshold),
                    last_seen=reference_time(reading),
                    age_seconds=age_seconds(reading, now),
                )
            )
        statuses.sort(key=lambda status: status.node_id)
        return statuses
