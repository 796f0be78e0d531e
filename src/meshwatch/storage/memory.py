"""In-process durable store.

Reference implementation of :class:`~meshwatch.storage.base.ReadingRepository`
used by default and in tests. Records live as long as the process.
"""

from __future__ import annotations

import bisect
import itertools
import logging
import secrets
import threading
from collections.abc import Iterator
from datetime import UTC, datetime

from meshwatch.models.query import ReadingFilter
from meshwatch.models.reading import Reading, StoredReading

_logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _sort_key(record: StoredReading) -> datetime:
    return record.reading.timestamp or _EPOCH


class InMemoryReadingRepository:
    """Append-only record list kept sorted by ``timestamp`` ascending.

    Equal timestamps keep insertion order, so the newest-first views return
    the later-appended record first.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[StoredReading] = []
        self._keys: list[datetime] = []

    def append(self, reading: Reading) -> str:
        record = StoredReading(id=secrets.token_hex(12), reading=reading)
        key = _sort_key(record)
        with self._lock:
            index = bisect.bisect_right(self._keys, key)
            self._keys.insert(index, key)
            self._records.insert(index, record)
        _logger.debug("Appended reading %s for node %s", record.id, reading.node_id)
        return record.id

    def _newest_first(self, reading_filter: ReadingFilter) -> Iterator[StoredReading]:
        with self._lock:
            records = list(self._records)
        for record in reversed(records):
            if reading_filter.matches(record.reading.node_id, record.reading.admin_id):
                yield record

    def query_latest(self, reading_filter: ReadingFilter) -> StoredReading | None:
        return next(self._newest_first(reading_filter), None)

    def query_history(self, reading_filter: ReadingFilter, limit: int) -> list[StoredReading]:
        if limit <= 0:
            return []
        return list(itertools.islice(self._newest_first(reading_filter), limit))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
