"""Durable store interface.

The durable store is an opaque append-only history of readings. The
ingestion router and query facade only depend on this protocol, so tests
and alternative backends can be passed in without touching either.
"""

from __future__ import annotations

from typing import Protocol

from meshwatch.models.query import ReadingFilter
from meshwatch.models.reading import Reading, StoredReading


class ReadingRepository(Protocol):
    """Structural interface for durable reading storage.

    Implementations raise :class:`meshwatch.exceptions.StoreFailureError`
    on backend failures. Results are ordered newest ``timestamp`` first.
    """

    def append(self, reading: Reading) -> str:
        """Persist *reading* and return its record id."""
        ...

    def query_latest(self, reading_filter: ReadingFilter) -> StoredReading | None: ...

    def query_history(self, reading_filter: ReadingFilter, limit: int) -> list[StoredReading]: ...
