"""In-memory latest-value store.

This is the only component that holds live per-node state. It is the source
for the dashboard's all-nodes query and for presence evaluation.
"""

from __future__ import annotations

import threading

from meshwatch.exceptions import InvalidInputError
from meshwatch.models.reading import Reading


class LatestValueStore:
    """Latest reading per ``node_id``, last-write-wins by arrival order.

    ``put`` replaces the entry unconditionally: no compare-and-swap and no
    field merge, so a newer reading with a missing sensor value clears the
    previous one. Readings are frozen, so an entry is always replaced as a
    whole unit.

    Safe for concurrent writers and readers. Writes to different nodes are
    independent; there is no cross-key ordering.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, Reading] = {}

    def put(self, node_id: str, reading: Reading) -> None:
        """Replace the entry for *node_id*."""
        if node_id != reading.node_id:
            raise InvalidInputError(
                f"node_id {node_id!r} does not match reading node {reading.node_id!r}",
                node_id=node_id,
            )
        with self._lock:
            self._entries[node_id] = reading

    def get(self, node_id: str) -> Reading | None:
        with self._lock:
            return self._entries.get(node_id)

    def list_all(self) -> list[Reading]:
        """Snapshot of all entries. Order is unspecified."""
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._entries
