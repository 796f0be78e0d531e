"""Read paths served to the HTTP layer.

History and per-node point lookups go to the durable store. The all-nodes
view and presence go to the latest-value store only; that view is what the
dashboard polls every second, so it never touches the durable store.
"""

from __future__ import annotations

import logging
from operator import attrgetter

from meshwatch.config import MeshConfig
from meshwatch.exceptions import InvalidInputError, ReadingNotFoundError, StoreFailureError
from meshwatch.models.query import PresenceSummary, ReadingFilter
from meshwatch.models.reading import Reading, StoredReading
from meshwatch.state.presence import PresenceEvaluator
from meshwatch.state.store import LatestValueStore
from meshwatch.storage.base import ReadingRepository

_logger = logging.getLogger(__name__)

_by_node_id = attrgetter("node_id")


class QueryFacade:
    def __init__(
        self,
        *,
        live_store: LatestValueStore,
        repository: ReadingRepository,
        presence: PresenceEvaluator,
        config: MeshConfig | None = None,
    ) -> None:
        self._live_store = live_store
        self._repository = repository
        self._presence = presence
        self._config = config or MeshConfig()

    def history(self, reading_filter: ReadingFilter | None = None, limit: int | None = None) -> list[StoredReading]:
        """Durable readings matching *reading_filter*, newest ``timestamp`` first.

        ``limit`` defaults to ``history_default_limit`` and is capped at
        ``history_max_limit``.
        """
        if limit is None:
            limit = self._config.history_default_limit
        if limit <= 0:
            raise InvalidInputError("limit must be positive")
        limit = min(limit, self._config.history_max_limit)
        try:
            return self._repository.query_history(reading_filter or ReadingFilter(), limit)
        except StoreFailureError:
            raise
        except Exception as exc:
            _logger.error("History query failed", exc_info=True)
            raise StoreFailureError(f"History query failed: {exc}") from exc

    def latest_for_node(self, reading_filter: ReadingFilter) -> StoredReading:
        """Most recent durable reading for ``reading_filter.node_id``.

        Raises
        ------
        InvalidInputError
            No node identity in the filter.
        ReadingNotFoundError
            Nothing matched.
        """
        if reading_filter.node_id is None:
            raise InvalidInputError("Node ID or Device ID is required")
        try:
            record = self._repository.query_latest(reading_filter)
        except StoreFailureError:
            raise
        except Exception as exc:
            _logger.error("Latest lookup failed for node %s", reading_filter.node_id, exc_info=True)
            raise StoreFailureError(f"Latest lookup failed: {exc}", node_id=reading_filter.node_id) from exc
        if record is None:
            raise ReadingNotFoundError("No data found")
        return record

    def latest_all_nodes(self, reading_filter: ReadingFilter | None = None) -> list[Reading]:
        """Latest reading of every node from the live store, by ``node_id``.

        Only ``admin_id`` of the filter applies here.
        """
        readings = self._live_store.list_all()
        admin_id = reading_filter.admin_id if reading_filter is not None else None
        if admin_id is not None:
            readings = [reading for reading in readings if reading.admin_id == admin_id]
        readings.sort(key=_by_node_id)
        return readings

    def presence(self, reading_filter: ReadingFilter | None = None) -> PresenceSummary:
        """Gateway presence plus per-node presence.

        With an ``admin_id`` filter, the gateway flag covers that gateway's
        nodes only.
        """
        now = self._presence.now()
        admin_id = reading_filter.admin_id if reading_filter is not None else None
        nodes = self._presence.node_status(ReadingFilter(admin_id=admin_id), now)
        if admin_id is None:
            gateway_online = self._presence.is_gateway_online(now)
        else:
            gateway_online = any(node.online for node in nodes)
        return PresenceSummary(
            gateway_online=gateway_online,
            threshold_seconds=self._presence.threshold_seconds,
            nodes=nodes,
        )
