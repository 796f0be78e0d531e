"""Component wiring for one meshwatch process."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from meshwatch.config import MeshConfig
from meshwatch.ingestion.router import IngestionRouter
from meshwatch.query import QueryFacade
from meshwatch.state.presence import PresenceEvaluator
from meshwatch.state.store import LatestValueStore
from meshwatch.storage.base import ReadingRepository
from meshwatch.storage.memory import InMemoryReadingRepository

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MeshService:
    """Owns the stores and the components built on them.

    Every instance starts with an empty latest-value store; nothing is
    shared between instances, so tests construct a fresh one each.

    Usage::

        service = MeshService(MeshConfig.from_env())
        service.router.ingest({"nodeId": "NODE_1", "temperature": 21.5})
        service.queries.history()
    """

    def __init__(
        self,
        config: MeshConfig | None = None,
        *,
        repository: ReadingRepository | None = None,
        live_store: LatestValueStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or MeshConfig()
        self.live_store = live_store if live_store is not None else LatestValueStore()
        self.repository: ReadingRepository = repository if repository is not None else InMemoryReadingRepository()
        self.presence = PresenceEvaluator(
            self.live_store,
            threshold_seconds=self.config.presence_threshold_seconds,
            clock=clock,
        )
        self.router = IngestionRouter(
            live_store=self.live_store,
            repository=self.repository,
            config=self.config,
            clock=clock,
        )
        self.queries = QueryFacade(
            live_store=self.live_store,
            repository=self.repository,
            presence=self.presence,
            config=self.config,
        )
        _logger.debug(
            "MeshService ready (repository=%s, presence threshold=%ss)",
            type(self.repository).__name__,
            self.config.presence_threshold_seconds,
        )
