"""meshwatch - Real-time ingestion and presence tracking for sensor meshes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("meshwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from meshwatch.config import MeshConfig
from meshwatch.exceptions import (
    InvalidInputError,
    MeshConfigError,
    MeshError,
    MeshTransportError,
    ReadingNotFoundError,
    StoreFailureError,
    UnauthorizedError,
)
from meshwatch.ingestion.router import IngestionRouter
from meshwatch.ingestion.routes import IngestionRoute, RoutePolicy
from meshwatch.models import (
    BatchFailure,
    BatchResult,
    Flag,
    IngestResult,
    NodePresence,
    Numeric,
    PresenceSummary,
    Reading,
    ReadingFilter,
    StoredReading,
)
from meshwatch.query import QueryFacade
from meshwatch.service import MeshService
from meshwatch.state.presence import PresenceEvaluator
from meshwatch.state.store import LatestValueStore
from meshwatch.storage import InMemoryReadingRepository, ReadingRepository

__all__ = [
    "__version__",
    "BatchFailure",
    "BatchResult",
    "Flag",
    "InMemoryReadingRepository",
    "IngestResult",
    "IngestionRoute",
    "IngestionRouter",
    "InvalidInputError",
    "LatestValueStore",
    "MeshConfig",
    "MeshConfigError",
    "MeshError",
    "MeshService",
    "MeshTransportError",
    "NodePresence",
    "Numeric",
    "PresenceEvaluator",
    "PresenceSummary",
    "QueryFacade",
    "Reading",
    "ReadingFilter",
    "ReadingNotFoundError",
    "ReadingRepository",
    "RoutePolicy",
    "StoreFailureError",
    "StoredReading",
    "UnauthorizedError",
]
