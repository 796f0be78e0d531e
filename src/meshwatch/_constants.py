"""Internal constants shared across the package."""

#: Gateway identity assigned to readings that arrive without ``adminId``.
DEFAULT_ADMIN_ID = "ADMIN_001"

#: Header carrying the optional shared secret on public ingestion endpoints.
API_KEY_HEADER = "X-API-Key"

#: Node prefix used by the room-based relay firmware (``room_id`` -> ``ROOM_<id>``).
ROOM_NODE_PREFIX = "ROOM_"

#: Placeholder node identity reported for batch items without one.
UNKNOWN_NODE_ID = "unknown"

DEFAULT_PRESENCE_THRESHOLD_SECONDS = 10.0
DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 1000

# Epoch values above this are milliseconds.
MS_THRESHOLD = 1e11

# ``rain`` flag from room firmware maps to a full/empty water level.
RAIN_WATER_LEVEL = 100.0
DRY_WATER_LEVEL = 0.0
