"""Pydantic models for readings, queries and ingestion results."""

from meshwatch.models.batch import BatchFailure, BatchResult, IngestResult
from meshwatch.models.query import NodePresence, PresenceSummary, ReadingFilter
from meshwatch.models.reading import Reading, RoomPayload, StoredReading
from meshwatch.models.values import Flag, Numeric, NumericOrFlag, decode_numeric_or_flag, plain_value

__all__ = [
    "BatchFailure",
    "BatchResult",
    "Flag",
    "IngestResult",
    "NodePresence",
    "Numeric",
    "NumericOrFlag",
    "PresenceSummary",
    "Reading",
    "ReadingFilter",
    "RoomPayload",
    "StoredReading",
    "decode_numeric_or_flag",
    "plain_value",
]
