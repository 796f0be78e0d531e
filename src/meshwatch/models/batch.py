"""Ingestion result models."""

from __future__ import annotations

from pydantic import Field

from meshwatch.models._base import MeshBaseModel
from meshwatch.models.reading import Reading


class IngestResult(MeshBaseModel):
    """Outcome of a single-reading ingestion.

    ``record_id`` is only set when the route wrote to the durable store.
    """

    route: str
    reading: Reading
    record_id: str | None = None
    wrote_durable: bool = False
    wrote_live: bool = False


class BatchFailure(MeshBaseModel):
    node_id: str
    reason: str


class BatchResult(MeshBaseModel):
    """Per-item outcome of a batch submission."""

    accepted_count: int = 0
    failed_count: int = 0
    failures: list[BatchFailure] = Field(default_factory=list)
    record_ids: list[str] = Field(default_factory=list, exclude=True)
