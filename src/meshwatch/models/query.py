"""Query filter and presence result models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator

from meshwatch.ingestion.normalize import safe_str
from meshwatch.models._base import MeshBaseModel


class ReadingFilter(MeshBaseModel):
    """Selection criteria shared by the durable and live query paths.

    Empty strings are treated as "no filter".
    """

    node_id: str | None = None
    admin_id: str | None = None

    @field_validator("node_id", "admin_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        return safe_str(value)

    def matches(self, node_id: str, admin_id: str) -> bool:
        if self.node_id is not None and node_id != self.node_id:
            return False
        return self.admin_id is None or admin_id == self.admin_id


class NodePresence(MeshBaseModel):
    """Presence of one node derived from its latest reading."""

    node_id: str
    admin_id: str
    online: bool
    last_seen: datetime | None = None
    age_seconds: float | None = None


class PresenceSummary(MeshBaseModel):
    """Gateway presence plus per-node presence, ordered by ``node_id``."""

    gateway_online: bool
    threshold_seconds: float
    nodes: list[NodePresence]
