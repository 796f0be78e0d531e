"""Per-route write policy.

Each ingestion route names which stores it writes. The gateway relay path
trades durability for ingestion rate (live store only); the direct/admin and
batch paths trade rate for durability (durable store only).

Relay readings are intentionally not persisted durably; keep that unless the
retention requirement for high-frequency samples changes.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import StrEnum


class IngestionRoute(StrEnum):
    DIRECT = "direct"
    RELAY = "relay"
    BATCH = "batch"


@dataclasses.dataclass(frozen=True)
class RoutePolicy:
    writes_durable: bool
    writes_live: bool


DEFAULT_POLICIES: Mapping[IngestionRoute, RoutePolicy] = {
    IngestionRoute.DIRECT: RoutePolicy(writes_durable=True, writes_live=False),
    IngestionRoute.RELAY: RoutePolicy(writes_durable=False, writes_live=True),
    IngestionRoute.BATCH: RoutePolicy(writes_durable=True, writes_live=False),
}


def route_policy(
    route: IngestionRoute,
    policies: Mapping[IngestionRoute, RoutePolicy] = DEFAULT_POLICIES,
) -> RoutePolicy:
    """Return the write policy for *route*."""
    return policies[IngestionRoute(route)]
