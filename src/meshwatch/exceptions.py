"""Custom exception hierarchy for meshwatch."""

from __future__ import annotations


class MeshError(Exception):
    """Base exception for all meshwatch errors."""


class MeshConfigError(MeshError):
    """Invalid or missing configuration."""


class InvalidInputError(MeshError):
    """A reading or batch container failed validation.

    Raised for a missing/empty node identity, a malformed batch container,
    or a sensor field that cannot be coerced to its declared type.
    """

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        self.node_id = node_id
        super().__init__(message)


class UnauthorizedError(MeshError):
    """Caller failed the auth predicate or the shared-secret check."""


class StoreFailureError(MeshError):
    """Durable store read or write failed.

    Never retried internally; the caller decides what to do with it.
    """

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        self.node_id = node_id
        super().__init__(message)


class ReadingNotFoundError(MeshError):
    """No durable reading matched a point lookup."""


class MeshTransportError(MeshError):
    """HTTP-level failure talking to a meshwatch server (network, status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
