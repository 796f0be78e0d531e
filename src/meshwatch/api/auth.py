"""Authorization predicate for protected endpoints.

Credential storage and token issuance live outside this service; the API
only asks "is this caller authorized", through :class:`Authorizer`.
"""

from __future__ import annotations

import logging
import secrets
from typing import Protocol

_logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


class Authorizer(Protocol):
    def is_authorized(self, authorization: str | None) -> bool:
        """Return True if the ``Authorization`` header value grants access."""
        ...


class BearerTokenAuthorizer:
    """Accept ``Authorization: Bearer <token>`` matching a configured token.

    With no token configured every caller is authorized.
    """

    def __init__(self, token: str | None) -> None:
        self._token = token
        if token is None:
            _logger.warning("No access token configured; protected endpoints are open")

    def is_authorized(self, authorization: str | None) -> bool:
        if self._token is None:
            return True
        if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
            return False
        provided = authorization[len(_BEARER_PREFIX) :].strip()
        return secrets.compare_digest(provided.encode(), self._token.encode())
