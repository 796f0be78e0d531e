"""HTTP API exposing ingestion and queries."""

from meshwatch.api.app import create_app
from meshwatch.api.auth import Authorizer, BearerTokenAuthorizer

__all__ = ["Authorizer", "BearerTokenAuthorizer", "create_app"]
