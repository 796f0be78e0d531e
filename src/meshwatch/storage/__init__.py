"""Durable store collaborators."""

from meshwatch.storage.base import ReadingRepository
from meshwatch.storage.memory import InMemoryReadingRepository

__all__ = ["InMemoryReadingRepository", "ReadingRepository"]
