"""Ingestion layer.

This package normalizes gateway payloads and routes accepted readings to the
latest-value store and/or the durable store.
"""

__all__: list[str] = []
