"""
Cache gateway interface.

Discovery data from the payment network (supported currency pairs,
recipient account requirements) changes rarely and is slow to fetch, so
services keep it behind a key/value store with a TTL. Entries expire on
their own and are never invalidated explicitly.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheGateway(ABC):
    """Abstract key/value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        ...
