"""In-process TTL cache."""

import copy
import time
from typing import Any, Callable, Optional

from app.cache.base import CacheGateway


class MemoryCache(CacheGateway):
    """
    Dict-backed cache with monotonic-clock expiry.

    Values are deep-copied on the way in and out, so callers mutating a
    result never touch the stored entry. Expired entries are dropped
    lazily on read. The clock is injectable so
    tests can move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, copy.deepcopy(value))

    def __len__(self) -> int:
        return len(self._entries)
