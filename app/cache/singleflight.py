"""
Per-key de-duplication of concurrent fetches.

When several coroutines miss the cache for the same key at once, only the
first one calls upstream; the rest await its result. Different keys never
wait on each other.
"""

import asyncio
from typing import Any, Awaitable, Callable


class SingleFlight:
    def __init__(self):
        self._pending: dict[str, asyncio.Future] = {}

    async def do(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            result = await fetch()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure does not warn on GC
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._pending[key]

    def in_flight(self, key: str) -> bool:
        return key in self._pending
