"""Cache backed by the cache_entries table."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.cache.base import CacheGateway
from app.models.records import CacheEntry

logger = logging.getLogger("transfer_engine.cache")


class DatabaseCache(CacheGateway):
    """
    Shares cached discovery data between processes through the database.

    Each operation runs in its own short session so cache traffic never
    joins the caller's transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[Any]:
        async with self._session_factory() as session:
            entry = await session.get(CacheEntry, key)
            if entry is None:
                return None

            expires_at = entry.expires_at
            # SQLite hands back naive datetimes
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= datetime.now(timezone.utc):
                logger.debug("Cache entry expired: %s", key)
                return None
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        async with self._session_factory() as session:
            await session.merge(CacheEntry(key=key, value=value, expires_at=expires_at))
            await session.commit()
