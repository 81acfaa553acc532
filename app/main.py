"""
Transfer Engine: cross-border expense payouts through Wise.

Turns an approved expense plus a payout method into a funded Wise
transfer: currency eligibility, two-phase quoting, profile resolution,
recipient/transfer/funding orchestration and cached discovery calls.

Usage:
    async with transferwise_service() as service:
        currencies = await service.get_available_currencies(host)
        execution = await service.pay_expense(payout_method, expense)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.cache.base import CacheGateway
from app.cache.database import DatabaseCache
from app.cache.memory import MemoryCache
from app.config import settings
from app.database import async_session
from app.providers.base import PaymentNetworkClient
from app.providers.wise_client import WiseClient
from app.service import TransferwiseService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("transfer_engine")

# Process-wide: cached discovery data is shared by every request
_memory_cache = MemoryCache()


def build_cache(
    backend: Optional[str] = None,
    session_factory: async_sessionmaker[AsyncSession] = async_session,
) -> CacheGateway:
    backend = (backend or settings.cache_backend).lower()
    if backend == "memory":
        return _memory_cache
    if backend == "database":
        return DatabaseCache(session_factory)
    raise ValueError(f"Unknown cache backend: {backend}")


@asynccontextmanager
async def transferwise_service(
    client: Optional[PaymentNetworkClient] = None,
    cache: Optional[CacheGateway] = None,
) -> AsyncIterator[TransferwiseService]:
    """Open a session and yield a service wired from settings."""
    own_client = client is None
    if own_client:
        client = WiseClient()
    try:
        async with async_session() as session:
            yield TransferwiseService(session, client, cache if cache is not None else build_cache())
    finally:
        if own_client:
            await client.close()
