"""
Recipient bank account requirements.

The network describes, per route, which fields a recipient account must
supply. The schema is keyed on a quote, so a throwaway quote for a nominal
amount is created just to obtain a quote id. Results are cached per
(host, target currency) for a day.
"""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.cache.base import CacheGateway
from app.cache.singleflight import SingleFlight
from app.config import settings
from app.engine.errors import ConfigurationError
from app.engine.profiles import ensure_profile, get_active_connected_account
from app.models.records import Host
from app.providers.base import PaymentNetworkClient

logger = logging.getLogger("transfer_engine.requirements")

NOMINAL_QUOTE_AMOUNT = 100


def required_bank_info_cache_key(host_id: int, currency: str) -> str:
    return f"transferwise_required_bank_info_{host_id}_to_{currency}"


async def get_required_bank_information(
    session: AsyncSession,
    host: Host,
    currency: str,
    client: PaymentNetworkClient,
    cache: CacheGateway,
    single_flight: Optional[SingleFlight] = None,
) -> list[dict[str, Any]]:
    """
    Fields required to describe a recipient bank account in ``currency``.

    Raises:
        ConfigurationError: The host has no active connected account.
    """
    cache_key = required_bank_info_cache_key(host.id, currency)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    async def fetch() -> list[dict[str, Any]]:
        connected_account = await get_active_connected_account(session, host.id)
        if not connected_account:
            raise ConfigurationError(host_id=host.id)

        await ensure_profile(session, connected_account, client)
        quote = await client.create_quote(
            connected_account.token,
            profile_id=connected_account.profile_id,
            source_currency=host.currency,
            target_currency=currency,
            target_amount=NOMINAL_QUOTE_AMOUNT,
        )
        required_fields = await client.get_account_requirements(connected_account.token, quote.id)
        await cache.set(cache_key, required_fields, settings.cache_ttl_seconds)
        logger.info("Host %s: cached %s bank requirements (%d account types)", host.id, currency, len(required_fields))
        return required_fields

    if single_flight is not None:
        return await single_flight.do(cache_key, fetch)
    return await fetch()
