"""
Currency eligibility.

Lists the target currencies a host can pay out in: whatever the network
supports for the host's currency, minus a static blacklist. The result is
cached per host for a day.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.cache.base import CacheGateway
from app.cache.singleflight import SingleFlight
from app.config import settings
from app.engine.errors import ConfigurationError, UnsupportedCurrencyError
from app.engine.profiles import get_active_connected_account
from app.models.records import Host
from app.providers.base import PaymentNetworkClient

logger = logging.getLogger("transfer_engine.currencies")


BLACKLISTED_CURRENCIES: frozenset[str] = frozenset({
    # Only private senders paying private recipients are supported for
    # these. Business sender or business recipient pairs are not.
    "BRL",
    "BDT",
    "PKR",
    # The required-fields schema returned for this currency is incomplete.
    "UYU",
})


def available_currencies_cache_key(host_id: int) -> str:
    return f"transferwise_available_currencies_{host_id}"


def filter_blacklisted(currencies: list[str]) -> list[str]:
    return [c for c in currencies if c not in BLACKLISTED_CURRENCIES]


async def get_available_currencies(
    session: AsyncSession,
    host: Host,
    client: PaymentNetworkClient,
    cache: CacheGateway,
    single_flight: Optional[SingleFlight] = None,
) -> list[str]:
    """
    Target currencies the host's connected account may pay out in.

    Raises:
        ConfigurationError: The host has no active connected account.
        UnsupportedCurrencyError: The network does not list the host's
            currency as a source currency.
    """
    cache_key = available_currencies_cache_key(host.id)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    async def fetch() -> list[str]:
        connected_account = await get_active_connected_account(session, host.id)
        if not connected_account:
            raise ConfigurationError(host_id=host.id)

        pairs = await client.get_currency_pairs(connected_account.token)
        targets = pairs.targets_for(host.currency)
        if targets is None:
            raise UnsupportedCurrencyError(host.currency, host_id=host.id)

        currencies = filter_blacklisted(targets)
        await cache.set(cache_key, currencies, settings.cache_ttl_seconds)
        logger.info("Host %s: %d payable currencies from %s", host.id, len(currencies), host.currency)
        return currencies

    if single_flight is not None:
        return await single_flight.do(cache_key, fetch)
    return await fetch()
