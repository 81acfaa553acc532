"""Tests for currency eligibility and its cache."""

import asyncio

import pytest

from app.cache.singleflight import SingleFlight
from app.config import settings
from app.engine.currencies import (
    BLACKLISTED_CURRENCIES,
    available_currencies_cache_key,
    filter_blacklisted,
    get_available_currencies,
)
from app.engine.errors import ConfigurationError, UnsupportedCurrencyError
from app.models.records import Host
from app.providers.mock_provider import MockPaymentNetwork


def test_blacklist_contents():
    assert BLACKLISTED_CURRENCIES == {"BRL", "BDT", "PKR", "UYU"}


def test_filter_keeps_order():
    assert filter_blacklisted(["EUR", "BRL", "GBP", "UYU", "INR"]) == ["EUR", "GBP", "INR"]


@pytest.mark.asyncio
async def test_available_currencies(seeded_session, host, network, cache):
    currencies = await get_available_currencies(seeded_session, host, network, cache)

    assert currencies == ["EUR", "GBP", "INR", "JPY", "MXN"]
    assert network.calls_to("get_currency_pairs")[0].token == "token-host-1"


@pytest.mark.asyncio
async def test_blacklisted_never_returned(seeded_session, host, cache):
    network = MockPaymentNetwork(currency_pairs={"USD": sorted(BLACKLISTED_CURRENCIES) + ["EUR"]}, latency_ms=0)
    currencies = await get_available_currencies(seeded_session, host, network, cache)

    assert currencies == ["EUR"]
    assert not BLACKLISTED_CURRENCIES & set(currencies)


@pytest.mark.asyncio
async def test_cached_for_a_day(seeded_session, host, network, cache):
    first = await get_available_currencies(seeded_session, host, network, cache)
    second = await get_available_currencies(seeded_session, host, network, cache)

    assert network.call_count("get_currency_pairs") == 1
    assert second == first
    assert await cache.get(available_currencies_cache_key(host.id)) == first


@pytest.mark.asyncio
async def test_refetched_after_expiry(seeded_session, host, network, cache, clock):
    await get_available_currencies(seeded_session, host, network, cache)
    clock.advance(settings.cache_ttl_seconds + 1)
    await get_available_currencies(seeded_session, host, network, cache)

    assert network.call_count("get_currency_pairs") == 2


@pytest.mark.asyncio
async def test_cache_is_per_host(seeded_session, host, network, cache):
    await cache.set(available_currencies_cache_key(99), ["NZD"], 60)
    currencies = await get_available_currencies(seeded_session, host, network, cache)

    assert "NZD" not in currencies
    assert network.call_count("get_currency_pairs") == 1


@pytest.mark.asyncio
async def test_no_connected_account(seeded_session, network, cache):
    host = await seeded_session.get(Host, 3)

    with pytest.raises(ConfigurationError):
        await get_available_currencies(seeded_session, host, network, cache)

    assert len(cache) == 0
    assert network.calls == []


@pytest.mark.asyncio
async def test_soft_deleted_account_is_not_connected(seeded_session, network, cache):
    host = await seeded_session.get(Host, 2)

    with pytest.raises(ConfigurationError):
        await get_available_currencies(seeded_session, host, network, cache)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_unsupported_source_currency(seeded_session, host, cache):
    network = MockPaymentNetwork(currency_pairs={"EUR": ["USD"], "GBP": ["EUR"]}, latency_ms=0)

    with pytest.raises(UnsupportedCurrencyError) as exc_info:
        await get_available_currencies(seeded_session, host, network, cache)

    assert exc_info.value.currency == "USD"
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_single_flight_shares_concurrent_misses(seeded_session, host, cache):
    network = MockPaymentNetwork(latency_ms=20)
    flight = SingleFlight()

    results = await asyncio.gather(
        get_available_currencies(seeded_session, host, network, cache, flight),
        get_available_currencies(seeded_session, host, network, cache, flight),
        get_available_currencies(seeded_session, host, network, cache, flight),
    )

    assert network.call_count("get_currency_pairs") == 1
    assert results[0] == results[1] == results[2]
    assert not flight.in_flight(available_currencies_cache_key(host.id))
