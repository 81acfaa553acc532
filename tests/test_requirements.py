"""Tests for recipient bank account requirements."""

import pytest

from app.engine.errors import ConfigurationError
from app.engine.requirements import (
    NOMINAL_QUOTE_AMOUNT,
    get_required_bank_information,
    required_bank_info_cache_key,
)
from app.models.records import Host
from app.providers.mock_provider import DEFAULT_REQUIREMENTS


@pytest.mark.asyncio
async def test_fetches_requirements_through_nominal_quote(seeded_session, host, network, cache):
    required = await get_required_bank_information(seeded_session, host, "EUR", network, cache)

    assert required == DEFAULT_REQUIREMENTS

    quote_call = network.calls_to("create_quote")[0]
    assert quote_call.params["source_currency"] == "USD"
    assert quote_call.params["target_currency"] == "EUR"
    assert quote_call.params["target_amount"] == NOMINAL_QUOTE_AMOUNT
    assert quote_call.params["profile_id"] == 1002

    requirements_call = network.calls_to("get_account_requirements")[0]
    assert requirements_call.params["quote_id"] is not None

    # Throwaway quote: nothing else created
    assert network.call_count("create_transfer") == 0
    assert network.call_count("create_recipient_account") == 0


@pytest.mark.asyncio
async def test_cached_per_host_and_currency(seeded_session, host, network, cache):
    await get_required_bank_information(seeded_session, host, "EUR", network, cache)
    await get_required_bank_information(seeded_session, host, "EUR", network, cache)
    assert network.call_count("get_account_requirements") == 1
    assert network.call_count("create_quote") == 1

    await get_required_bank_information(seeded_session, host, "GBP", network, cache)
    assert network.call_count("get_account_requirements") == 2

    assert await cache.get(required_bank_info_cache_key(host.id, "EUR")) == DEFAULT_REQUIREMENTS
    assert await cache.get(required_bank_info_cache_key(host.id, "GBP")) == DEFAULT_REQUIREMENTS


@pytest.mark.asyncio
async def test_expired_entry_refetched(seeded_session, host, network, cache, clock):
    await get_required_bank_information(seeded_session, host, "EUR", network, cache)
    clock.advance(24 * 60 * 60)
    await get_required_bank_information(seeded_session, host, "EUR", network, cache)

    assert network.call_count("get_account_requirements") == 2


@pytest.mark.asyncio
async def test_no_connected_account(seeded_session, network, cache):
    host = await seeded_session.get(Host, 3)

    with pytest.raises(ConfigurationError):
        await get_required_bank_information(seeded_session, host, "EUR", network, cache)

    assert len(cache) == 0
    assert network.calls == []


def test_cache_key_format():
    assert required_bank_info_cache_key(5, "EUR") == "transferwise_required_bank_info_5_to_EUR"


@pytest.mark.asyncio
async def test_mutating_result_does_not_leak(seeded_session, host, network, cache):
    required = await get_required_bank_information(seeded_session, host, "EUR", network, cache)
    required[0]["fields"].clear()
    required.append({"type": "bogus"})

    assert await get_required_bank_information(seeded_session, host, "EUR", network, cache) == DEFAULT_REQUIREMENTS
    assert DEFAULT_REQUIREMENTS[0]["fields"]
    assert len(DEFAULT_REQUIREMENTS) == 1
