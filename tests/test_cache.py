"""Tests for the cache gateways and single-flight helper."""

import asyncio

import pytest

from app.cache.database import DatabaseCache
from app.cache.memory import MemoryCache
from app.cache.singleflight import SingleFlight


class TestMemoryCache:
    @pytest.mark.asyncio
    async def test_miss(self, cache):
        assert await cache.get("nothing") is None

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, cache, clock):
        await cache.set("k", ["EUR", "GBP"], 60)
        clock.advance(59)
        assert await cache.get("k") == ["EUR", "GBP"]

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, cache, clock):
        await cache.set("k", "v", 60)
        clock.advance(60)
        assert await cache.get("k") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_set_overwrites_and_resets_ttl(self, cache, clock):
        await cache.set("k", "old", 10)
        clock.advance(5)
        await cache.set("k", "new", 10)
        clock.advance(8)
        assert await cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_mutating_a_result_leaves_entry_intact(self, cache):
        stored = [{"type": "iban", "fields": []}]
        await cache.set("k", stored, 60)
        stored.append({"type": "late"})

        result = await cache.get("k")
        result[0]["fields"].append("IBAN")
        result.clear()

        assert await cache.get("k") == [{"type": "iban", "fields": []}]

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit(self):
        cache = MemoryCache()
        await cache.set("k", [], 60)
        assert await cache.get("k") == []


class TestDatabaseCache:
    @pytest.mark.asyncio
    async def test_round_trip(self, session_factory):
        cache = DatabaseCache(session_factory)
        await cache.set("transferwise_available_currencies_1", ["EUR", "INR"], 3600)
        assert await cache.get("transferwise_available_currencies_1") == ["EUR", "INR"]

    @pytest.mark.asyncio
    async def test_miss(self, session_factory):
        assert await DatabaseCache(session_factory).get("missing") is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_absent(self, session_factory):
        cache = DatabaseCache(session_factory)
        await cache.set("k", {"fields": []}, -1)
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, session_factory):
        cache = DatabaseCache(session_factory)
        await cache.set("k", [{"type": "iban"}], 3600)
        await cache.set("k", [{"type": "sort_code"}], 3600)
        assert await cache.get("k") == [{"type": "sort_code"}]


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self):
        flight = SingleFlight()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return ["EUR"]

        results = await asyncio.gather(*(flight.do("k", fetch) for _ in range(5)))

        assert calls == 1
        assert results == [["EUR"]] * 5
        assert not flight.in_flight("k")

    @pytest.mark.asyncio
    async def test_different_keys_fetch_independently(self):
        flight = SingleFlight()
        seen = []

        async def fetch_for(key):
            seen.append(key)
            await asyncio.sleep(0.01)
            return key

        results = await asyncio.gather(
            flight.do("a", lambda: fetch_for("a")),
            flight.do("b", lambda: fetch_for("b")),
        )

        assert results == ["a", "b"]
        assert sorted(seen) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self):
        flight = SingleFlight()

        async def fetch():
            await asyncio.sleep(0.01)
            raise RuntimeError("upstream down")

        results = await asyncio.gather(
            flight.do("k", fetch),
            flight.do("k", fetch),
            return_exceptions=True,
        )

        assert all(isinstance(r, RuntimeError) for r in results)
        assert not flight.in_flight("k")

    @pytest.mark.asyncio
    async def test_sequential_calls_fetch_again(self):
        flight = SingleFlight()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            return calls

        assert await flight.do("k", fetch) == 1
        assert await flight.do("k", fetch) == 2
