"""
Unit tests for the in-memory TTL cache used for the ferry fare tables.

Tests cover:
- get / set and TTL expiry
- get_or_load: caches empty lists, shares one load between concurrent misses
- Size cap: expired entries go first, then the oldest
- Prefix-based invalidation
- Disabled mode
"""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from apex_backoffice.core.cache import TTLCache


def _expire(cache: TTLCache, key: str) -> None:
    _, value = cache._entries[key]
    cache._entries[key] = (time.monotonic() - 1.0, value)


class TestTTLCacheBasic:
    def test_set_and_get(self, test_cache: TTLCache):
        test_cache.set("vehicle_types:all", ["Saloon car"])
        assert test_cache.get("vehicle_types:all") == ["Saloon car"]

    def test_miss_returns_none(self, test_cache: TTLCache):
        assert test_cache.get("passenger_types:all") is None

    def test_expired_entry_is_dropped(self, test_cache: TTLCache):
        test_cache.set("k", "v")
        _expire(test_cache, "k")
        assert test_cache.get("k") is None
        assert len(test_cache) == 0


class TestGetOrLoad:
    @pytest.mark.asyncio
    async def test_loads_once_then_serves_from_cache(self, test_cache: TTLCache):
        loader = AsyncMock(return_value=["Adult", "Child"])
        first = await test_cache.get_or_load("passenger_types:all", loader)
        second = await test_cache.get_or_load("passenger_types:all", loader)
        assert first == second == ["Adult", "Child"]
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_list_is_cached(self, test_cache: TTLCache):
        loader = AsyncMock(return_value=[])
        await test_cache.get_or_load("vehicle_types:all", loader)
        assert await test_cache.get_or_load("vehicle_types:all", loader) == []
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_load(self, test_cache: TTLCache):
        calls = 0

        async def slow_loader():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return ["Truck"]

        results = await asyncio.gather(
            *(test_cache.get_or_load("vehicle_types:all", slow_loader) for _ in range(5))
        )
        assert calls == 1
        assert all(r == ["Truck"] for r in results)

    @pytest.mark.asyncio
    async def test_reloads_after_expiry(self, test_cache: TTLCache):
        loader = AsyncMock(side_effect=[["old"], ["new"]])
        await test_cache.get_or_load("vehicle_types:all", loader)
        _expire(test_cache, "vehicle_types:all")
        assert await test_cache.get_or_load("vehicle_types:all", loader) == ["new"]

    @pytest.mark.asyncio
    async def test_disabled_cache_always_loads(self, disabled_cache: TTLCache):
        loader = AsyncMock(return_value=["Truck"])
        await disabled_cache.get_or_load("vehicle_types:all", loader)
        await disabled_cache.get_or_load("vehicle_types:all", loader)
        assert loader.await_count == 2
        assert len(disabled_cache) == 0


class TestSizeCap:
    def test_drops_oldest_when_full(self):
        cache = TTLCache(ttl=30.0, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_expired_entries_go_before_live_ones(self):
        cache = TTLCache(ttl=30.0, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        _expire(cache, "b")
        cache.set("c", 3)
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_overwrite_does_not_evict(self):
        cache = TTLCache(ttl=30.0, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert cache.get("a") == 10
        assert cache.get("b") == 2


class TestInvalidation:
    def test_invalidate_by_prefix(self, test_cache: TTLCache):
        test_cache.set("vehicle_types:all", [1])
        test_cache.set("passenger_types:all", [2])
        assert test_cache.invalidate("vehicle_types:") == 1
        assert test_cache.get("vehicle_types:all") is None
        assert test_cache.get("passenger_types:all") == [2]

    def test_invalidate_multiple_prefixes(self, test_cache: TTLCache):
        test_cache.set("vehicle_types:all", [1])
        test_cache.set("passenger_types:all", [2])
        test_cache.set("other", 3)
        assert test_cache.invalidate("vehicle_types:", "passenger_types:") == 2
        assert test_cache.get("other") == 3

    def test_clear(self, test_cache: TTLCache):
        test_cache.set("a", 1)
        test_cache.clear()
        assert test_cache.get("a") is None

    def test_describe(self, test_cache: TTLCache):
        test_cache.set("a", 1)
        assert test_cache.describe() == {"enabled": True, "entries": 1, "ttl_seconds": 30.0}
