"""Tests for InMemoryCache and the shared local read-through layer."""

import pytest

from dexfeeds.cache.memory import InMemoryCache


class TestInMemoryCache:
    """Tests for TTL semantics."""

    @pytest.mark.asyncio
    async def test_get_returns_value_before_expiry(self, memory_cache, clock):
        await memory_cache.setex("native", 1, "native_orderbook", 5, "[]")

        clock.advance(4)

        assert await memory_cache.get("native", 1, "native_orderbook") == "[]"

    @pytest.mark.asyncio
    async def test_get_returns_none_after_expiry(self, memory_cache, clock):
        await memory_cache.setex("native", 1, "native_orderbook", 5, "[]")

        clock.advance(5)

        assert await memory_cache.get("native", 1, "native_orderbook") is None
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_setex_replaces_value_and_ttl(self, memory_cache, clock):
        await memory_cache.setex("native", 1, "k", 5, "old")
        clock.advance(4)
        await memory_cache.setex("native", 1, "k", 5, "new")
        clock.advance(4)

        assert await memory_cache.get("native", 1, "k") == "new"

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, memory_cache):
        assert await memory_cache.get("renegade", 42161, "renegade_levels") is None

    @pytest.mark.asyncio
    async def test_invalid_ttl_rejected(self, memory_cache):
        with pytest.raises(ValueError):
            await memory_cache.setex("native", 1, "k", 0, "v")

    @pytest.mark.asyncio
    async def test_non_string_value_rejected(self, memory_cache):
        with pytest.raises(ValueError):
            await memory_cache.setex("native", 1, "k", 5, {"a": 1})

    @pytest.mark.asyncio
    async def test_purge_expired(self, memory_cache, clock):
        await memory_cache.setex("native", 1, "short", 1, "a")
        await memory_cache.setex("native", 1, "long", 60, "b")
        clock.advance(2)

        removed = await memory_cache.purge_expired()

        assert removed == 1
        assert len(memory_cache) == 1


class TestLocalReadThrough:
    """Tests for get_and_cache_locally."""

    @pytest.mark.asyncio
    async def test_local_copy_served_within_local_ttl(self, memory_cache, clock):
        await memory_cache.setex("renegade", 42161, "levels", 30, "v1")
        assert await memory_cache.get_and_cache_locally("renegade", 42161, "levels", 10) == "v1"

        # Bypass setex so the local copy is not dropped
        await memory_cache._store("renegade", 42161, "levels", "v2", clock() + 30)
        clock.advance(5)

        assert await memory_cache.get_and_cache_locally("renegade", 42161, "levels", 10) == "v1"

        clock.advance(6)
        assert await memory_cache.get_and_cache_locally("renegade", 42161, "levels", 10) == "v2"

    @pytest.mark.asyncio
    async def test_local_copy_never_outlives_remote_entry(self, memory_cache, clock):
        await memory_cache.setex("renegade", 42161, "levels", 3, "v1")
        assert await memory_cache.get_and_cache_locally("renegade", 42161, "levels", 60) == "v1"

        clock.advance(3)

        assert await memory_cache.get_and_cache_locally("renegade", 42161, "levels", 60) is None

    @pytest.mark.asyncio
    async def test_setex_drops_local_copy(self, memory_cache):
        await memory_cache.setex("native", 1, "k", 30, "v1")
        await memory_cache.get_and_cache_locally("native", 1, "k", 60)

        await memory_cache.setex("native", 1, "k", 30, "v2")

        assert await memory_cache.get_and_cache_locally("native", 1, "k", 60) == "v2"

    @pytest.mark.asyncio
    async def test_miss_not_cached(self, memory_cache):
        assert await memory_cache.get_and_cache_locally("native", 1, "k", 60) is None

        await memory_cache.setex("native", 1, "k", 30, "v")

        assert await memory_cache.get_and_cache_locally("native", 1, "k", 60) == "v"

    def test_default_clock_is_wall_time(self):
        cache = InMemoryCache()

        assert cache._clock() > 1_600_000_000
