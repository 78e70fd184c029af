"""Tests for the client-side query cache."""

import asyncio

import pytest

from cardreveal.services.query_cache import CachedQuery, QueryCache


class CountingFetcher:
    def __init__(self, values: list) -> None:
        self.values = values
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        value = self.values[min(self.calls - 1, len(self.values) - 1)]
        if isinstance(value, Exception):
            raise value
        return value


class TestCachedQuery:
    async def test_fetches_once_until_invalidated(self) -> None:
        fetcher = CountingFetcher(["v1", "v2"])
        query = CachedQuery("profile", fetcher)

        assert await query.get() == "v1"
        assert await query.get() == "v1"
        assert fetcher.calls == 1

        query.invalidate()
        assert query.is_stale
        assert await query.get() == "v2"
        assert fetcher.calls == 2

    async def test_peek_never_fetches(self) -> None:
        fetcher = CountingFetcher(["v1"])
        query = CachedQuery("profile", fetcher)

        assert query.peek() is None
        assert fetcher.calls == 0

    async def test_initial_value_is_fresh(self) -> None:
        fetcher = CountingFetcher(["remote"])
        query = CachedQuery("profile", fetcher, initial="seeded")

        assert await query.get() == "seeded"
        assert fetcher.calls == 0

    async def test_concurrent_gets_share_fetch(self) -> None:
        fetcher = CountingFetcher(["v1"])
        query = CachedQuery("profile", fetcher)

        results = await asyncio.gather(query.get(), query.get(), query.get())

        assert results == ["v1", "v1", "v1"]
        assert fetcher.calls == 1

    async def test_failed_fetch_stays_stale(self) -> None:
        fetcher = CountingFetcher([RuntimeError("down"), "v1"])
        query = CachedQuery("profile", fetcher)

        with pytest.raises(RuntimeError):
            await query.get()
        assert query.is_stale
        assert await query.get() == "v1"


class TestQueryCache:
    def test_invalidate_skips_unknown_keys(self) -> None:
        cache = QueryCache()
        cache.register("collectibles", CountingFetcher([[]]), initial=[])

        assert cache.invalidate("collectibles", "nope") == ["collectibles"]
        assert cache.query("collectibles").is_stale

    def test_peek_unknown_key(self) -> None:
        assert QueryCache().peek("collectibles") is None

    def test_query_unknown_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryCache().query("collectibles")

    async def test_refetch_only_stale(self) -> None:
        cache = QueryCache()
        stale = CountingFetcher(["fresh"])
        fresh = CountingFetcher(["unused"])
        cache.register("collectibles", stale)
        cache.register("profile", fresh, initial=100)

        outcome = await cache.refetch("collectibles", "profile")

        assert outcome == {"collectibles": True}
        assert cache.peek("collectibles") == "fresh"
        assert fresh.calls == 0

    async def test_refetch_failure_isolated(self) -> None:
        cache = QueryCache()
        cache.register("collectibles", CountingFetcher([RuntimeError("down")]))
        cache.register("profile", CountingFetcher([250]))

        outcome = await cache.refetch("collectibles", "profile")

        assert outcome == {"collectibles": False, "profile": True}
        assert cache.query("collectibles").is_stale
        assert await cache.get("profile") == 250


class TestNoneResults:
    async def test_none_result_is_cached(self) -> None:
        fetcher = CountingFetcher([None])
        query = CachedQuery("rewards", fetcher)

        assert await query.get() is None
        assert await query.get() is None
        assert fetcher.calls == 1
        assert not query.is_stale
