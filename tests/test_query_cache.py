"""
Query cache: freshness window, invalidation, shared in-flight fetches and subscriptions
"""

import asyncio

import pytest

from client.query_cache import QueryCache

pytestmark = pytest.mark.client


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingFetcher:
    def __init__(self, results=None):
        self.calls = 0
        self.results = results

    async def __call__(self):
        self.calls += 1
        if self.results is not None:
            return self.results[self.calls - 1]
        return [f"item-{self.calls}"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(stale_time=60, clock=clock)


class TestFreshness:

    async def test_unknown_key_is_stale(self, cache):
        assert cache.is_stale("posts")
        assert cache.get_data("posts") is None

    async def test_fresh_data_is_served_from_cache(self, cache):
        fetcher = CountingFetcher()

        first = await cache.fetch("posts", fetcher)
        second = await cache.fetch("posts", fetcher)

        assert first == second == ["item-1"]
        assert fetcher.calls == 1

    async def test_data_goes_stale_after_window(self, cache, clock):
        fetcher = CountingFetcher()
        await cache.fetch("posts", fetcher)

        clock.advance(59)
        assert not cache.is_stale("posts")

        clock.advance(1)
        assert cache.is_stale("posts")
        assert await cache.fetch("posts", fetcher) == ["item-2"]

    async def test_force_ignores_freshness(self, cache):
        fetcher = CountingFetcher()
        await cache.fetch("posts", fetcher)

        assert await cache.fetch("posts", fetcher, force=True) == ["item-2"]
        assert fetcher.calls == 2

    async def test_keys_are_independent(self, cache):
        await cache.fetch("posts", CountingFetcher())

        assert cache.is_stale("users")


class TestInvalidation:

    async def test_invalidate_forces_next_read_to_refetch(self, cache):
        fetcher = CountingFetcher()
        await cache.fetch("posts", fetcher)

        cache.invalidate("posts")

        assert cache.is_stale("posts")
        assert cache.get_data("posts") == ["item-1"]
        assert await cache.fetch("posts", fetcher) == ["item-2"]
        assert not cache.is_stale("posts")

    async def test_invalidate_unknown_key_is_a_no_op(self, cache):
        cache.invalidate("nothing")

        assert cache.is_stale("nothing")

    async def test_failed_fetch_keeps_previous_data(self, cache):
        await cache.fetch("posts", CountingFetcher())
        cache.invalidate("posts")

        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.fetch("posts", failing)

        assert cache.get_data("posts") == ["item-1"]
        assert cache.is_stale("posts")


class TestInFlightSharing:

    async def test_concurrent_reads_share_one_fetch(self, cache):
        release = asyncio.Event()
        calls = 0

        async def slow_fetcher():
            nonlocal calls
            calls += 1
            await release.wait()
            return ["shared"]

        first = asyncio.ensure_future(cache.fetch("posts", slow_fetcher))
        second = asyncio.ensure_future(cache.fetch("posts", slow_fetcher))
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(first, second) == [["shared"], ["shared"]]
        assert calls == 1

    async def test_invalidation_during_fetch_keeps_result_stale(self, cache):
        server = ["a"]
        release = asyncio.Event()
        started = asyncio.Event()

        async def list_fetcher():
            snapshot = list(server)
            started.set()
            await release.wait()
            return snapshot

        pending = asyncio.ensure_future(cache.fetch("posts", list_fetcher))
        await started.wait()

        server.append("b")
        cache.invalidate("posts")
        release.set()

        assert await pending == ["a"]
        assert cache.is_stale("posts")
        assert await cache.fetch("posts", list_fetcher) == ["a", "b"]
        assert not cache.is_stale("posts")

    async def test_read_after_invalidation_does_not_join_old_fetch(self, cache):
        release = asyncio.Event()
        started = asyncio.Event()
        calls = 0

        async def fetcher():
            nonlocal calls
            calls += 1
            if calls == 1:
                started.set()
                await release.wait()
                return ["old"]
            return ["new"]

        old = asyncio.ensure_future(cache.fetch("posts", fetcher))
        await started.wait()
        cache.invalidate("posts")

        assert await cache.fetch("posts", fetcher) == ["new"]

        release.set()
        assert await old == ["old"]
        assert calls == 2
        assert cache.get_data("posts") == ["new"]
        assert not cache.is_stale("posts")


class TestSubscriptions:

    async def test_listeners_see_sets_and_invalidations(self, cache):
        events = []
        cache.subscribe("posts", lambda key, entry: events.append((key, entry.data, entry.invalidated)))

        await cache.fetch("posts", CountingFetcher())
        cache.invalidate("posts")

        assert events == [("posts", ["item-1"], False), ("posts", ["item-1"], True)]

    async def test_unsubscribe_stops_notifications(self, cache):
        events = []
        unsubscribe = cache.subscribe("posts", lambda key, entry: events.append(key))

        cache.set_data("posts", [])
        unsubscribe()
        cache.set_data("posts", [1])

        assert events == ["posts"]

    async def test_listeners_are_per_key(self, cache):
        events = []
        cache.subscribe("users", lambda key, entry: events.append(key))

        cache.set_data("posts", [])

        assert events == []
