import asyncio
import unittest
from unittest.mock import patch

from app.config import Settings
from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.cache.upstash_backend import UpstashCacheBackend


class FakeTimer:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestSharedCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.timer = FakeTimer()
        self.settings = _settings()
        self.cache = SharedCache(
            settings_provider=lambda: self.settings,
            memory_backend=InMemoryCacheBackend(timer=self.timer),
        )

    async def test_miss_runs_producer_and_stores_value(self):
        calls = []

        async def producer():
            calls.append(1)
            return {"hotels": [1, 2]}

        first = await self.cache.with_cache("k", 60, producer)
        second = await self.cache.with_cache("k", 60, producer)

        self.assertEqual(first, {"hotels": [1, 2]})
        self.assertEqual(second, first)
        self.assertEqual(len(calls), 1)

    async def test_concurrent_misses_share_one_fetch(self):
        calls = []
        release = asyncio.Event()

        async def producer():
            calls.append(1)
            await release.wait()
            return "value"

        waiters = [asyncio.ensure_future(self.cache.with_cache("shared", 60, producer)) for _ in range(5)]
        await asyncio.sleep(0)
        self.assertEqual(self.cache.inflight_count(), 1)

        release.set()
        results = await asyncio.gather(*waiters)

        self.assertEqual(results, ["value"] * 5)
        self.assertEqual(len(calls), 1)
        self.assertEqual(self.cache.inflight_count(), 0)

    async def test_failure_is_not_cached_and_reaches_every_waiter(self):
        attempts = []
        release = asyncio.Event()

        async def failing():
            attempts.append(1)
            await release.wait()
            raise RuntimeError("upstream down")

        waiters = [asyncio.ensure_future(self.cache.with_cache("bad", 60, failing)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        self.assertTrue(all(isinstance(r, RuntimeError) for r in results))
        self.assertEqual(len(attempts), 1)
        self.assertIsNone(await self.cache.get("bad"))

        async def recovered():
            return "ok"

        self.assertEqual(await self.cache.with_cache("bad", 60, recovered), "ok")

    async def test_entry_expires_after_ttl(self):
        calls = []

        async def producer():
            calls.append(1)
            return len(calls)

        self.assertEqual(await self.cache.with_cache("ttl", 60, producer), 1)
        self.timer.now += 59
        self.assertEqual(await self.cache.with_cache("ttl", 60, producer), 1)
        self.timer.now += 1
        self.assertEqual(await self.cache.with_cache("ttl", 60, producer), 2)

    async def test_cancelled_caller_does_not_cancel_shared_fetch(self):
        release = asyncio.Event()

        async def producer():
            await release.wait()
            return "done"

        cancelled = asyncio.ensure_future(self.cache.with_cache("c", 60, producer))
        survivor = asyncio.ensure_future(self.cache.with_cache("c", 60, producer))
        await asyncio.sleep(0)

        cancelled.cancel()
        release.set()

        self.assertEqual(await survivor, "done")
        with self.assertRaises(asyncio.CancelledError):
            await cancelled

    def test_empty_injected_backend_is_kept(self):
        backend = InMemoryCacheBackend(timer=self.timer)
        cache = SharedCache(settings_provider=lambda: self.settings, memory_backend=backend)

        self.assertEqual(len(backend), 0)
        self.assertIs(cache.backend(), backend)

    def test_backend_selection_follows_configuration(self):
        self.assertEqual(self.cache.backend_name(), "memory")

        self.settings = _settings(
            upstash_redis_rest_url="https://cache.example.upstash.io",
            upstash_redis_rest_token="token",
        )
        backend = self.cache.backend()
        self.assertIsInstance(backend, UpstashCacheBackend)
        self.assertIs(self.cache.backend(), backend)

        self.settings = _settings()
        self.assertEqual(self.cache.backend_name(), "memory")

    async def test_upstash_backend_is_used_when_configured(self):
        self.settings = _settings(
            upstash_redis_rest_url="https://cache.example.upstash.io",
            upstash_redis_rest_token="token",
        )
        with patch.object(UpstashCacheBackend, "get", return_value=[1, 2, 3]) as mock_get:
            value = await self.cache.with_cache("remote", 60, self.fail_if_called)

        self.assertEqual(value, [1, 2, 3])
        mock_get.assert_awaited_once_with("remote")

    async def fail_if_called(self):
        raise AssertionError("producer should not run on a hit")


class TestInMemoryCacheBackend(unittest.IsolatedAsyncioTestCase):
    async def test_incr_keeps_window_expiry(self):
        timer = FakeTimer()
        backend = InMemoryCacheBackend(timer=timer)

        self.assertEqual(await backend.incr("n", 10), 1)
        timer.now += 5
        self.assertEqual(await backend.incr("n", 10), 2)
        timer.now += 5
        # The window started at the first increment
        self.assertEqual(await backend.incr("n", 10), 1)

    async def test_expired_entries_are_evicted_on_read(self):
        timer = FakeTimer()
        backend = InMemoryCacheBackend(timer=timer)
        await backend.set("a", "x", 1)
        await backend.set("b", "y", 100)

        timer.now += 2

        self.assertEqual(len(backend), 2)
        self.assertIsNone(await backend.get("a"))
        self.assertEqual(len(backend), 1)
        self.assertEqual(await backend.get("b"), "y")
