"""
Shared cache with in-flight request coalescing.

``with_cache`` is the entry point adapters use: a hit returns immediately,
a miss runs the producer once per key no matter how many callers are
waiting, stores the value on success and never stores a failure.

The in-flight map lives in this process only. Behind a load balancer each
worker coalesces its own callers; the networked backend still prevents
redundant storage but not duplicate fetches across workers.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, TypeVar

from app.application.interfaces.cache_backend import CacheBackend
from app.config import Settings, get_settings
from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.upstash_backend import UpstashCacheBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _retrieve_exception(task: asyncio.Task) -> None:
    # Waiters may all have been cancelled; keep the loop from warning about
    # an exception nobody awaited.
    if not task.cancelled():
        task.exception()


class SharedCache:
    def __init__(
        self,
        settings_provider: Callable[[], Settings] = get_settings,
        memory_backend: InMemoryCacheBackend | None = None,
    ) -> None:
        self._settings_provider = settings_provider
        self._memory = memory_backend if memory_backend is not None else InMemoryCacheBackend()
        self._upstash: UpstashCacheBackend | None = None
        self._inflight: dict[str, asyncio.Task] = {}

    def backend(self) -> CacheBackend:
        """Pick the backend from the current configuration."""
        settings = self._settings_provider()
        url = settings.upstash_redis_rest_url
        token = settings.upstash_redis_rest_token
        if url and token:
            if self._upstash is None or (self._upstash.url, self._upstash.token) != (url, token):
                self._upstash = UpstashCacheBackend(url, token)
            return self._upstash
        return self._memory

    def backend_name(self) -> str:
        return self.backend().name

    def inflight_count(self) -> int:
        return len(self._inflight)

    async def get(self, key: str) -> Any | None:
        return await self.backend().get(key)

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        await self.backend().set(key, value, ttl_seconds)

    async def with_cache(
        self,
        key: str,
        ttl_seconds: float,
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        cached = await self.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._produce(key, ttl_seconds, producer))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug("Joining in-flight fetch", extra={"key": key})

        # A cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    async def _produce(
        self,
        key: str,
        ttl_seconds: float,
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            value = await producer()
            await self.set(key, value, ttl_seconds)
            return value
        finally:
            self._inflight.pop(key, None)


@lru_cache(maxsize=1)
def get_shared_cache() -> SharedCache:
    return SharedCache()
