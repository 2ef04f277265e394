import time
from typing import Any, Callable

from app.application.interfaces.cache_backend import CacheBackend


class InMemoryCacheBackend(CacheBackend):
    """
    Process-local map of key -> (value, absolute expiry).

    Expired entries are only dropped when they are read again.
    """

    name = "memory"

    def __init__(self, timer: Callable[[], float] = time.monotonic) -> None:
        self._timer = timer
        self._entries: dict[str, tuple[Any, float]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._timer() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        self._entries[key] = (value, self._timer() + ttl_seconds)

    async def incr(self, key: str, window_seconds: float) -> int:
        current = await self.get(key)
        if current is None:
            await self.set(key, 1, window_seconds)
            return 1
        _, expires_at = self._entries[key]
        self._entries[key] = (current + 1, expires_at)
        return current + 1

    def __len__(self) -> int:
        return len(self._entries)
