"""Fixed-window request counters kept in the shared cache backend."""

import logging
from dataclasses import dataclass

import httpx

from app.infrastructure.cache.shared_cache import SharedCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


class RateLimiter:
    def __init__(self, cache: SharedCache) -> None:
        self._cache = cache

    async def hit(self, key: str, limit: int, window_seconds: float) -> RateLimitResult:
        backend = self._cache.backend()
        try:
            count = await backend.incr(f"ratelimit:{key}", window_seconds)
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            # Counter store unreachable: let the request through
            logger.warning(
                "Rate limit counter unavailable",
                extra={"key": key, "backend": backend.name, "error": str(exc)},
            )
            return RateLimitResult(allowed=True, remaining=limit)

        return RateLimitResult(allowed=count <= limit, remaining=max(0, limit - count))
