"""Shared cache and rate limiting."""

from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.rate_limit import RateLimiter, RateLimitResult
from app.infrastructure.cache.shared_cache import SharedCache, get_shared_cache
from app.infrastructure.cache.upstash_backend import UpstashCacheBackend

__all__ = [
    "InMemoryCacheBackend",
    "RateLimiter",
    "RateLimitResult",
    "SharedCache",
    "UpstashCacheBackend",
    "get_shared_cache",
]
