from abc import ABC, abstractmethod
from typing import Any


class CacheBackend(ABC):
    """Storage behind the shared cache. Values must be JSON-serializable."""

    name: str = ""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        pass

    @abstractmethod
    async def incr(self, key: str, window_seconds: float) -> int:
        """
        Increment a counter and return the new value.

        The first increment of a window starts its expiry.
        """
        pass
