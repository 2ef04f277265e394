"""
Upstash Redis over its REST API.

Every command is a JSON array POSTed to the database URL with a bearer
token; the reply is ``{"result": ...}`` or ``{"error": "..."}``.
"""

import json
import logging
from typing import Any

import httpx

from app.application.interfaces.cache_backend import CacheBackend

logger = logging.getLogger(__name__)


class UpstashCacheBackend(CacheBackend):
    name = "upstash"

    def __init__(self, url: str, token: str, timeout: float = 5.0) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout

    async def _command(self, *command: Any) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.url,
                headers={"Authorization": f"Bearer {self.token}"},
                json=list(command),
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            raise ValueError("Unexpected Upstash reply")
        if payload.get("error"):
            raise ValueError(str(payload["error"]))
        return payload.get("result")

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._command("GET", key)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Cache read failed, treating as miss", extra={"key": key, "error": str(exc)})
            return None

        if not isinstance(raw, str):
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Malformed cache entry ignored", extra={"key": key})
            return None

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        try:
            payload = json.dumps(value, default=str)
            await self._command("SET", key, payload, "PX", int(ttl_seconds * 1000))
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            logger.warning("Cache write failed", extra={"key": key, "error": str(exc)})

    async def incr(self, key: str, window_seconds: float) -> int:
        count = int(await self._command("INCR", key))
        if count == 1:
            await self._command("PEXPIRE", key, int(window_seconds * 1000))
        return count
