import logging
import re
from abc import abstractmethod
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from pybreaker import CircuitBreaker

from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.supplier_adapter import SupplierAdapter
from app.config import Settings
from app.domain.errors import (
    MalformedSupplierResponseError,
    SupplierErrorClass,
    SupplierNotConfiguredError,
    SupplierRequestError,
)
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.circuit_breaker import (
    CircuitBreakerError,
    call_with_breaker,
    get_supplier_breaker,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUOTA_STATUS_CODES = frozenset({401, 403, 429})


def counts_against_circuit(exc: BaseException) -> bool:
    """Only outages trip the breaker; a 4xx means the supplier is up."""
    if not isinstance(exc, SupplierRequestError):
        return False
    return exc.status_code is None or exc.status_code >= 500


class RemoteSupplierAdapter(SupplierAdapter):
    """
    Shared plumbing for HTTP suppliers: auth hook, timeout, circuit breaker,
    error classification and the fall-back-to-local degradation policy.
    """

    code = ""
    quota_pattern: re.Pattern[str] = re.compile(r"quota|rate limit|too many requests", re.IGNORECASE)

    def __init__(
        self,
        settings: Settings,
        cache: SharedCache,
        fallback: SupplierAdapter,
        clock: Clock | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._fallback = fallback
        self._clock = clock or SystemClock()
        self._breaker = breaker or get_supplier_breaker(self.code)
        self._timeout = settings.supplier_timeout_seconds

    @property
    @abstractmethod
    def base_url(self) -> str:
        pass

    def _auth_headers(self) -> dict[str, str]:
        return {}

    def _auth(self) -> tuple[str, str] | None:
        return None

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        return await self._call("POST", path, payload=payload)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._call("GET", path, params=params)

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self.is_configured:
            raise SupplierNotConfiguredError(self.code)
        try:
            return await call_with_breaker(
                self._breaker,
                self._send,
                method,
                path,
                is_failure=counts_against_circuit,
                **kwargs,
            )
        except CircuitBreakerError as exc:
            raise SupplierRequestError(self.code, "circuit breaker open", circuit_open=True) from exc

    async def _send(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **self._auth_headers(),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                if method == "GET":
                    response = await client.get(url, params=params, headers=headers, auth=self._auth())
                else:
                    response = await client.post(url, json=payload, headers=headers, auth=self._auth())
        except httpx.TimeoutException as exc:
            logger.warning(
                "Supplier request timeout",
                extra={"supplier": self.code, "path": path, "timeout": self._timeout},
            )
            raise SupplierRequestError(self.code, f"timeout after {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise SupplierRequestError(self.code, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            logger.warning(
                "Supplier returned an error status",
                extra={"supplier": self.code, "path": path, "status_code": response.status_code},
            )
            raise SupplierRequestError(
                self.code,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedSupplierResponseError(self.code, "body is not JSON") from exc

    def classify_error(self, exc: BaseException) -> SupplierErrorClass:
        if isinstance(exc, SupplierNotConfiguredError):
            return SupplierErrorClass.QUOTA
        if not isinstance(exc, SupplierRequestError):
            return SupplierErrorClass.FATAL
        if exc.circuit_open or exc.status_code is None:
            return SupplierErrorClass.TRANSIENT
        if exc.status_code in QUOTA_STATUS_CODES or self.quota_pattern.search(exc.body):
            return SupplierErrorClass.QUOTA
        if exc.status_code >= 500:
            return SupplierErrorClass.TRANSIENT
        return SupplierErrorClass.FATAL

    async def _degrade(
        self,
        operation: str,
        exc: Exception,
        fallback: Callable[[], Awaitable[T]],
        empty: T,
    ) -> T:
        error_class = self.classify_error(exc)
        if error_class == SupplierErrorClass.FATAL:
            logger.error(
                "Supplier call failed",
                exc_info=exc,
                extra={"supplier": self.code, "operation": operation},
            )
            return empty

        logger.warning(
            "Supplier unavailable, falling back to local inventory",
            extra={
                "supplier": self.code,
                "operation": operation,
                "error_class": error_class.value,
                "error": str(exc),
            },
        )
        return await fallback()
