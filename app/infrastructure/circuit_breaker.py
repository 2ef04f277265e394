"""
Circuit Breaker configuration for external service calls.

One breaker per remote supplier plus one for Stripe, so a failing supplier
never opens the circuit of a healthy one.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Reset timeout elapsed, the next request is let through

Configuration:
- fail_max: Number of consecutive failures before opening circuit
- reset_timeout: Seconds to wait before attempting recovery
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

import pybreaker
from pybreaker import CircuitBreaker, CircuitBreakerError

logger = logging.getLogger(__name__)

T = TypeVar("T")

FAIL_MAX = 5
RESET_TIMEOUT_SECONDS = 60


def log_circuit_state_change(breaker_name: str, old_state: str | None, new_state: str):
    """Log circuit breaker state changes for monitoring and alerting."""
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        },
    )


class StateChangeListener(pybreaker.CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            old_state.name if old_state is not None else None,
            new_state.name,
        )


def _build_breaker(name: str) -> CircuitBreaker:
    return CircuitBreaker(
        fail_max=FAIL_MAX,
        reset_timeout=RESET_TIMEOUT_SECONDS,
        name=f"{name}_circuit_breaker",
        listeners=[StateChangeListener(name)],
    )


stripe_breaker = _build_breaker("stripe")

supplier_breakers: dict[str, CircuitBreaker] = {
    "HOTELBEDS": _build_breaker("hotelbeds"),
    "RATEHAWK": _build_breaker("ratehawk"),
}


def get_supplier_breaker(supplier_code: str) -> CircuitBreaker:
    code = supplier_code.upper()
    if code not in supplier_breakers:
        supplier_breakers[code] = _build_breaker(code.lower())
    return supplier_breakers[code]


def reset_all_breakers() -> None:
    stripe_breaker.close()
    for breaker in supplier_breakers.values():
        breaker.close()


def _noop() -> None:
    return None


def _reraise(exc: BaseException) -> None:
    raise exc


async def call_with_breaker(
    breaker: CircuitBreaker,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    is_failure: Callable[[BaseException], bool] = lambda exc: True,
    **kwargs: Any,
) -> T:
    """
    Await ``func`` under ``breaker``.

    pybreaker only wraps synchronous callables, so the coroutine runs outside
    the breaker and its outcome is reported afterwards. Exceptions for which
    ``is_failure`` is false propagate without counting against the circuit.

    Raises:
        CircuitBreakerError: When the circuit is open and the reset timeout
            has not elapsed yet.
    """
    if breaker.current_state == pybreaker.STATE_OPEN:
        # Raises until reset_timeout elapses, then lets this call through
        breaker.call(_noop)

    try:
        result = await func(*args, **kwargs)
    except Exception as exc:
        if is_failure(exc):
            try:
                breaker.call(_reraise, exc)
            except CircuitBreakerError:
                logger.error("Circuit opened after repeated failures", extra={"breaker": breaker.name})
            except Exception as recorded:
                if recorded is not exc:
                    raise
        raise

    breaker.call(_noop)
    return result


__all__ = [
    "CircuitBreakerError",
    "call_with_breaker",
    "get_supplier_breaker",
    "reset_all_breakers",
    "stripe_breaker",
    "supplier_breakers",
]
