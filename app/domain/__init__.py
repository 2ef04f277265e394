"""
Domain layer - hotel inventory access.

Pure business logic with no framework dependencies:
- entities/: canonical hotel model and booking state
- value_objects/: immutable values (Money)
- cancellation_policy.py: refund tier evaluation
- errors.py: domain exceptions
"""

from app.domain.cancellation_policy import (
    CancellationDecision,
    CancellationTiers,
    evaluate_cancellation,
)
from app.domain.errors import (
    BookingNotCancellableError,
    BookingNotFoundError,
    DomainError,
    MalformedSupplierResponseError,
    SupplierErrorClass,
    SupplierNotConfiguredError,
    SupplierRequestError,
    ValidationError,
)

__all__ = [
    # Policy
    "CancellationDecision",
    "CancellationTiers",
    "evaluate_cancellation",
    # Errors
    "DomainError",
    "SupplierErrorClass",
    "SupplierRequestError",
    "SupplierNotConfiguredError",
    "MalformedSupplierResponseError",
    "BookingNotFoundError",
    "BookingNotCancellableError",
    "ValidationError",
]
