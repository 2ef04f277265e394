"""Domain exceptions for the hotel inventory layer."""

from enum import Enum


class DomainError(Exception):
    """Base class for every domain error."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Supplier errors ===


class SupplierErrorClass(str, Enum):
    """How a failed supplier call should be handled by the caller."""

    TRANSIENT = "TRANSIENT"
    QUOTA = "QUOTA"
    FATAL = "FATAL"


class SupplierRequestError(DomainError):
    """An outbound supplier call failed (non-2xx, transport error or timeout)."""

    def __init__(
        self,
        supplier: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        circuit_open: bool = False,
    ):
        super().__init__(
            message=f"{supplier} request failed: {message}",
            code="SUPPLIER_REQUEST_FAILED",
        )
        self.supplier = supplier
        self.status_code = status_code
        self.body = body or ""
        self.circuit_open = circuit_open

    @property
    def is_transport_failure(self) -> bool:
        return self.status_code is None


class SupplierNotConfiguredError(DomainError):
    """Credentials for the supplier are missing."""

    def __init__(self, supplier: str):
        super().__init__(
            message=f"{supplier} credentials are missing",
            code="SUPPLIER_NOT_CONFIGURED",
        )
        self.supplier = supplier


class MalformedSupplierResponseError(DomainError):
    """The supplier answered 2xx with a body we cannot use."""

    def __init__(self, supplier: str, detail: str):
        super().__init__(
            message=f"{supplier} returned a malformed response: {detail}",
            code="MALFORMED_SUPPLIER_RESPONSE",
        )
        self.supplier = supplier


# === Booking errors ===


class BookingNotFoundError(DomainError):
    """The booking does not exist."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Booking not found: {booking_id}",
            code="BOOKING_NOT_FOUND",
        )
        self.booking_id = booking_id


class BookingNotCancellableError(DomainError):
    """The cancellation policy rejected the request."""

    def __init__(self, booking_id: str, reason: str):
        super().__init__(message=reason, code="BOOKING_NOT_CANCELLABLE")
        self.booking_id = booking_id
        self.reason = reason


# === Validation errors ===


class ValidationError(DomainError):
    """Invalid input data."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation failed on '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field
        self.detail = message
