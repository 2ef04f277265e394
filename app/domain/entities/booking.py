"""Booking state as seen by the cancellation flow."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


@dataclass
class Booking:
    id: str
    booking_reference: str
    status: BookingStatus
    payment_status: PaymentStatus
    check_in: datetime
    check_out: datetime
    total_amount: Decimal
    currency: str
    is_free_cancellation: bool
    supplier_code: str = "LOCAL"
    hotel_name: str = ""
    guest_email: str | None = None
    stripe_payment_intent_id: str | None = None
    cancelled_at: datetime | None = None
    refund_amount: Decimal | None = None
    refund_id: str | None = None


@dataclass
class BookingActivity:
    booking_id: str
    type: str
    message: str
    actor: str
    actor_role: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def booking_from_mapping(row: Mapping[str, Any]) -> Booking:
    """Build a Booking from a database row or a plain dict."""
    refund_amount = row.get("refund_amount")
    return Booking(
        id=str(row["id"]),
        booking_reference=row["booking_reference"],
        status=BookingStatus(row["status"]),
        payment_status=PaymentStatus(row["payment_status"]),
        check_in=row["check_in"],
        check_out=row["check_out"],
        total_amount=Decimal(str(row["total_amount"])),
        currency=row["currency"],
        is_free_cancellation=bool(row["is_free_cancellation"]),
        supplier_code=row.get("supplier_code") or "LOCAL",
        hotel_name=row.get("hotel_name") or "",
        guest_email=row.get("guest_email"),
        stripe_payment_intent_id=row.get("stripe_payment_intent_id"),
        cancelled_at=row.get("cancelled_at"),
        refund_amount=Decimal(str(refund_amount)) if refund_amount is not None else None,
        refund_id=row.get("refund_id"),
    )
