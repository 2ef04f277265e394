"""
Time-tiered cancellation and refund policy.

Pure functions: the caller supplies the booking state and the current time,
and is responsible for requesting the refund and persisting the new status.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from app.domain.entities.booking import BookingStatus
from app.domain.value_objects.money import quantize


@dataclass(frozen=True)
class CancellationTiers:
    """Refund tiers, measured in hours before check-in."""

    full_refund_hours: float = 24
    partial_refund_hours: float = 12
    partial_refund_ratio: Decimal = Decimal("0.5")


@dataclass(frozen=True)
class CancellationDecision:
    can_cancel: bool
    hours_until_check_in: int
    reason: str | None = None
    refund_amount: Decimal | None = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_between(now: datetime, later: datetime) -> float:
    return (_as_utc(later) - _as_utc(now)).total_seconds() / 3600


def evaluate_cancellation(
    status: BookingStatus | str,
    check_in: datetime,
    now: datetime,
    is_free_cancellation: bool,
    total_amount: Decimal,
    tiers: CancellationTiers = CancellationTiers(),
) -> CancellationDecision:
    status = BookingStatus(status)
    hours = hours_between(now, check_in)
    rounded_hours = max(0, round(hours))

    if status == BookingStatus.CANCELLED:
        return CancellationDecision(False, rounded_hours, reason="Booking is already cancelled")
    if status == BookingStatus.COMPLETED:
        return CancellationDecision(False, rounded_hours, reason="Cannot cancel a completed booking")

    if hours <= 0:
        return CancellationDecision(False, 0, reason="Cannot cancel after check-in date")

    if not is_free_cancellation:
        return CancellationDecision(
            True,
            rounded_hours,
            reason="This is a non-refundable booking. No refund will be issued.",
            refund_amount=Decimal("0.00"),
        )

    if hours >= tiers.full_refund_hours:
        return CancellationDecision(
            True,
            rounded_hours,
            reason="Free cancellation. A full refund will be issued.",
            refund_amount=quantize(total_amount),
        )

    if hours >= tiers.partial_refund_hours:
        return CancellationDecision(
            True,
            rounded_hours,
            reason=f"Late cancellation. {tiers.partial_refund_ratio:.0%} refund will be issued.",
            refund_amount=quantize(total_amount * tiers.partial_refund_ratio),
        )

    # Still cancellable so the room is released, but nothing is refunded
    return CancellationDecision(
        True,
        rounded_hours,
        reason="Very late cancellation. No refund available.",
        refund_amount=Decimal("0.00"),
    )
