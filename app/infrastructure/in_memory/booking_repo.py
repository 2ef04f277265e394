from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking, BookingActivity, BookingStatus, PaymentStatus
from app.domain.errors import BookingNotFoundError


class InMemoryBookingRepo(BookingRepo):
    def __init__(self, bookings: Iterable[Booking] = ()) -> None:
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings}
        self._activity: list[BookingActivity] = []

    def add(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking

    async def get_by_id(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    async def mark_cancelled(
        self,
        booking_id: str,
        cancelled_at: datetime,
        payment_status: PaymentStatus,
        refund_amount: Decimal | None,
        refund_id: str | None,
    ) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        updated = replace(
            booking,
            status=BookingStatus.CANCELLED,
            payment_status=payment_status,
            cancelled_at=cancelled_at,
            refund_amount=refund_amount,
            refund_id=refund_id,
        )
        self._bookings[booking_id] = updated
        return updated

    async def add_activity(self, activity: BookingActivity) -> None:
        self._activity.append(activity)

    async def list_activity(self, booking_id: str) -> list[BookingActivity]:
        return [a for a in self._activity if a.booking_id == booking_id]
