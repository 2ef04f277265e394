from datetime import datetime
from decimal import Decimal

from app.domain.entities.booking import Booking, BookingActivity, PaymentStatus


class BookingRepo:
    async def get_by_id(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def mark_cancelled(
        self,
        booking_id: str,
        cancelled_at: datetime,
        payment_status: PaymentStatus,
        refund_amount: Decimal | None,
        refund_id: str | None,
    ) -> Booking:
        """Set status CANCELLED and record the refund outcome."""
        raise NotImplementedError

    async def add_activity(self, activity: BookingActivity) -> None:
        raise NotImplementedError

    async def list_activity(self, booking_id: str) -> list[BookingActivity]:
        raise NotImplementedError
