from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import (
    Booking,
    BookingActivity,
    BookingStatus,
    PaymentStatus,
    booking_from_mapping,
)
from app.domain.errors import BookingNotFoundError
from app.infrastructure.db.tables import booking_activities, bookings


def _utc_naive(value: datetime) -> datetime:
    # DateTime columns hold naive UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return booking_from_mapping(row) if row else None

    async def mark_cancelled(
        self,
        booking_id: str,
        cancelled_at: datetime,
        payment_status: PaymentStatus,
        refund_amount: Decimal | None,
        refund_id: str | None,
    ) -> Booking:
        stmt = (
            update(bookings)
            .where(bookings.c.id == booking_id)
            .values(
                status=BookingStatus.CANCELLED.value,
                payment_status=payment_status.value,
                cancelled_at=_utc_naive(cancelled_at),
                refund_amount=refund_amount,
                refund_id=refund_id,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise BookingNotFoundError(booking_id)
        booking = await self.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def add_activity(self, activity: BookingActivity) -> None:
        stmt = insert(booking_activities).values(
            booking_id=activity.booking_id,
            type=activity.type,
            message=activity.message,
            actor=activity.actor,
            actor_role=activity.actor_role,
            created_at=_utc_naive(activity.created_at),
        )
        await self._session.execute(stmt)

    async def list_activity(self, booking_id: str) -> list[BookingActivity]:
        stmt = (
            select(booking_activities)
            .where(booking_activities.c.booking_id == booking_id)
            .order_by(booking_activities.c.id)
        )
        result = await self._session.execute(stmt)
        return [
            BookingActivity(
                booking_id=row["booking_id"],
                type=row["type"],
                message=row["message"],
                actor=row["actor"],
                actor_role=row["actor_role"],
                created_at=row["created_at"],
            )
            for row in result.mappings()
        ]
