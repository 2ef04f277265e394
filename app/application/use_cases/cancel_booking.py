import logging
from dataclasses import dataclass
from decimal import Decimal

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.refund_gateway import RefundGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.config import Settings
from app.domain.cancellation_policy import CancellationDecision, CancellationTiers, evaluate_cancellation
from app.domain.entities.booking import Booking, BookingActivity, PaymentStatus
from app.domain.errors import BookingNotCancellableError, BookingNotFoundError
from app.domain.value_objects.money import Money


@dataclass
class CancellationEligibility:
    booking: Booking
    decision: CancellationDecision


@dataclass
class CancellationOutcome:
    booking: Booking
    refund_amount: Decimal
    refund_id: str | None
    message: str = "Booking cancelled successfully"


def tiers_from_settings(settings: Settings) -> CancellationTiers:
    return CancellationTiers(
        full_refund_hours=settings.cancellation_full_refund_hours,
        partial_refund_hours=settings.cancellation_partial_refund_hours,
        partial_refund_ratio=Decimal(str(settings.cancellation_partial_refund_ratio)),
    )


class CancelBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        refund_gateway: RefundGateway,
        transaction_manager: TransactionManager,
        settings: Settings,
        clock: Clock | None = None,
    ) -> None:
        self._booking_repo = booking_repo
        self._refund_gateway = refund_gateway
        self._transaction_manager = transaction_manager
        self._tiers = tiers_from_settings(settings)
        self._clock = clock or SystemClock()
        self._logger = logging.getLogger(__name__)

    async def check(self, booking_id: str) -> CancellationEligibility:
        booking = await self._booking_repo.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return CancellationEligibility(booking=booking, decision=self._evaluate(booking))

    async def execute(
        self,
        booking_id: str,
        actor: str = "guest",
        actor_role: str = "CUSTOMER",
    ) -> CancellationOutcome:
        """
        Cancel a booking and refund what the policy allows.

        A failed refund is logged and does not block the cancellation; the
        booking keeps no refund id so it can be refunded manually.

        Raises:
            BookingNotFoundError: Unknown booking id.
            BookingNotCancellableError: The policy rejects the cancellation.
        """
        eligibility = await self.check(booking_id)
        booking, decision = eligibility.booking, eligibility.decision
        if not decision.can_cancel:
            raise BookingNotCancellableError(booking_id, decision.reason or "Booking cannot be cancelled")

        refund_amount = decision.refund_amount or Decimal("0.00")
        refund_id = await self._refund(booking, refund_amount)

        async with self._transaction_manager.start():
            updated = await self._booking_repo.mark_cancelled(
                booking_id,
                cancelled_at=self._clock.now(),
                payment_status=PaymentStatus.REFUNDED if refund_amount > 0 else PaymentStatus.PAID,
                refund_amount=refund_amount,
                refund_id=refund_id,
            )
            refund = Money(refund_amount, booking.currency)
            refund_text = "None" if refund.is_zero() else str(refund)
            await self._booking_repo.add_activity(
                BookingActivity(
                    booking_id=booking_id,
                    type="STATUS_UPDATE",
                    message=f"Booking cancelled by customer. Refund: {refund_text}",
                    actor=actor,
                    actor_role=actor_role,
                    created_at=self._clock.now(),
                )
            )

        self._logger.info(
            "Booking cancelled",
            extra={
                "booking_id": booking_id,
                "booking_reference": booking.booking_reference,
                "refund_amount": str(refund_amount),
                "refund_id": refund_id,
            },
        )
        return CancellationOutcome(booking=updated, refund_amount=refund_amount, refund_id=refund_id)

    def _evaluate(self, booking: Booking) -> CancellationDecision:
        return evaluate_cancellation(
            status=booking.status,
            check_in=booking.check_in,
            now=self._clock.now(),
            is_free_cancellation=booking.is_free_cancellation,
            total_amount=booking.total_amount,
            tiers=self._tiers,
        )

    async def _refund(self, booking: Booking, amount: Decimal) -> str | None:
        if amount <= 0 or not booking.stripe_payment_intent_id:
            return None
        try:
            result = await self._refund_gateway.refund(
                booking.stripe_payment_intent_id,
                amount,
                metadata={"booking_id": booking.id, "booking_reference": booking.booking_reference},
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.error(
                "Refund failed, cancelling without refund id",
                exc_info=exc,
                extra={"booking_id": booking.id, "amount": str(amount)},
            )
            return None
        return result.refund_id
