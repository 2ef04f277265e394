from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import CancelBookingResponse, CancellationCheckResponse
from app.domain.errors import BookingNotCancellableError, BookingNotFoundError

router = APIRouter()


@router.get("/bookings/{booking_id}/cancellation", response_model=CancellationCheckResponse)
async def check_cancellation(
    booking_id: str,
    use_cases=Depends(get_use_cases),
) -> CancellationCheckResponse:
    try:
        eligibility = await use_cases["cancel_booking"].check(booking_id)
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc

    booking, decision = eligibility.booking, eligibility.decision
    return CancellationCheckResponse(
        booking_id=booking.id,
        booking_reference=booking.booking_reference,
        can_cancel=decision.can_cancel,
        reason=decision.reason,
        refund_amount=decision.refund_amount,
        hours_until_check_in=decision.hours_until_check_in,
        is_free_cancellation=booking.is_free_cancellation,
        total_amount=booking.total_amount,
        currency=booking.currency,
    )


@router.post("/bookings/{booking_id}/cancel", response_model=CancelBookingResponse)
async def cancel_booking(
    booking_id: str,
    use_cases=Depends(get_use_cases),
) -> CancelBookingResponse:
    try:
        outcome = await use_cases["cancel_booking"].execute(booking_id)
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except BookingNotCancellableError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason) from exc

    return CancelBookingResponse(
        message=outcome.message,
        refund_amount=outcome.refund_amount,
        refund_id=outcome.refund_id,
        booking={
            "id": outcome.booking.id,
            "status": outcome.booking.status,
            "payment_status": outcome.booking.payment_status,
        },
    )
