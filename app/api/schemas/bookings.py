from app.api.schemas.hotels import Amount, CamelModel
from app.domain.entities.booking import BookingStatus, PaymentStatus


class CancellationCheckResponse(CamelModel):
    booking_id: str
    booking_reference: str
    can_cancel: bool
    reason: str | None = None
    refund_amount: Amount | None = None
    hours_until_check_in: int
    is_free_cancellation: bool
    total_amount: Amount
    currency: str


class CancelledBookingOut(CamelModel):
    id: str
    status: BookingStatus
    payment_status: PaymentStatus


class CancelBookingResponse(CamelModel):
    success: bool = True
    message: str
    refund_amount: Amount
    refund_id: str | None = None
    booking: CancelledBookingOut
