"""Domain entities: canonical inventory model and booking state."""

from app.domain.entities.booking import Booking, BookingActivity, BookingStatus, PaymentStatus
from app.domain.entities.hotel import (
    AddOn,
    AddOnType,
    Amenity,
    BoardType,
    CancellationPolicy,
    HotelDetails,
    HotelSummary,
    Image,
    PaymentType,
    RatePlan,
    RatePlanAddOn,
    RatePlanSummary,
    RateType,
    RoomType,
    SupplierSearchParams,
)

__all__ = [
    "AddOn",
    "AddOnType",
    "Amenity",
    "BoardType",
    "Booking",
    "BookingActivity",
    "BookingStatus",
    "CancellationPolicy",
    "HotelDetails",
    "HotelSummary",
    "Image",
    "PaymentStatus",
    "PaymentType",
    "RatePlan",
    "RatePlanAddOn",
    "RatePlanSummary",
    "RateType",
    "RoomType",
    "SupplierSearchParams",
]
