from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, condecimal, constr
from pydantic.alias_generators import to_camel

from app.domain.entities.hotel import AddOnType, BoardType, PaymentType, RateType, SupplierSearchParams

# Amounts travel as JSON numbers
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
MoneyIn = condecimal(ge=0, max_digits=12, decimal_places=2)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# === Canonical inventory ===


class CancellationPolicyOut(CamelModel):
    name: str
    description: str | None = None
    refundable_until_hours: int | None = None
    policy_text: str | None = None


class RatePlanAddOnOut(CamelModel):
    id: str
    name: str
    type: AddOnType
    included: bool
    additional_price: Amount | None = None


class RatePlanOut(CamelModel):
    id: str
    name: str
    board_type: BoardType
    rate_type: RateType
    payment_type: PaymentType
    is_refundable: bool
    currency: str
    base_rate: Amount
    taxes: Amount
    fees: Amount
    total_amount: Amount
    available_rooms: int
    include_breakfast: bool
    nightly_breakdown: list[Any] | None = None
    promotions: Any = None
    inclusions: Any = None
    cancellation_policy: CancellationPolicyOut | None = None
    add_ons: list[RatePlanAddOnOut] = Field(default_factory=list)


class RatePlanSummaryOut(CamelModel):
    id: str
    name: str
    board_type: BoardType
    rate_type: RateType
    payment_type: PaymentType
    base_rate: Amount
    currency: str
    is_refundable: bool


class AmenityOut(CamelModel):
    id: str
    name: str
    category: str


class ImageOut(CamelModel):
    id: str
    url: str
    caption: str | None = None
    is_primary: bool = False


class AddOnOut(CamelModel):
    id: str
    name: str
    type: AddOnType
    price: Amount
    currency: str
    is_per_night: bool
    is_complimentary: bool
    description: str | None = None


class RoomTypeOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    size_sqm: float | None = None
    view: str | None = None
    max_adults: int
    max_children: int
    max_occupancy: int
    is_suite: bool
    images: list[ImageOut] = Field(default_factory=list)
    amenities: list[AmenityOut] = Field(default_factory=list)
    rate_plans: list[RatePlanOut] = Field(default_factory=list)


class HotelSummaryOut(CamelModel):
    id: str
    slug: str
    name: str
    headline: str | None = None
    location: str
    city: str
    country: str
    rating: float
    review_count: int
    currency: str
    starting_rate: Amount | None = None
    hero_image: str | None = None
    primary_image: str | None = None
    categories: list[str] = Field(default_factory=list)
    supplier_code: str | None = None
    min_rate_plan: RatePlanSummaryOut | None = None


class HotelDetailsOut(HotelSummaryOut):
    description: str | None = None
    review_score: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    amenities: list[AmenityOut] = Field(default_factory=list)
    images: list[ImageOut] = Field(default_factory=list)
    add_ons: list[AddOnOut] = Field(default_factory=list)
    room_types: list[RoomTypeOut] = Field(default_factory=list)


# === Search ===


class HotelSearchRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    destination: constr(strip_whitespace=True, max_length=120) | None = None
    check_in: date | None = None
    check_out: date | None = None
    adults: int = Field(default=2, ge=1, le=10)
    children: int = Field(default=0, ge=0, le=10)
    rooms: int = Field(default=1, ge=1, le=8)
    min_price: MoneyIn | None = None
    max_price: MoneyIn | None = None
    min_rating: float | None = Field(default=None, ge=0, le=10)
    sort_by: Literal["price-asc", "price-desc", "rating"] | None = None
    limit: int | None = Field(default=None, ge=1, le=100)
    supplier: str | None = None

    def to_params(self) -> SupplierSearchParams:
        return SupplierSearchParams(
            destination=self.destination or None,
            check_in=self.check_in,
            check_out=self.check_out,
            adults=self.adults,
            children=self.children,
            rooms=self.rooms,
            min_price=self.min_price,
            max_price=self.max_price,
            min_rating=self.min_rating,
            sort_by=self.sort_by,
            limit=self.limit,
        )


class HotelSearchResponse(CamelModel):
    hotels: list[HotelSummaryOut]
    count: int
    suppliers: list[str]


# === Booking selection ===


class SelectionHotelOut(CamelModel):
    id: str
    name: str
    location: str
    hero_image: str | None = None
    currency: str
    supplier_code: str | None = None


class SelectionRoomTypeOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    max_adults: int
    max_children: int
    max_occupancy: int


class SelectionRatePlanOut(RatePlanOut):
    cancellation_deadline: datetime | None = None


class SelectionDatesOut(CamelModel):
    check_in: date
    check_out: date
    nights: int


class SelectionGuestsOut(CamelModel):
    adults: int
    children: int
    rooms: int


class SelectedAddOnOut(CamelModel):
    id: str
    name: str
    price: Amount
    currency: str
    quantity: int
    total: Amount


class SelectionAddOnsOut(CamelModel):
    available: list[AddOnOut]
    selected: list[SelectedAddOnOut]


class SelectionPricingOut(CamelModel):
    nightly_rate: Amount
    subtotal: Amount
    taxes: Amount
    fees: Amount
    add_ons: Amount
    total: Amount


class BookingSelectionResponse(CamelModel):
    hotel: SelectionHotelOut
    room_type: SelectionRoomTypeOut
    rate_plan: SelectionRatePlanOut
    dates: SelectionDatesOut
    guests: SelectionGuestsOut
    add_ons: SelectionAddOnsOut
    pricing: SelectionPricingOut
