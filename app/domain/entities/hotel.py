"""Canonical hotel inventory model every supplier adapter normalizes into."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Literal


class BoardType(str, Enum):
    ROOM_ONLY = "ROOM_ONLY"
    BED_AND_BREAKFAST = "BED_AND_BREAKFAST"
    HALF_BOARD = "HALF_BOARD"
    FULL_BOARD = "FULL_BOARD"
    ALL_INCLUSIVE = "ALL_INCLUSIVE"


class RateType(str, Enum):
    STANDARD = "STANDARD"
    NON_REFUNDABLE = "NON_REFUNDABLE"
    PROMO = "PROMO"
    FLEX = "FLEX"
    CORPORATE = "CORPORATE"
    PACKAGE = "PACKAGE"


class PaymentType(str, Enum):
    PREPAID = "PREPAID"
    PAY_AT_HOTEL = "PAY_AT_HOTEL"
    DEPOSIT = "DEPOSIT"
    CREDIT_LIMIT = "CREDIT_LIMIT"


class AddOnType(str, Enum):
    BREAKFAST = "BREAKFAST"
    PARKING = "PARKING"
    TRANSFER = "TRANSFER"
    SPA = "SPA"
    LATE_CHECKOUT = "LATE_CHECKOUT"
    OTHER = "OTHER"


SortOrder = Literal["price-asc", "price-desc", "rating"]


@dataclass
class SupplierSearchParams:
    destination: str | None = None
    check_in: date | None = None
    check_out: date | None = None
    adults: int = 2
    children: int = 0
    rooms: int = 1
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_rating: float | None = None
    sort_by: SortOrder | None = None
    limit: int | None = None


@dataclass
class CancellationPolicy:
    name: str
    description: str | None = None
    refundable_until_hours: int | None = None
    policy_text: str | None = None


@dataclass
class RatePlanAddOn:
    id: str
    name: str
    type: AddOnType = AddOnType.OTHER
    included: bool = False
    additional_price: Decimal | None = None


@dataclass
class RatePlan:
    """
    The canonical priced offer.

    Amounts are per night and per room except ``fees`` (per room, per stay)
    and ``total_amount`` (the whole stay for every room):
    ``total_amount == base_rate*nights*rooms + taxes*nights*rooms + fees*rooms``.
    """

    id: str
    name: str
    board_type: BoardType
    rate_type: RateType
    payment_type: PaymentType
    is_refundable: bool
    currency: str
    base_rate: Decimal
    taxes: Decimal
    fees: Decimal
    total_amount: Decimal
    available_rooms: int = 0
    include_breakfast: bool = False
    nightly_breakdown: list[Any] | None = None
    promotions: Any = None
    inclusions: Any = None
    cancellation_policy: CancellationPolicy | None = None
    add_ons: list[RatePlanAddOn] = field(default_factory=list)


@dataclass
class RatePlanSummary:
    id: str
    name: str
    board_type: BoardType
    rate_type: RateType
    payment_type: PaymentType
    base_rate: Decimal
    currency: str
    is_refundable: bool = False

    @classmethod
    def from_rate_plan(cls, plan: RatePlan, base_rate: Decimal | None = None) -> "RatePlanSummary":
        return cls(
            id=plan.id,
            name=plan.name,
            board_type=plan.board_type,
            rate_type=plan.rate_type,
            payment_type=plan.payment_type,
            base_rate=base_rate if base_rate is not None else plan.base_rate,
            currency=plan.currency,
            is_refundable=plan.is_refundable,
        )


@dataclass
class Amenity:
    id: str
    name: str
    category: str


@dataclass
class Image:
    id: str
    url: str
    caption: str | None = None
    is_primary: bool = False


@dataclass
class AddOn:
    id: str
    name: str
    type: AddOnType
    price: Decimal
    currency: str
    is_per_night: bool = False
    is_complimentary: bool = False
    description: str | None = None


@dataclass
class RoomType:
    id: str
    name: str
    max_adults: int
    max_children: int
    max_occupancy: int
    description: str | None = None
    size_sqm: float | None = None
    view: str | None = None
    is_suite: bool = False
    images: list[Image] = field(default_factory=list)
    amenities: list[Amenity] = field(default_factory=list)
    rate_plans: list[RatePlan] = field(default_factory=list)


@dataclass
class HotelSummary:
    id: str
    slug: str
    name: str
    location: str
    currency: str
    city: str = ""
    country: str = ""
    headline: str | None = None
    rating: float = 0.0
    review_count: int = 0
    starting_rate: Decimal | None = None
    hero_image: str | None = None
    primary_image: str | None = None
    categories: list[str] = field(default_factory=list)
    supplier_code: str | None = None
    min_rate_plan: RatePlanSummary | None = None


@dataclass
class HotelDetails(HotelSummary):
    description: str | None = None
    review_score: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    amenities: list[Amenity] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    add_ons: list[AddOn] = field(default_factory=list)
    room_types: list[RoomType] = field(default_factory=list)
