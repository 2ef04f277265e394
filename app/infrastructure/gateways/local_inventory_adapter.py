import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.application.interfaces.hotel_inventory_repo import HotelInventoryRepo
from app.application.interfaces.supplier_adapter import SupplierAdapter
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
from app.domain.value_objects.money import to_decimal

logger = logging.getLogger(__name__)


def _image(row: dict[str, Any]) -> Image:
    return Image(
        id=str(row["id"]),
        url=row["url"],
        caption=row.get("caption"),
        is_primary=bool(row.get("is_primary")),
    )


def _amenity(row: dict[str, Any]) -> Amenity:
    return Amenity(id=str(row["id"]), name=row["name"], category=row.get("category") or "General")


def map_rate_plan(row: dict[str, Any]) -> RatePlan:
    policy = row.get("cancellation_policy")
    return RatePlan(
        id=str(row["id"]),
        name=row["name"],
        board_type=BoardType(row["board_type"]),
        rate_type=RateType(row["rate_type"]),
        payment_type=PaymentType(row["payment_type"]),
        is_refundable=bool(row.get("is_refundable")),
        currency=row["currency"],
        base_rate=to_decimal(row.get("base_rate")),
        taxes=to_decimal(row.get("taxes")),
        fees=to_decimal(row.get("fees")),
        total_amount=to_decimal(row.get("total_amount")),
        available_rooms=int(row.get("available_rooms") or 0),
        include_breakfast=bool(row.get("include_breakfast")),
        nightly_breakdown=row.get("nightly_breakdown"),
        promotions=row.get("promotions"),
        inclusions=row.get("inclusions"),
        cancellation_policy=(
            CancellationPolicy(
                name=policy["name"],
                description=policy.get("description"),
                refundable_until_hours=policy.get("refundable_until_hours"),
                policy_text=policy.get("policy_text"),
            )
            if policy
            else None
        ),
        add_ons=[
            RatePlanAddOn(
                id=str(item["id"]),
                name=item["name"],
                type=AddOnType(item.get("type") or AddOnType.OTHER),
                included=bool(item.get("included")),
                additional_price=(
                    to_decimal(item["additional_price"]) if item.get("additional_price") is not None else None
                ),
            )
            for item in row.get("add_ons") or []
        ],
    )


def build_summary(hotel: dict[str, Any]) -> HotelSummary:
    images = hotel.get("images") or []
    primary_image = next((img for img in images if img.get("is_primary")), images[0] if images else None)
    plans = [plan for room in hotel.get("room_types") or [] for plan in room.get("rate_plans") or []]
    cheapest = min(plans, key=lambda p: to_decimal(p.get("base_rate"))) if plans else None

    min_rate = hotel.get("min_rate")
    return HotelSummary(
        id=str(hotel["id"]),
        slug=hotel["slug"],
        name=hotel["name"],
        headline=hotel.get("headline"),
        location=f"{hotel.get('city', '')}, {hotel.get('country', '')}",
        city=hotel.get("city") or "",
        country=hotel.get("country") or "",
        rating=float(hotel.get("review_score") or 0),
        review_count=int(hotel.get("review_count") or 0),
        currency=hotel.get("default_currency") or "GBP",
        starting_rate=to_decimal(min_rate) if min_rate is not None else None,
        hero_image=hotel.get("hero_image") or (primary_image or {}).get("url"),
        primary_image=(primary_image or {}).get("url") or hotel.get("hero_image"),
        categories=list(hotel.get("categories") or []),
        supplier_code=hotel.get("supplier_code") or LocalInventoryAdapter.code,
        min_rate_plan=RatePlanSummary.from_rate_plan(map_rate_plan(cheapest)) if cheapest else None,
    )


class LocalInventoryAdapter(SupplierAdapter):
    """
    Inventory stored in our own database.

    No caching: the store is local. Free-text destination matching and the
    price filters run here because the store only does plain ``LIKE``.
    """

    code = "LOCAL"

    def __init__(self, repo: HotelInventoryRepo) -> None:
        self._repo = repo

    async def search(self, params: SupplierSearchParams) -> list[HotelSummary]:
        try:
            rows = await self._repo.search_hotels(
                destination=params.destination,
                min_rating=params.min_rating,
                sort_by=params.sort_by or "rating",
                limit=params.limit or 24,
            )
        except SQLAlchemyError as exc:
            logger.error("Local inventory search failed", exc_info=exc)
            return []

        summaries = [build_summary(row) for row in rows]
        destination = (params.destination or "").lower()
        results = []
        for hotel in summaries:
            if destination and not (
                destination in hotel.city.lower()
                or destination in hotel.name.lower()
                or destination in hotel.location.lower()
            ):
                continue
            if not self._within_price(hotel.starting_rate, params.min_price, params.max_price):
                continue
            results.append(hotel)
        return results

    @staticmethod
    def _within_price(price: Decimal | None, min_price: Decimal | None, max_price: Decimal | None) -> bool:
        if price is None:
            return True
        if min_price is not None and price < min_price:
            return False
        if max_price is not None and price > max_price:
            return False
        return True

    async def get_hotel_details(self, hotel_id: str) -> HotelDetails | None:
        if not hotel_id:
            return None
        try:
            hotel = await self._repo.get_hotel(hotel_id)
        except SQLAlchemyError as exc:
            logger.error("Local hotel lookup failed", exc_info=exc, extra={"hotel_id": hotel_id})
            return None
        if hotel is None:
            return None

        summary = build_summary(hotel)
        return HotelDetails(
            **vars(summary),
            description=hotel.get("description"),
            review_score=hotel.get("review_score"),
            latitude=hotel.get("latitude"),
            longitude=hotel.get("longitude"),
            amenities=[_amenity(a) for a in hotel.get("amenities") or []],
            images=[_image(img) for img in hotel.get("images") or []],
            add_ons=[
                AddOn(
                    id=str(add_on["id"]),
                    name=add_on["name"],
                    type=AddOnType(add_on.get("type") or AddOnType.OTHER),
                    price=to_decimal(add_on.get("price")),
                    currency=add_on.get("currency") or summary.currency,
                    is_per_night=bool(add_on.get("is_per_night")),
                    is_complimentary=bool(add_on.get("is_complimentary")),
                    description=add_on.get("description"),
                )
                for add_on in hotel.get("add_ons") or []
            ],
            room_types=[
                RoomType(
                    id=str(room["id"]),
                    name=room["name"],
                    max_adults=int(room.get("max_adults") or 2),
                    max_children=int(room.get("max_children") or 0),
                    max_occupancy=int(room.get("max_occupancy") or 2),
                    description=room.get("description"),
                    size_sqm=room.get("size_sqm"),
                    view=room.get("view"),
                    is_suite=bool(room.get("is_suite")),
                    images=[_image(img) for img in room.get("images") or []],
                    amenities=[_amenity(a) for a in room.get("amenities") or []],
                    rate_plans=[map_rate_plan(plan) for plan in room.get("rate_plans") or []],
                )
                for room in hotel.get("room_types") or []
            ],
        )

    async def get_rate_plan(self, rate_plan_id: str) -> RatePlan | None:
        if not rate_plan_id:
            return None
        try:
            row = await self._repo.get_rate_plan(rate_plan_id)
        except SQLAlchemyError as exc:
            logger.error("Local rate plan lookup failed", exc_info=exc, extra={"rate_plan_id": rate_plan_id})
            return None
        return map_rate_plan(row) if row else None
