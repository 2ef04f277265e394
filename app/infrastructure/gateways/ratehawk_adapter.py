"""
RateHawk / Emerging Travel Group B2B API v3.

Auth is HTTP Basic with ``KEY_ID:API_KEY``. Prices come with taxes folded
in, so rate plans report ``taxes = fees = 0``.
"""

import asyncio
import json
import logging
import re
from datetime import timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

from app.application.interfaces.supplier_adapter import SupplierRateCheck
from app.domain.entities.hotel import (
    Amenity,
    BoardType,
    CancellationPolicy,
    HotelDetails,
    HotelSummary,
    Image,
    PaymentType,
    RatePlan,
    RatePlanSummary,
    RateType,
    RoomType,
    SupplierSearchParams,
)
from app.domain.errors import DomainError
from app.domain.value_objects.money import quantize, to_decimal
from app.infrastructure.gateways.normalization import (
    apply_search_filters,
    as_float,
    as_int,
    as_list,
    count_nights,
    dig,
    first_number,
    hours_until,
    parse_datetime,
    stay_dates,
    sum_amounts,
)
from app.infrastructure.gateways.remote_supplier import RemoteSupplierAdapter

logger = logging.getLogger(__name__)

REGION_TTL = 60 * 60 * 24
SEARCH_TTL = 60
HOTEL_INFO_TTL = 60 * 60 * 24
HOTELPAGE_TTL = 60


def map_meal(meal: str | None) -> BoardType:
    value = (meal or "").lower()
    if "all-inclusive" in value or "all_inclusive" in value:
        return BoardType.ALL_INCLUSIVE
    if "full-board" in value or "full_board" in value:
        return BoardType.FULL_BOARD
    if "half-board" in value or "half_board" in value:
        return BoardType.HALF_BOARD
    if "breakfast" in value:
        return BoardType.BED_AND_BREAKFAST
    return BoardType.ROOM_ONLY


def payment_types(rate: dict[str, Any]) -> list[dict[str, Any]]:
    return [p for p in as_list(dig(rate, "payment_options", "payment_types")) if isinstance(p, dict)]


def map_payment(rate: dict[str, Any]) -> PaymentType:
    kinds = {str(p.get("type", "")).lower() for p in payment_types(rate)}
    if "deposit" in kinds:
        return PaymentType.CREDIT_LIMIT
    if "now" in kinds:
        return PaymentType.PREPAID
    if "hotel" in kinds:
        return PaymentType.PAY_AT_HOTEL
    return PaymentType.PREPAID


def free_cancellation_before(rate: dict[str, Any]) -> Any:
    deadline = rate.get("free_cancellation_before")
    if deadline:
        return deadline
    for payment in payment_types(rate):
        deadline = dig(payment, "cancellation_penalties", "free_cancellation_before")
        if deadline:
            return deadline
    return None


def rate_total(rate: dict[str, Any]) -> Decimal:
    """Sum of the nightly prices, else the first payment option amount."""
    total = sum_amounts(rate.get("daily_prices"))
    if total > 0:
        return total
    return to_decimal(dig(rate, "payment_options", "payment_types", 0, "amount"))


class RatehawkAdapter(RemoteSupplierAdapter):
    code = "RATEHAWK"
    quota_pattern = re.compile(r"quota|limit exceeded|rate limit|too many requests", re.IGNORECASE)

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.ratehawk_key_id and self._settings.ratehawk_api_key)

    @property
    def base_url(self) -> str:
        return self._settings.ratehawk_base_url.rstrip("/")

    @property
    def language(self) -> str:
        return self._settings.ratehawk_language.lower()

    def _auth(self) -> tuple[str, str] | None:
        return (self._settings.ratehawk_key_id or "", self._settings.ratehawk_api_key or "")

    async def resolve_region(self, query: str) -> str | None:
        trimmed = query.strip()
        if not trimmed:
            return None

        data = await self._cache.with_cache(
            f"etg-region:{trimmed.lower()}",
            REGION_TTL,
            lambda: self._post("/search/multicomplete/", {"query": trimmed, "language": self.language}),
        )
        region_id = dig(data, "data", "regions", 0, "id")
        return str(region_id) if region_id is not None else None

    def _guests(self, adults: int, children: int) -> list[dict[str, Any]]:
        return [{"adults": adults, "children": [8] * children}]

    # === SupplierAdapter ===

    async def search(self, params: SupplierSearchParams) -> list[HotelSummary]:
        if not self.is_configured:
            return await self._fallback.search(params)
        if not params.destination:
            return []

        check_in, check_out = stay_dates(params, self._clock.now().date())
        limit = params.limit or 20

        try:
            region_id = await self.resolve_region(params.destination)
            if not region_id:
                logger.info("RateHawk region not found", extra={"destination": params.destination})
                return await self._fallback.search(params)

            body = {
                "region_id": as_int(region_id),
                "checkin": check_in.isoformat(),
                "checkout": check_out.isoformat(),
                "guests": self._guests(params.adults, params.children),
                "residency": self._settings.ratehawk_residency,
                "language": self.language,
                "currency": self._settings.ratehawk_currency,
            }
            cache_key = (
                f"etg-search:{region_id}:{check_in.isoformat()}:{check_out.isoformat()}:"
                f"{params.adults}:{params.children}:{limit}"
            )
            data = await self._cache.with_cache(
                cache_key, SEARCH_TTL, lambda: self._post("/search/serp/region/", body)
            )
        except DomainError as exc:
            return await self._degrade("search", exc, lambda: self._fallback.search(params), [])

        hotels = [h for h in as_list(dig(data, "data", "hotels")) if isinstance(h, dict)]
        nights = count_nights(check_in, check_out)
        summaries = [self._to_summary(hotel, nights) for hotel in hotels[:limit]]
        return apply_search_filters(summaries, params)

    async def get_hotel_details(self, hotel_id: str) -> HotelDetails | None:
        if not self.is_configured or not hotel_id:
            return await self._fallback.get_hotel_details(hotel_id)

        today = self._clock.now().date()
        check_in = today + timedelta(days=1)
        check_out = today + timedelta(days=2)
        hotelpage_body = {
            "id": hotel_id,
            "checkin": check_in.isoformat(),
            "checkout": check_out.isoformat(),
            "guests": self._guests(2, 0),
            "residency": self._settings.ratehawk_residency,
            "language": self.language,
            "currency": self._settings.ratehawk_currency,
        }

        try:
            info, hotelpage = await asyncio.gather(
                self._cache.with_cache(
                    f"etg-info:{hotel_id}",
                    HOTEL_INFO_TTL,
                    lambda: self._post("/hotel/info/", {"id": hotel_id, "language": self.language}),
                ),
                self._cache.with_cache(
                    f"etg-hp:{hotel_id}:{check_in.isoformat()}:{check_out.isoformat()}",
                    HOTELPAGE_TTL,
                    lambda: self._post("/search/hp/", hotelpage_body),
                ),
            )
        except DomainError as exc:
            return await self._degrade(
                "get_hotel_details", exc, lambda: self._fallback.get_hotel_details(hotel_id), None
            )

        hotel_info = dig(info, "data")
        if not isinstance(hotel_info, dict):
            return await self._fallback.get_hotel_details(hotel_id)

        rates = dig(hotelpage, "data", "hotels", 0, "rates")
        if rates is None:
            rates = dig(hotelpage, "data", "rates")
        rates = [r for r in as_list(rates) if isinstance(r, dict)]
        return self._to_details(hotel_info, rates, count_nights(check_in, check_out))

    async def get_rate_plan(self, rate_plan_id: str) -> RatePlan | None:
        # Rates are embedded in hotel page responses; prebook re-verifies a book_hash
        return None

    async def prebook(self, book_hash: str) -> SupplierRateCheck:
        """
        Lock a rate ahead of payment.

        Raises:
            SupplierRequestError: Transport, auth or quota failure.
        """
        body = {
            "hash": book_hash,
            "price_increase_percent": round(self._settings.prebook_price_tolerance * 100),
        }
        data = await self._post("/search/prebook/", body)

        if str(dig(data, "status", default="")).lower() != "ok":
            return SupplierRateCheck(
                available=False,
                error=str(dig(data, "error", default="Rate not available")),
                payload=data,
            )

        rate = dig(data, "data", "hotels", 0, "rates", 0)
        if isinstance(rate, dict):
            price = rate_total(rate)
            currency = dig(rate, "payment_options", "payment_types", 0, "show_currency_code") or dig(
                rate, "payment_options", "payment_types", 0, "currency_code"
            )
        else:
            price = to_decimal(dig(data, "data", "final_price"), None)
            currency = dig(data, "data", "currency")

        price_changed = dig(data, "data", "changes", "price_changed") is True or (
            dig(data, "data", "price_changed") is True
        )
        return SupplierRateCheck(
            available=True,
            price=quantize(price) if price is not None else None,
            currency=currency,
            price_changed=price_changed,
            payload=data,
        )

    # === Normalization ===

    def _to_rate_plan(self, rate: dict[str, Any], nights: int, room_name: str | None = None) -> RatePlan:
        now = self._clock.now()
        deadline = free_cancellation_before(rate)
        deadline_at = parse_datetime(deadline)
        is_refundable = deadline_at is not None and deadline_at > now
        board_type = map_meal(rate.get("meal"))

        daily_prices = as_list(rate.get("daily_prices"))
        nights = max(1, nights)
        # total_amount == base_rate * nights
        base_rate = quantize(rate_total(rate) / nights)

        if is_refundable:
            policy = CancellationPolicy(
                name="Free cancellation",
                description=f"Free cancellation before {deadline}",
                refundable_until_hours=hours_until(deadline, now),
                policy_text=json.dumps(rate["cancellation_penalties"]) if rate.get("cancellation_penalties") else None,
            )
        else:
            policy = CancellationPolicy(
                name="Non-refundable",
                description="This rate is non-refundable",
                refundable_until_hours=None,
            )

        return RatePlan(
            id=rate.get("book_hash") or rate.get("match_hash") or str(uuid4()),
            name=rate.get("room_name") or room_name or "Room",
            board_type=board_type,
            rate_type=RateType.FLEX if is_refundable else RateType.NON_REFUNDABLE,
            payment_type=map_payment(rate),
            is_refundable=is_refundable,
            currency=rate.get("currency") or self._settings.ratehawk_currency,
            base_rate=base_rate,
            taxes=Decimal("0.00"),
            fees=Decimal("0.00"),
            total_amount=base_rate * nights,
            available_rooms=as_int(rate.get("rooms_available"), 1),
            include_breakfast=board_type == BoardType.BED_AND_BREAKFAST,
            nightly_breakdown=daily_prices or None,
            promotions=rate.get("rg_ext"),
            inclusions=rate.get("amenities_data"),
            cancellation_policy=policy,
        )

    def _to_summary(
        self,
        hotel: dict[str, Any],
        nights: int,
        rates: list[dict[str, Any]] | None = None,
    ) -> HotelSummary:
        if rates is None:
            rates = [r for r in as_list(hotel.get("rates")) if isinstance(r, dict)]
        cheapest_rate = min(rates, key=rate_total) if rates else None
        plan = self._to_rate_plan(cheapest_rate, nights) if cheapest_rate else None

        hotel_id = str(hotel.get("id") or hotel.get("hotel_id") or "")
        images = [img for img in as_list(hotel.get("images")) if isinstance(img, str)]
        return HotelSummary(
            id=hotel_id,
            slug=hotel_id,
            name=hotel.get("name") or f"Hotel {hotel_id}",
            headline=hotel.get("address"),
            location=dig(hotel, "region", "name") or hotel.get("address") or "",
            city=dig(hotel, "region", "name", default=""),
            country=dig(hotel, "region", "country_code", default=""),
            currency=plan.currency if plan else self._settings.ratehawk_currency,
            rating=first_number(hotel.get("star_rating") or hotel.get("stars")),
            review_count=as_int(dig(hotel, "reviews", "rating_count")),
            starting_rate=plan.base_rate if plan else None,
            hero_image=images[0] if images else None,
            primary_image=images[0] if images else None,
            supplier_code=self.code,
            min_rate_plan=RatePlanSummary.from_rate_plan(plan) if plan else None,
        )

    def _to_details(self, hotel_info: dict[str, Any], rates: list[dict[str, Any]], nights: int) -> HotelDetails:
        summary = self._to_summary(hotel_info, nights, rates)

        by_room: dict[str, list[dict[str, Any]]] = {}
        for rate in rates:
            by_room.setdefault(rate.get("room_name") or "Standard Room", []).append(rate)

        room_types = []
        for index, (room_name, room_rates) in enumerate(by_room.items()):
            room_data = dig(room_rates[0], "room_data_trans", default={})
            max_adults = as_int(dig(room_data, "max_adults"), 2)
            max_children = as_int(dig(room_data, "max_children"), 2)
            room_types.append(
                RoomType(
                    id=f"{summary.id}-room-{index}",
                    name=room_name,
                    max_adults=max_adults,
                    max_children=max_children,
                    max_occupancy=max_adults + max_children,
                    description=dig(room_data, "main_name"),
                    size_sqm=dig(room_data, "area"),
                    view=dig(room_data, "view"),
                    is_suite="suite" in room_name.lower(),
                    images=[
                        Image(id=f"room-img-{i}", url=url, caption=room_name, is_primary=i == 0)
                        for i, url in enumerate(as_list(dig(room_data, "images")))
                        if isinstance(url, str)
                    ],
                    amenities=[
                        Amenity(id=f"amenity-{i}", name=str(name), category="Room")
                        for i, name in enumerate(as_list(room_rates[0].get("amenities_data")))
                    ],
                    rate_plans=[self._to_rate_plan(rate, nights, room_name) for rate in room_rates],
                )
            )

        fields = vars(summary)
        fields["review_count"] = as_int(dig(hotel_info, "reviews", "rating_count"))
        return HotelDetails(
            **fields,
            description=hotel_info.get("description"),
            review_score=as_float(dig(hotel_info, "reviews", "rating"), summary.rating),
            amenities=[
                Amenity(id=f"hotel-amenity-{i}", name=str(name), category="Hotel")
                for i, name in enumerate(as_list(hotel_info.get("amenities")))
            ],
            images=[
                Image(id=f"hotel-img-{i}", url=url, is_primary=i == 0)
                for i, url in enumerate(as_list(hotel_info.get("images")))
                if isinstance(url, str)
            ],
            latitude=as_float(hotel_info.get("latitude")),
            longitude=as_float(hotel_info.get("longitude")),
            room_types=room_types,
        )
