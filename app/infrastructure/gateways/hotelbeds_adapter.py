import asyncio
import hashlib
import json
import logging
import re
import time
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
    split_stay_price,
    stay_dates,
)
from app.infrastructure.gateways.remote_supplier import RemoteSupplierAdapter

logger = logging.getLogger(__name__)

DESTINATION_TTL = 60 * 60 * 24
SEARCH_TTL = 60
DETAILS_TTL = 60
CONTENT_TTL = 60 * 60 * 24

PHOTOS_BASE_URL = "https://photos.hotelbeds.com/giata/bigger"

# The content API destination search is unreliable for popular cities
DESTINATION_CODES: dict[str, str] = {
    "london": "LON",
    "paris": "PAR",
    "barcelona": "BCN",
    "madrid": "MAD",
    "rome": "ROM",
    "milan": "MIL",
    "amsterdam": "AMS",
    "dubai": "DXB",
    "new york": "NYC",
    "los angeles": "LAX",
    "miami": "MIA",
    "las vegas": "LAS",
    "tokyo": "TYO",
    "singapore": "SIN",
    "hong kong": "HKG",
    "bangkok": "BKK",
    "sydney": "SYD",
    "melbourne": "MEL",
    "lisbon": "LIS",
    "vienna": "VIE",
    "prague": "PRG",
    "berlin": "BER",
    "munich": "MUC",
    "istanbul": "IST",
    "maldives": "MLE",
    "bali": "DPS",
    "phuket": "HKT",
    "cancun": "CUN",
    "santorini": "JTR",
    "mykonos": "JMK",
    "ibiza": "IBZ",
    "mallorca": "PMI",
    "nice": "NCE",
    "florence": "FLR",
    "venice": "VCE",
    "edinburgh": "EDI",
    "manchester": "MAN",
    "dublin": "DUB",
    "athens": "ATH",
    "zurich": "ZRH",
    "geneva": "GVA",
    "brussels": "BRU",
    "copenhagen": "CPH",
    "stockholm": "STO",
    "oslo": "OSL",
    "helsinki": "HEL",
    "marrakech": "RAK",
    "cairo": "CAI",
    "cape town": "CPT",
    "toronto": "YTO",
    "vancouver": "YVR",
    "montreal": "YMQ",
}

RATE_CLASS_NAMES: dict[str, str] = {
    "NOR": "Standard Rate",
    "NRF": "Non-Refundable",
    "GOV": "Government Rate",
    "AAA": "AAA Member Rate",
    "SEN": "Senior Rate",
    "PKG": "Package Rate",
    "PRO": "Promotional Rate",
    "OFR": "Special Offer",
    "COR": "Corporate Rate",
    "RAC": "Rack Rate",
}

_SHORT_CODE = re.compile(r"^[A-Z]{2,3}$")


def build_signature(api_key: str, secret: str, timestamp: int) -> str:
    return hashlib.sha256(f"{api_key}{secret}{timestamp}".encode()).hexdigest()


def map_board(board_code: str | None, board_name: str | None = None) -> BoardType:
    code = (board_code or board_name or "").upper()
    if "BB" in code or "BREAKFAST" in code:
        return BoardType.BED_AND_BREAKFAST
    if "HB" in code:
        return BoardType.HALF_BOARD
    if "FB" in code:
        return BoardType.FULL_BOARD
    if "AI" in code or "ALL" in code:
        return BoardType.ALL_INCLUSIVE
    return BoardType.ROOM_ONLY


def map_payment(payment_type: str | None) -> PaymentType:
    normalized = (payment_type or "").upper()
    if normalized in ("AT_HOTEL", "HOTEL"):
        return PaymentType.PAY_AT_HOTEL
    if normalized == "CREDIT":
        return PaymentType.CREDIT_LIMIT
    return PaymentType.PREPAID


def map_rate_type(rate_class: str | None, refundable: bool) -> RateType:
    code = (rate_class or "").upper()
    if not refundable or "NRF" in code or "NON" in code:
        return RateType.NON_REFUNDABLE
    if "PROMO" in code or "OFFER" in code:
        return RateType.PROMO
    if "FLEX" in code:
        return RateType.FLEX
    return RateType.STANDARD


def friendly_rate_name(rate_class: str | None, board_name: str | None, refundable: bool) -> str:
    code = (rate_class or "").upper()
    for key, name in RATE_CLASS_NAMES.items():
        if key in code:
            return name
    if board_name and len(board_name) > 3 and not re.fullmatch(r"[A-Z]{2,4}", board_name):
        return board_name
    return "Flexible Rate" if refundable else "Non-Refundable Rate"


def stay_total(rate: dict[str, Any]) -> Decimal:
    """What the guest pays for the stay: selling rate plus taxes not already in it."""
    price = rate.get("sellingRate")
    if price in (None, ""):
        price = rate.get("net")
    extra_taxes = sum(
        (
            to_decimal(tax.get("amount"))
            for tax in as_list(dig(rate, "taxes", "taxes"))
            if isinstance(tax, dict) and not tax.get("included", False)
        ),
        Decimal("0"),
    )
    return to_decimal(price) + extra_taxes


def image_url(path: str) -> str:
    if path.startswith("http"):
        return path
    return f"{PHOTOS_BASE_URL}/{path}"


class HotelbedsAdapter(RemoteSupplierAdapter):
    """
    HotelBeds APItude (hotel-api 1.0 and hotel-content-api 1.0).

    Requests are signed with ``X-Signature = sha256(key + secret + unix_ts)``.
    Search results and hotel rates are cached for a minute; destination
    lookups and static content for a day.
    """

    code = "HOTELBEDS"
    quota_pattern = re.compile(r"quota|over qps|over rate|limit exceeded", re.IGNORECASE)

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.hotelbeds_api_key and self._settings.hotelbeds_api_secret)

    @property
    def base_url(self) -> str:
        return self._settings.hotelbeds_base_url.rstrip("/")

    @property
    def language(self) -> str:
        language = self._settings.hotelbeds_language.upper()
        # APItude expects 3-letter language codes
        return "ENG" if language == "EN" else language

    def _auth_headers(self) -> dict[str, str]:
        api_key = self._settings.hotelbeds_api_key or ""
        signature = build_signature(api_key, self._settings.hotelbeds_api_secret or "", int(time.time()))
        return {"Api-key": api_key, "X-Signature": signature}

    # === Destination resolution ===

    async def resolve_destination(self, query: str) -> str | None:
        trimmed = query.strip()
        if not trimmed:
            return None

        upper = trimmed.upper()
        if _SHORT_CODE.match(trimmed):
            return upper

        lowered = trimmed.lower()
        for city, code in DESTINATION_CODES.items():
            if city in lowered or lowered in city:
                return code

        data = await self._cache.with_cache(
            f"hb-dest:{upper}",
            DESTINATION_TTL,
            lambda: self._get(
                "/hotel-content-api/1.0/locations/destinations",
                params={
                    "fields": "all",
                    "language": self.language,
                    "from": 1,
                    "to": 10,
                    "order": "name",
                    "text": trimmed,
                },
            ),
        )
        code = dig(data, "destinations", 0, "code")
        return str(code).upper() if code else None

    # === SupplierAdapter ===

    async def search(self, params: SupplierSearchParams) -> list[HotelSummary]:
        if not self.is_configured:
            return await self._fallback.search(params)
        if not params.destination:
            return []

        check_in, check_out = stay_dates(params, self._clock.now().date())
        nights = count_nights(check_in, check_out)
        limit = params.limit or 20

        try:
            destination_code = await self.resolve_destination(params.destination)
            if not destination_code:
                return []

            body = {
                "stay": {"checkIn": check_in.isoformat(), "checkOut": check_out.isoformat()},
                "occupancies": [
                    {
                        "rooms": params.rooms,
                        "adults": params.adults,
                        "children": params.children,
                        "paxes": self._paxes(params.adults, params.children),
                    }
                ],
                "destination": {"code": destination_code, "type": "SIMPLE"},
                "filter": {"maxHotels": limit, "maxRooms": params.rooms},
                "sourceMarket": self._settings.hotelbeds_source_market,
                "dailyRate": "true",
                "language": self.language,
            }
            cache_key = (
                f"hb-search:{destination_code}:{check_in.isoformat()}:{check_out.isoformat()}:"
                f"{params.adults}:{params.children}:{params.rooms}:{limit}"
            )
            data = await self._cache.with_cache(
                cache_key, SEARCH_TTL, lambda: self._post("/hotel-api/1.0/hotels", body)
            )
        except DomainError as exc:
            return await self._degrade("search", exc, lambda: self._fallback.search(params), [])

        hotels = [h for h in as_list(dig(data, "hotels", "hotels")) if isinstance(h, dict)]
        logger.info(
            "HotelBeds search completed",
            extra={"destination": destination_code, "nights": nights, "count": len(hotels)},
        )
        summaries = [self._to_summary(hotel, nights) for hotel in hotels]
        return apply_search_filters(summaries, params)[:limit]

    async def get_hotel_details(self, hotel_id: str) -> HotelDetails | None:
        if not self.is_configured:
            return await self._fallback.get_hotel_details(hotel_id)
        # APItude only knows numeric hotel codes
        if not hotel_id or not hotel_id.isdigit() or int(hotel_id) <= 0:
            return None

        today = self._clock.now().date()
        check_in = today + timedelta(days=1)
        check_out = today + timedelta(days=2)
        body = {
            "stay": {"checkIn": check_in.isoformat(), "checkOut": check_out.isoformat()},
            "occupancies": [{"rooms": 1, "adults": 2, "children": 0, "paxes": self._paxes(2, 0)}],
            "hotels": {"hotel": [int(hotel_id)]},
            "sourceMarket": self._settings.hotelbeds_source_market,
            "language": self.language,
        }

        try:
            availability, content = await asyncio.gather(
                self._cache.with_cache(
                    f"hb-details:{hotel_id}:{check_in.isoformat()}:{check_out.isoformat()}",
                    DETAILS_TTL,
                    lambda: self._post("/hotel-api/1.0/hotels", body),
                ),
                self._fetch_content(hotel_id),
            )
        except DomainError as exc:
            return await self._degrade(
                "get_hotel_details", exc, lambda: self._fallback.get_hotel_details(hotel_id), None
            )

        hotel = dig(availability, "hotels", "hotels", 0)
        if not isinstance(hotel, dict):
            return None

        details = self._to_details(hotel, count_nights(check_in, check_out))
        if content:
            self._apply_content(details, content)
        return details

    async def get_rate_plan(self, rate_plan_id: str) -> RatePlan | None:
        # Rates are only re-verified through check_rate
        return None

    async def check_rate(self, rate_key: str) -> SupplierRateCheck:
        """
        Re-confirm a rate key before payment.

        Raises:
            SupplierRequestError: Transport, auth or quota failure.
        """
        data = await self._post("/hotel-api/1.0/checkrates", {"rooms": [{"rateKey": rate_key}]})
        rate = dig(data, "hotel", "rooms", 0, "rates", 0)
        if not isinstance(rate, dict):
            return SupplierRateCheck(available=False, error="Rate no longer available", payload=data)

        return SupplierRateCheck(
            available=True,
            price=quantize(stay_total(rate)),
            currency=rate.get("currency") or dig(data, "hotel", "currency"),
            price_changed=rate.get("priceChanged") is True,
            payload=data,
        )

    # === Normalization ===

    @staticmethod
    def _paxes(adults: int, children: int) -> list[dict[str, Any]]:
        return [{"type": "AD", "age": 30}] * adults + [{"type": "CH", "age": 8}] * children

    def _to_rate_plan(self, rate: dict[str, Any], nights: int) -> RatePlan:
        policies = [p for p in as_list(rate.get("cancellationPolicies")) if isinstance(p, dict)]
        is_refundable = bool(policies)
        board_type = map_board(rate.get("boardCode"), rate.get("boardName"))
        rate_class = rate.get("rateClass") or rate.get("rateType")
        rooms = max(1, as_int(rate.get("rooms"), 1))

        total = stay_total(rate)
        selling = to_decimal(rate.get("sellingRate"), None) if rate.get("sellingRate") not in (None, "") else None
        room_price = selling if selling is not None else to_decimal(rate.get("net"))
        base_rate, taxes, fees, total_amount = split_stay_price(room_price, total - room_price, nights, rooms)

        cancellation_policy = None
        if is_refundable:
            deadline = policies[0].get("from")
            cancellation_policy = CancellationPolicy(
                name="Cancellation policy",
                description=f"Free cancellation until {deadline}" if deadline else None,
                refundable_until_hours=hours_until(deadline, self._clock.now()),
                policy_text=json.dumps(policies),
            )

        return RatePlan(
            id=rate.get("rateKey") or str(uuid4()),
            name=friendly_rate_name(rate.get("rateClass"), rate.get("boardName"), is_refundable),
            board_type=board_type,
            rate_type=map_rate_type(rate_class, is_refundable),
            payment_type=map_payment(rate.get("paymentType")),
            is_refundable=is_refundable,
            currency=rate.get("currency") or self._settings.hotelbeds_currency,
            base_rate=base_rate,
            taxes=taxes,
            fees=fees,
            total_amount=total_amount,
            available_rooms=as_int(rate.get("allotment")),
            include_breakfast=board_type == BoardType.BED_AND_BREAKFAST,
            nightly_breakdown=rate.get("dailyRates"),
            promotions=rate.get("promotions"),
            inclusions=rate.get("includedBoard"),
            cancellation_policy=cancellation_policy,
        )

    def _rate_plans(self, hotel: dict[str, Any], nights: int) -> list[RatePlan]:
        return [
            self._to_rate_plan(rate, nights)
            for room in as_list(hotel.get("rooms"))
            if isinstance(room, dict)
            for rate in as_list(room.get("rates"))
            if isinstance(rate, dict)
        ]

    def _to_summary(self, hotel: dict[str, Any], nights: int) -> HotelSummary:
        currency = hotel.get("currency") or self._settings.hotelbeds_currency
        plans = self._rate_plans(hotel, nights)
        cheapest = min(plans, key=lambda p: p.total_amount) if plans else None

        starting_rate = cheapest.base_rate if cheapest else None
        min_rate = to_decimal(hotel.get("minRate"))
        if starting_rate is None and min_rate > 0:
            starting_rate = quantize(min_rate / nights)

        name = dig(hotel, "name", "content") or hotel.get("name") or f"Hotel {hotel.get('code')}"
        location = hotel.get("destinationName") or hotel.get("zoneName") or ""
        return HotelSummary(
            id=str(hotel.get("code", "")),
            slug=str(hotel.get("code", "")),
            name=str(name),
            location=location,
            city=location,
            country=hotel.get("countryCode") or "",
            currency=currency,
            rating=first_number(hotel.get("categoryName") or hotel.get("categoryCode")),
            review_count=0,
            starting_rate=starting_rate,
            supplier_code=self.code,
            min_rate_plan=RatePlanSummary.from_rate_plan(cheapest) if cheapest else None,
        )

    def _to_details(self, hotel: dict[str, Any], nights: int) -> HotelDetails:
        summary = self._to_summary(hotel, nights)
        room_types = []
        for room in as_list(hotel.get("rooms")):
            if not isinstance(room, dict):
                continue
            rates = [r for r in as_list(room.get("rates")) if isinstance(r, dict)]
            max_adults = max((as_int(r.get("adults"), 2) for r in rates), default=2)
            max_children = max((as_int(r.get("children")) for r in rates), default=0)
            name = dig(room, "name", "content") or room.get("name") or "Room"
            room_types.append(
                RoomType(
                    id=f"{summary.id}-{room['code']}" if room.get("code") else str(uuid4()),
                    name=str(name),
                    max_adults=max_adults,
                    max_children=max_children,
                    max_occupancy=max_adults + max_children,
                    description=dig(room, "description", "content"),
                    is_suite="SUITE" in str(name).upper(),
                    rate_plans=[self._to_rate_plan(rate, nights) for rate in rates],
                )
            )

        return HotelDetails(
            **vars(summary),
            description=dig(hotel, "description", "content"),
            review_score=summary.rating,
            room_types=room_types,
        )

    async def _fetch_content(self, hotel_code: str) -> dict[str, Any] | None:
        try:
            data = await self._cache.with_cache(
                f"hb-content:{hotel_code}",
                CONTENT_TTL,
                lambda: self._get(
                    f"/hotel-content-api/1.0/hotels/{hotel_code}",
                    params={"language": self.language, "useSecondaryLanguage": "false"},
                ),
            )
        except DomainError as exc:
            logger.warning(
                "HotelBeds content unavailable",
                extra={"hotel_code": hotel_code, "error": str(exc)},
            )
            return None
        hotel = dig(data, "hotel")
        return hotel if isinstance(hotel, dict) else None

    def _apply_content(self, details: HotelDetails, content: dict[str, Any]) -> None:
        images = []
        for index, image in enumerate(as_list(content.get("images"))):
            if not isinstance(image, dict) or not image.get("path"):
                continue
            images.append(
                Image(
                    id=f"img-{index}",
                    url=image_url(str(image["path"])),
                    caption=(
                        image.get("roomType")
                        or dig(image, "typeDescription", "content")
                        or "Hotel Photo"
                    ),
                    is_primary=index == 0 or dig(image, "type", "code") == "GEN",
                )
            )
        if images:
            details.images = images
            primary = next((img for img in images if img.is_primary), images[0])
            details.hero_image = primary.url
            details.primary_image = primary.url

        description = dig(content, "description", "content")
        if description:
            details.description = description

        amenities = []
        for index, facility in enumerate(as_list(content.get("facilities"))):
            if not isinstance(facility, dict):
                continue
            name = dig(facility, "description", "content") or facility.get("facilityName")
            if name:
                amenities.append(Amenity(id=f"facility-{index}", name=str(name), category="Hotel"))
        if amenities:
            details.amenities = amenities

        latitude = as_float(dig(content, "coordinates", "latitude"))
        longitude = as_float(dig(content, "coordinates", "longitude"))
        if latitude is not None and longitude is not None:
            details.latitude = latitude
            details.longitude = longitude
