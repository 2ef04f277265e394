import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from app.api.dependencies import get_rate_limiter, get_registry, get_use_cases
from app.api.schemas.hotels import (
    BookingSelectionResponse,
    HotelDetailsOut,
    HotelSearchRequest,
    HotelSearchResponse,
    HotelSummaryOut,
    SelectionRatePlanOut,
)
from app.application.use_cases.build_booking_selection import (
    BookingSelection,
    BookingSelectionQuery,
    parse_add_on_selections,
)
from app.config import Settings, get_settings
from app.infrastructure.cache.rate_limit import RateLimiter
from app.infrastructure.gateways.registry import SupplierRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def _client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


@router.post("/hotels/search", response_model=HotelSearchResponse)
async def search_hotels(
    payload: HotelSearchRequest,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    registry: SupplierRegistry = Depends(get_registry),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> HotelSearchResponse:
    verdict = await limiter.hit(
        f"search:{_client_key(request)}",
        settings.search_rate_limit,
        settings.search_rate_window_seconds,
    )
    if not verdict.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many search requests. Please try again shortly.",
            headers={"Retry-After": str(settings.search_rate_window_seconds)},
        )
    response.headers["X-RateLimit-Remaining"] = str(verdict.remaining)

    adapter = registry.get_adapter(payload.supplier)
    hotels = await adapter.search(payload.to_params())
    return HotelSearchResponse(
        hotels=[HotelSummaryOut.model_validate(hotel) for hotel in hotels],
        count=len(hotels),
        suppliers=[adapter.code],
    )


@router.post("/hotels/search/multi", response_model=HotelSearchResponse)
async def search_hotels_multi(
    payload: HotelSearchRequest,
    registry: SupplierRegistry = Depends(get_registry),
) -> HotelSearchResponse:
    hotels = await registry.multi_supplier_search(payload.to_params())
    return HotelSearchResponse(
        hotels=[HotelSummaryOut.model_validate(hotel) for hotel in hotels],
        count=len(hotels),
        suppliers=[adapter.code for adapter in registry.configured_adapters()],
    )


@router.get("/hotels/{hotel_id}", response_model=HotelDetailsOut)
async def get_hotel(
    hotel_id: str,
    supplier: str | None = Query(default=None),
    registry: SupplierRegistry = Depends(get_registry),
) -> HotelDetailsOut:
    details = await registry.get_adapter(supplier).get_hotel_details(hotel_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hotel not found")
    return HotelDetailsOut.model_validate(details)


@router.get("/booking-selection", response_model=BookingSelectionResponse)
async def get_booking_selection(
    hotel_id: str = Query(..., alias="hotelId"),
    rate_plan_id: str = Query(..., alias="ratePlanId"),
    room_type_id: str | None = Query(default=None, alias="roomTypeId"),
    check_in: str | None = Query(default=None, alias="checkIn"),
    check_out: str | None = Query(default=None, alias="checkOut"),
    adults: int = Query(default=2, ge=1, le=10),
    children: int = Query(default=0, ge=0, le=10),
    rooms: int = Query(default=1, ge=1, le=8),
    add_ons: str | None = Query(default=None, alias="addOns"),
    supplier: str | None = Query(default=None),
    use_cases=Depends(get_use_cases),
) -> BookingSelectionResponse:
    query = BookingSelectionQuery(
        hotel_id=hotel_id,
        rate_plan_id=rate_plan_id,
        room_type_id=room_type_id,
        check_in=_parse_date(check_in),
        check_out=_parse_date(check_out),
        adults=adults,
        children=children,
        rooms=rooms,
        add_ons=parse_add_on_selections(add_ons),
        supplier_code=supplier,
    )
    selection = await use_cases["booking_selection"].execute(query)
    if selection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Selection not available")
    return _selection_response(selection)


def _selection_response(selection: BookingSelection) -> BookingSelectionResponse:
    rate_plan = SelectionRatePlanOut.model_validate(selection.rate_plan).model_copy(
        update={"cancellation_deadline": selection.cancellation_deadline}
    )
    return BookingSelectionResponse.model_validate(
        {
            "hotel": selection.hotel,
            "room_type": selection.room_type,
            "rate_plan": rate_plan,
            "dates": {
                "check_in": selection.check_in,
                "check_out": selection.check_out,
                "nights": selection.nights,
            },
            "guests": {
                "adults": selection.adults,
                "children": selection.children,
                "rooms": selection.rooms,
            },
            "add_ons": {
                "available": selection.available_add_ons,
                "selected": selection.selected_add_ons,
            },
            "pricing": selection.pricing,
        }
    )
