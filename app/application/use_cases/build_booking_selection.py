import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from urllib.parse import unquote

from app.application.interfaces.clock import Clock, SystemClock
from app.domain.entities.hotel import AddOn, HotelDetails, RatePlan, RoomType, SupplierSearchParams
from app.domain.value_objects.money import quantize
from app.infrastructure.gateways.normalization import count_nights, stay_dates
from app.infrastructure.gateways.registry import SupplierRegistry

logger = logging.getLogger(__name__)


@dataclass
class AddOnSelection:
    id: str
    quantity: int = 1


@dataclass
class BookingSelectionQuery:
    hotel_id: str
    rate_plan_id: str
    room_type_id: str | None = None
    check_in: date | None = None
    check_out: date | None = None
    adults: int = 2
    children: int = 0
    rooms: int = 1
    add_ons: list[AddOnSelection] = field(default_factory=list)
    supplier_code: str | None = None


@dataclass
class SelectedAddOn:
    id: str
    name: str
    price: Decimal
    currency: str
    quantity: int
    total: Decimal


@dataclass
class SelectionPricing:
    nightly_rate: Decimal
    subtotal: Decimal
    taxes: Decimal
    fees: Decimal
    add_ons: Decimal
    total: Decimal


@dataclass
class BookingSelection:
    hotel: HotelDetails
    room_type: RoomType
    rate_plan: RatePlan
    cancellation_deadline: datetime | None
    check_in: date
    check_out: date
    nights: int
    adults: int
    children: int
    rooms: int
    available_add_ons: list[AddOn]
    selected_add_ons: list[SelectedAddOn]
    pricing: SelectionPricing


def parse_add_on_selections(raw: str | None) -> list[AddOnSelection]:
    """Decode ``[{"id": ..., "quantity": ...}]``; malformed payloads select nothing."""
    if not raw:
        return []
    try:
        parsed = json.loads(unquote(raw))
    except ValueError:
        logger.info("Ignoring malformed add-on selection", extra={"raw": raw[:200]})
        return []
    if not isinstance(parsed, list):
        return []

    selections = []
    for entry in parsed:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        try:
            quantity = int(entry.get("quantity") or 1)
        except (TypeError, ValueError):
            quantity = 1
        selections.append(AddOnSelection(id=str(entry["id"]), quantity=max(1, quantity)))
    return selections


class BuildBookingSelectionUseCase:
    """Composes the priced checkout selection for one rate plan."""

    def __init__(self, registry: SupplierRegistry, clock: Clock | None = None) -> None:
        self._registry = registry
        self._clock = clock or SystemClock()

    async def execute(self, query: BookingSelectionQuery) -> BookingSelection | None:
        if not query.hotel_id or not query.rate_plan_id:
            return None

        adapter = self._registry.get_adapter(query.supplier_code)
        hotel = await adapter.get_hotel_details(query.hotel_id)
        if hotel is None:
            return None

        room_type = next((room for room in hotel.room_types if room.id == query.room_type_id), None)
        if room_type is None:
            room_type = next(
                (
                    room
                    for room in hotel.room_types
                    if any(plan.id == query.rate_plan_id for plan in room.rate_plans)
                ),
                None,
            )
        if room_type is None:
            return None

        rate_plan = next((plan for plan in room_type.rate_plans if plan.id == query.rate_plan_id), None)
        if rate_plan is None:
            rate_plan = await adapter.get_rate_plan(query.rate_plan_id)
        if rate_plan is None:
            return None

        check_in, check_out = stay_dates(
            SupplierSearchParams(check_in=query.check_in, check_out=query.check_out),
            self._clock.today().date(),
        )
        nights = count_nights(check_in, check_out)
        rooms = max(1, query.rooms)

        selected: list[SelectedAddOn] = []
        add_ons_by_id = {add_on.id: add_on for add_on in hotel.add_ons}
        for selection in query.add_ons:
            add_on = add_ons_by_id.get(selection.id)
            if add_on is None:
                continue
            selected.append(
                SelectedAddOn(
                    id=add_on.id,
                    name=add_on.name,
                    price=add_on.price,
                    currency=add_on.currency,
                    quantity=selection.quantity,
                    total=quantize(add_on.price * selection.quantity),
                )
            )

        subtotal = quantize(rate_plan.base_rate * nights * rooms)
        taxes = quantize(rate_plan.taxes * nights * rooms)
        fees = quantize(rate_plan.fees * rooms)
        add_ons_total = quantize(sum((item.total for item in selected), Decimal("0")))

        policy = rate_plan.cancellation_policy
        deadline = None
        if policy and policy.refundable_until_hours:
            deadline = self._clock.now() + timedelta(hours=policy.refundable_until_hours)

        return BookingSelection(
            hotel=hotel,
            room_type=room_type,
            rate_plan=rate_plan,
            cancellation_deadline=deadline,
            check_in=check_in,
            check_out=check_out,
            nights=nights,
            adults=query.adults,
            children=query.children,
            rooms=rooms,
            available_add_ons=hotel.add_ons,
            selected_add_ons=selected,
            pricing=SelectionPricing(
                nightly_rate=rate_plan.base_rate,
                subtotal=subtotal,
                taxes=taxes,
                fees=fees,
                add_ons=add_ons_total,
                total=subtotal + taxes + fees + add_ons_total,
            ),
        )
