"""
Parse-and-default helpers shared by the supplier adapters.

Upstream payloads are arbitrary nested JSON; every accessor here tolerates
missing keys, wrong types and unparseable values by returning a default.
"""

import re
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Any

from app.domain.entities.hotel import HotelSummary, SupplierSearchParams
from app.domain.value_objects.money import CENTS, quantize, to_decimal

_DIGITS = re.compile(r"\d+")


def dig(payload: Any, *path: str | int, default: Any = None) -> Any:
    """Walk dict keys / list indexes, returning ``default`` on any miss."""
    current = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return default
            current = current[step]
        else:
            if not isinstance(current, dict) or step not in current:
                return default
            current = current[step]
    return default if current is None else current


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def first_number(value: Any) -> float:
    """Star ratings arrive as 4, "4EST" or "4 ESTRELLAS"."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        match = _DIGITS.search(value)
        if match:
            return float(match.group(0))
    return 0.0


def as_float(value: Any, default: float | None = None) -> float | None:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def hours_until(deadline: Any, now: datetime) -> int | None:
    """
    Whole hours between ``now`` and a free-cancellation deadline.

    Clamped to 0 once the deadline has passed; ``None`` when there is no
    deadline or it cannot be parsed.
    """
    parsed = parse_datetime(deadline)
    if parsed is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    hours = (parsed - now).total_seconds() / 3600
    return max(0, round(hours))


def stay_dates(params: SupplierSearchParams, today: date) -> tuple[date, date]:
    """Check-in defaults to tomorrow, check-out to two nights after check-in."""
    check_in = params.check_in or today + timedelta(days=1)
    check_out = params.check_out or check_in + timedelta(days=2)
    return check_in, check_out


def count_nights(check_in: date, check_out: date) -> int:
    return max(1, (check_out - check_in).days)


def sum_amounts(values: Any) -> Decimal:
    return sum((to_decimal(v) for v in as_list(values)), Decimal("0"))


def split_stay_price(
    room_price: Decimal,
    taxes: Decimal,
    nights: int,
    rooms: int = 1,
) -> tuple[Decimal, Decimal, Decimal, Decimal]:
    """
    Break a stay price into ``(base_rate, taxes, fees, total_amount)``.

    Base rate and taxes are per night per room, rounded down to the cent.
    The cents lost to rounding become per-room fees, so
    ``base_rate*nights*rooms + taxes*nights*rooms + fees*rooms`` is exactly
    ``total_amount``. With one room the total equals the upstream total.
    """
    rooms = max(1, rooms)
    units = max(1, nights) * rooms
    base = (room_price / units).quantize(CENTS, rounding=ROUND_DOWN)
    per_unit_taxes = (taxes / units).quantize(CENTS, rounding=ROUND_DOWN)
    leftover = quantize(room_price + taxes) - (base + per_unit_taxes) * units
    fees = (leftover / rooms).quantize(CENTS, rounding=ROUND_DOWN)
    total = (base + per_unit_taxes) * units + fees * rooms
    return base, per_unit_taxes, fees, quantize(total)


def apply_search_filters(
    summaries: list[HotelSummary],
    params: SupplierSearchParams,
) -> list[HotelSummary]:
    """Price and rating filters plus the optional sort order."""
    filtered = []
    for hotel in summaries:
        price = hotel.starting_rate
        if params.min_price is not None and price is not None and price < params.min_price:
            continue
        if params.max_price is not None and price is not None and price > params.max_price:
            continue
        if params.min_rating is not None and hotel.rating < params.min_rating:
            continue
        filtered.append(hotel)

    if params.sort_by:
        filtered = sort_summaries(filtered, params.sort_by)
    return filtered


def sort_summaries(summaries: list[HotelSummary], sort_by: str | None) -> list[HotelSummary]:
    """Unpriced hotels always sort last for the price orders."""
    if sort_by == "price-asc":
        return sorted(
            summaries,
            key=lambda h: (h.starting_rate is None, h.starting_rate or Decimal("0")),
        )
    if sort_by == "price-desc":
        return sorted(
            summaries,
            key=lambda h: (h.starting_rate is None, -(h.starting_rate or Decimal("0"))),
        )
    return sorted(summaries, key=lambda h: h.rating, reverse=True)
