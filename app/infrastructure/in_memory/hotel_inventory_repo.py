import copy
from decimal import Decimal
from typing import Any, Iterable

from app.application.interfaces.hotel_inventory_repo import HotelInventoryRepo
from app.infrastructure.in_memory.demo_catalog import DEMO_HOTELS


def _matches(hotel: dict[str, Any], destination: str) -> bool:
    needle = destination.lower()
    return any(needle in (hotel.get(key) or "").lower() for key in ("city", "name", "region"))


class InMemoryHotelInventoryRepo(HotelInventoryRepo):
    """Catalog held in process memory, seeded with the demo hotels by default."""

    def __init__(self, hotels: Iterable[dict[str, Any]] | None = None) -> None:
        source = DEMO_HOTELS if hotels is None else hotels
        self._hotels: dict[str, dict[str, Any]] = {h["id"]: copy.deepcopy(h) for h in source}

    async def search_hotels(
        self,
        destination: str | None = None,
        min_rating: float | None = None,
        sort_by: str = "rating",
        limit: int = 24,
    ) -> list[dict[str, Any]]:
        rows = [h for h in self._hotels.values() if h.get("is_active", True)]
        if destination:
            rows = [h for h in rows if _matches(h, destination)]
        if min_rating is not None:
            rows = [h for h in rows if (h.get("review_score") or 0) >= min_rating]

        if sort_by in ("price-asc", "price-desc"):
            priced = [h for h in rows if h.get("min_rate") is not None]
            unpriced = [h for h in rows if h.get("min_rate") is None]
            priced.sort(key=lambda h: Decimal(h["min_rate"]), reverse=sort_by == "price-desc")
            rows = priced + unpriced
        else:
            rows.sort(key=lambda h: h.get("review_score") or 0, reverse=True)

        return [copy.deepcopy(h) for h in rows[:limit]]

    async def get_hotel(self, id_or_slug: str) -> dict[str, Any] | None:
        hotel = self._hotels.get(id_or_slug)
        if hotel is None:
            hotel = next((h for h in self._hotels.values() if h["slug"] == id_or_slug), None)
        if hotel is None or not hotel.get("is_active", True):
            return None
        return copy.deepcopy(hotel)

    async def get_rate_plan(self, rate_plan_id: str) -> dict[str, Any] | None:
        for hotel in self._hotels.values():
            for room in hotel.get("room_types") or []:
                for plan in room.get("rate_plans") or []:
                    if plan["id"] == rate_plan_id:
                        return copy.deepcopy(plan)
        return None
