from typing import Any


class HotelInventoryRepo:
    """
    Read access to the local hotel catalog.

    Rows come back as plain dicts with snake_case keys. A full hotel graph
    nests ``room_types`` (each with ``rate_plans``, ``images`` and
    ``amenities``), ``amenities``, ``images``, ``add_ons`` and ``categories``.
    """

    async def search_hotels(
        self,
        destination: str | None = None,
        min_rating: float | None = None,
        sort_by: str = "rating",
        limit: int = 24,
    ) -> list[dict[str, Any]]:
        """
        Active hotels whose city, name or region contains ``destination``.

        Each row carries its images, categories and room types with rate
        plans so the cheapest plan can be summarized.
        """
        raise NotImplementedError

    async def get_hotel(self, id_or_slug: str) -> dict[str, Any] | None:
        raise NotImplementedError

    async def get_rate_plan(self, rate_plan_id: str) -> dict[str, Any] | None:
        raise NotImplementedError
