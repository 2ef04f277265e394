from collections import defaultdict
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.hotel_inventory_repo import HotelInventoryRepo
from app.infrastructure.db.tables import (
    add_ons,
    amenities,
    cancellation_policies,
    hotel_amenities,
    hotel_images,
    hotels,
    rate_plan_add_ons,
    rate_plans,
    room_type_amenities,
    room_types,
)


class HotelInventoryRepoSQL(HotelInventoryRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def search_hotels(
        self,
        destination: str | None = None,
        min_rating: float | None = None,
        sort_by: str = "rating",
        limit: int = 24,
    ) -> list[dict[str, Any]]:
        stmt = select(hotels).where(hotels.c.is_active.is_(True))
        if destination:
            pattern = f"%{destination}%"
            stmt = stmt.where(
                or_(
                    hotels.c.city.ilike(pattern),
                    hotels.c.name.ilike(pattern),
                    hotels.c.region.ilike(pattern),
                )
            )
        if min_rating is not None:
            stmt = stmt.where(hotels.c.review_score >= min_rating)

        if sort_by == "price-asc":
            stmt = stmt.order_by(hotels.c.min_rate.is_(None), hotels.c.min_rate.asc())
        elif sort_by == "price-desc":
            stmt = stmt.order_by(hotels.c.min_rate.is_(None), hotels.c.min_rate.desc())
        else:
            stmt = stmt.order_by(hotels.c.review_score.desc())

        result = await self._session.execute(stmt.limit(limit))
        rows = [dict(row) for row in result.mappings().all()]
        return await self._attach_graphs(rows)

    async def get_hotel(self, id_or_slug: str) -> dict[str, Any] | None:
        stmt = select(hotels).where(
            hotels.c.is_active.is_(True),
            or_(hotels.c.id == id_or_slug, hotels.c.slug == id_or_slug),
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        graphs = await self._attach_graphs([dict(row)])
        return graphs[0]

    async def get_rate_plan(self, rate_plan_id: str) -> dict[str, Any] | None:
        plans = await self._load_rate_plans(rate_plans.c.id == rate_plan_id)
        return plans[0] if plans else None

    async def _attach_graphs(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return rows
        hotel_ids = [row["id"] for row in rows]

        images_by_hotel: dict[str, list[dict]] = defaultdict(list)
        images_by_room: dict[str, list[dict]] = defaultdict(list)
        result = await self._session.execute(
            select(hotel_images)
            .where(hotel_images.c.hotel_id.in_(hotel_ids))
            .order_by(hotel_images.c.sort_order)
        )
        for image in result.mappings():
            entry = {
                "id": image["id"],
                "url": image["url"],
                "caption": image["caption"],
                "is_primary": image["is_primary"],
            }
            if image["room_type_id"]:
                images_by_room[image["room_type_id"]].append(entry)
            else:
                images_by_hotel[image["hotel_id"]].append(entry)

        amenities_by_hotel: dict[str, list[dict]] = defaultdict(list)
        result = await self._session.execute(
            select(hotel_amenities.c.hotel_id, amenities.c.id, amenities.c.name, amenities.c.category)
            .join(amenities, amenities.c.id == hotel_amenities.c.amenity_id)
            .where(hotel_amenities.c.hotel_id.in_(hotel_ids))
            .order_by(hotel_amenities.c.priority)
        )
        for amenity in result.mappings():
            amenities_by_hotel[amenity["hotel_id"]].append(
                {"id": amenity["id"], "name": amenity["name"], "category": amenity["category"]}
            )

        add_ons_by_hotel: dict[str, list[dict]] = defaultdict(list)
        result = await self._session.execute(
            select(add_ons).where(add_ons.c.hotel_id.in_(hotel_ids)).order_by(add_ons.c.sort_order)
        )
        for add_on in result.mappings():
            add_ons_by_hotel[add_on["hotel_id"]].append(dict(add_on))

        rooms_by_hotel: dict[str, list[dict]] = defaultdict(list)
        result = await self._session.execute(
            select(room_types).where(room_types.c.hotel_id.in_(hotel_ids)).order_by(room_types.c.sort_order)
        )
        rooms = [dict(room) for room in result.mappings()]
        room_ids = [room["id"] for room in rooms]

        plans_by_room: dict[str, list[dict]] = defaultdict(list)
        room_amenities: dict[str, list[dict]] = defaultdict(list)
        if room_ids:
            for plan in await self._load_rate_plans(rate_plans.c.room_type_id.in_(room_ids)):
                plans_by_room[plan.pop("room_type_id")].append(plan)
            result = await self._session.execute(
                select(room_type_amenities.c.room_type_id, amenities.c.id, amenities.c.name, amenities.c.category)
                .join(amenities, amenities.c.id == room_type_amenities.c.amenity_id)
                .where(room_type_amenities.c.room_type_id.in_(room_ids))
            )
            for amenity in result.mappings():
                room_amenities[amenity["room_type_id"]].append(
                    {"id": amenity["id"], "name": amenity["name"], "category": amenity["category"]}
                )

        for room in rooms:
            room["images"] = images_by_room.get(room["id"], [])
            room["amenities"] = room_amenities.get(room["id"], [])
            room["rate_plans"] = plans_by_room.get(room["id"], [])
            rooms_by_hotel[room["hotel_id"]].append(room)

        for row in rows:
            row["images"] = images_by_hotel.get(row["id"], [])
            row["amenities"] = amenities_by_hotel.get(row["id"], [])
            row["add_ons"] = add_ons_by_hotel.get(row["id"], [])
            row["room_types"] = rooms_by_hotel.get(row["id"], [])
            row["categories"] = list(row.get("categories") or [])
        return rows

    async def _load_rate_plans(self, condition) -> list[dict[str, Any]]:
        result = await self._session.execute(select(rate_plans).where(condition))
        plans = [dict(plan) for plan in result.mappings()]
        if not plans:
            return []

        policies: dict[str, dict] = {}
        policy_ids = list({p["cancellation_policy_id"] for p in plans if p["cancellation_policy_id"]})
        if policy_ids:
            result = await self._session.execute(
                select(cancellation_policies).where(cancellation_policies.c.id.in_(policy_ids))
            )
            policies = {policy["id"]: dict(policy) for policy in result.mappings()}

        add_ons_by_plan: dict[str, list[dict]] = defaultdict(list)
        result = await self._session.execute(
            select(
                rate_plan_add_ons.c.rate_plan_id,
                rate_plan_add_ons.c.included,
                rate_plan_add_ons.c.additional_price,
                add_ons.c.id,
                add_ons.c.name,
                add_ons.c.type,
            )
            .join(add_ons, add_ons.c.id == rate_plan_add_ons.c.add_on_id)
            .where(rate_plan_add_ons.c.rate_plan_id.in_([p["id"] for p in plans]))
        )
        for add_on in result.mappings():
            add_ons_by_plan[add_on["rate_plan_id"]].append(
                {
                    "id": add_on["id"],
                    "name": add_on["name"],
                    "type": add_on["type"],
                    "included": add_on["included"],
                    "additional_price": add_on["additional_price"],
                }
            )

        for plan in plans:
            plan["cancellation_policy"] = policies.get(plan.pop("cancellation_policy_id"))
            plan["add_ons"] = add_ons_by_plan.get(plan["id"], [])
        return plans
