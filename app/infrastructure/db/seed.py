"""Loads the demo catalog into an empty database."""

import logging
from typing import Any, Iterable

from sqlalchemy import Table, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.tables import (
    add_ons,
    amenities,
    bookings,
    cancellation_policies,
    hotel_amenities,
    hotel_images,
    hotels,
    rate_plan_add_ons,
    rate_plans,
    room_type_amenities,
    room_types,
)
from app.infrastructure.in_memory.demo_catalog import DEMO_HOTELS

logger = logging.getLogger(__name__)


def _columns(table: Table, row: dict[str, Any], **extra: Any) -> dict[str, Any]:
    keys = set(table.c.keys())
    values = {k: v for k, v in row.items() if k in keys}
    values.update(extra)
    return values


async def _insert(session: AsyncSession, table: Table, rows: list[dict[str, Any]]) -> None:
    if rows:
        await session.execute(insert(table), rows)


async def seed_demo_catalog(
    session: AsyncSession,
    hotel_graphs: Iterable[dict[str, Any]] = DEMO_HOTELS,
    booking_rows: Iterable[dict[str, Any]] = (),
) -> bool:
    """
    Insert hotel graphs (and optional bookings) unless the catalog already has hotels.

    Returns True when rows were written. The caller owns the transaction.
    """
    existing = await session.scalar(select(func.count()).select_from(hotels))
    if existing:
        logger.info("Catalog already seeded", extra={"hotels": existing})
        return False

    policy_rows: dict[str, dict] = {}
    amenity_rows: dict[str, dict] = {}
    hotel_rows, image_rows, hotel_amenity_rows, add_on_rows = [], [], [], []
    room_rows, room_amenity_rows, plan_rows, plan_add_on_rows = [], [], [], []

    for hotel in hotel_graphs:
        hotel_rows.append(_columns(hotels, hotel))
        for order, image in enumerate(hotel.get("images") or []):
            image_rows.append(_columns(hotel_images, image, hotel_id=hotel["id"], room_type_id=None, sort_order=order))
        for priority, amenity in enumerate(hotel.get("amenities") or []):
            amenity_rows.setdefault(amenity["id"], _columns(amenities, amenity))
            hotel_amenity_rows.append({"hotel_id": hotel["id"], "amenity_id": amenity["id"], "priority": priority})
        for order, add_on in enumerate(hotel.get("add_ons") or []):
            add_on_rows.append(_columns(add_ons, add_on, hotel_id=hotel["id"], sort_order=order))

        for order, room in enumerate(hotel.get("room_types") or []):
            room_rows.append(_columns(room_types, room, hotel_id=hotel["id"], sort_order=order))
            for image_order, image in enumerate(room.get("images") or []):
                image_rows.append(
                    _columns(hotel_images, image, hotel_id=hotel["id"], room_type_id=room["id"], sort_order=image_order)
                )
            for amenity in room.get("amenities") or []:
                amenity_rows.setdefault(amenity["id"], _columns(amenities, amenity))
                room_amenity_rows.append({"room_type_id": room["id"], "amenity_id": amenity["id"]})

            for plan in room.get("rate_plans") or []:
                policy = plan.get("cancellation_policy")
                if policy:
                    policy_rows.setdefault(policy["id"], _columns(cancellation_policies, policy))
                plan_rows.append(
                    _columns(
                        rate_plans,
                        plan,
                        room_type_id=room["id"],
                        cancellation_policy_id=policy["id"] if policy else None,
                    )
                )
                for item in plan.get("add_ons") or []:
                    plan_add_on_rows.append(
                        {
                            "rate_plan_id": plan["id"],
                            "add_on_id": item["id"],
                            "included": bool(item.get("included")),
                            "additional_price": item.get("additional_price"),
                        }
                    )

    # Parents before children
    await _insert(session, hotels, hotel_rows)
    await _insert(session, amenities, list(amenity_rows.values()))
    await _insert(session, cancellation_policies, list(policy_rows.values()))
    await _insert(session, room_types, room_rows)
    await _insert(session, hotel_images, image_rows)
    await _insert(session, hotel_amenities, hotel_amenity_rows)
    await _insert(session, room_type_amenities, room_amenity_rows)
    await _insert(session, add_ons, add_on_rows)
    await _insert(session, rate_plans, plan_rows)
    await _insert(session, rate_plan_add_ons, plan_add_on_rows)
    await _insert(session, bookings, [_columns(bookings, row) for row in booking_rows])

    logger.info("Seeded demo catalog", extra={"hotels": len(hotel_rows), "rate_plans": len(plan_rows)})
    return True
