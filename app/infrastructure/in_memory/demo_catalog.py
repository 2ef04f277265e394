"""
Demo catalog used by the in-memory inventory and by ``seed_demo_catalog``.

Each hotel is a full graph in the shape ``HotelInventoryRepo`` returns.
Rate plan amounts are for a single night and a single room.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

_FLEX_POLICY = {
    "id": "cp-flex-24",
    "name": "Free cancellation",
    "description": "Cancel up to 24 hours before check-in for a full refund",
    "refundable_until_hours": 24,
    "policy_text": "Full refund up to 24 hours before arrival. 50% refund up to 12 hours before arrival.",
}

_NON_REFUNDABLE_POLICY = {
    "id": "cp-nonref",
    "name": "Non-refundable",
    "description": "No refund on cancellation",
    "refundable_until_hours": None,
    "policy_text": "This rate cannot be refunded.",
}

_AMENITIES = {
    "wifi": {"id": "am-wifi", "name": "Free WiFi", "category": "Connectivity"},
    "spa": {"id": "am-spa", "name": "Spa", "category": "Wellness"},
    "pool": {"id": "am-pool", "name": "Indoor pool", "category": "Wellness"},
    "gym": {"id": "am-gym", "name": "Fitness centre", "category": "Wellness"},
    "bar": {"id": "am-bar", "name": "Cocktail bar", "category": "Food & Drink"},
    "aircon": {"id": "am-aircon", "name": "Air conditioning", "category": "Room"},
    "minibar": {"id": "am-minibar", "name": "Minibar", "category": "Room"},
}


def _plan(
    plan_id: str,
    name: str,
    base_rate: str,
    taxes: str,
    *,
    currency: str = "GBP",
    board_type: str = "ROOM_ONLY",
    rate_type: str = "STANDARD",
    payment_type: str = "PREPAID",
    refundable: bool = True,
    available_rooms: int = 5,
    add_ons: list[dict] | None = None,
) -> dict:
    base = Decimal(base_rate)
    tax = Decimal(taxes)
    return {
        "id": plan_id,
        "name": name,
        "board_type": board_type,
        "rate_type": rate_type,
        "payment_type": payment_type,
        "is_refundable": refundable,
        "currency": currency,
        "base_rate": base,
        "taxes": tax,
        "fees": Decimal("0.00"),
        "total_amount": base + tax,
        "nightly_breakdown": None,
        "promotions": None,
        "inclusions": ["Breakfast"] if board_type == "BED_AND_BREAKFAST" else None,
        "include_breakfast": board_type == "BED_AND_BREAKFAST",
        "available_rooms": available_rooms,
        "cancellation_policy": dict(_FLEX_POLICY if refundable else _NON_REFUNDABLE_POLICY),
        "add_ons": add_ons or [],
    }


DEMO_HOTELS: list[dict] = [
    {
        "id": "hotel-ldn-001",
        "slug": "the-riverside-london",
        "name": "The Riverside London",
        "headline": "Boutique rooms on the South Bank",
        "description": "A converted warehouse overlooking the Thames, a short walk from the theatres.",
        "city": "London",
        "country": "United Kingdom",
        "region": "Greater London",
        "review_score": 8.9,
        "review_count": 1284,
        "default_currency": "GBP",
        "min_rate": Decimal("120.00"),
        "hero_image": "https://images.example.com/riverside/hero.jpg",
        "latitude": 51.5055,
        "longitude": -0.0907,
        "supplier_code": "LOCAL",
        "categories": ["Boutique", "City break"],
        "is_active": True,
        "images": [
            {"id": "img-ldn-001-1", "url": "https://images.example.com/riverside/hero.jpg", "caption": "Facade", "is_primary": True},
            {"id": "img-ldn-001-2", "url": "https://images.example.com/riverside/lobby.jpg", "caption": "Lobby", "is_primary": False},
        ],
        "amenities": [_AMENITIES["wifi"], _AMENITIES["bar"], _AMENITIES["gym"]],
        "add_ons": [
            {
                "id": "ao-ldn-001-breakfast",
                "name": "Full English breakfast",
                "type": "BREAKFAST",
                "price": Decimal("18.00"),
                "currency": "GBP",
                "is_per_night": True,
                "is_complimentary": False,
                "description": "Served in the river room",
            },
            {
                "id": "ao-ldn-001-late",
                "name": "Late checkout",
                "type": "LATE_CHECKOUT",
                "price": Decimal("25.00"),
                "currency": "GBP",
                "is_per_night": False,
                "is_complimentary": False,
                "description": "Keep the room until 2pm",
            },
        ],
        "room_types": [
            {
                "id": "room-ldn-001-dbl",
                "name": "Classic Double",
                "description": "Queen bed and city view",
                "size_sqm": 22.0,
                "view": "City",
                "max_adults": 2,
                "max_children": 1,
                "max_occupancy": 3,
                "is_suite": False,
                "images": [],
                "amenities": [_AMENITIES["aircon"]],
                "rate_plans": [
                    _plan(
                        "rp-ldn-001-dbl-flex",
                        "Flexible rate",
                        "150.00",
                        "30.00",
                        add_ons=[
                            {
                                "id": "ao-ldn-001-breakfast",
                                "name": "Full English breakfast",
                                "type": "BREAKFAST",
                                "included": False,
                                "additional_price": Decimal("18.00"),
                            }
                        ],
                    ),
                    _plan(
                        "rp-ldn-001-dbl-nr",
                        "Saver rate",
                        "120.00",
                        "24.00",
                        rate_type="NON_REFUNDABLE",
                        refundable=False,
                    ),
                ],
            },
            {
                "id": "room-ldn-001-ste",
                "name": "River Suite",
                "description": "Separate lounge with floor-to-ceiling windows",
                "size_sqm": 48.0,
                "view": "River",
                "max_adults": 2,
                "max_children": 2,
                "max_occupancy": 4,
                "is_suite": True,
                "images": [
                    {"id": "img-ldn-001-ste", "url": "https://images.example.com/riverside/suite.jpg", "caption": "Suite", "is_primary": False},
                ],
                "amenities": [_AMENITIES["aircon"], _AMENITIES["minibar"]],
                "rate_plans": [
                    _plan(
                        "rp-ldn-001-ste-bb",
                        "Suite with breakfast",
                        "320.00",
                        "64.00",
                        board_type="BED_AND_BREAKFAST",
                        available_rooms=2,
                    ),
                ],
            },
        ],
    },
    {
        "id": "hotel-ldn-002",
        "slug": "kensington-gardens-hotel",
        "name": "Kensington Gardens Hotel",
        "headline": "Townhouse hotel beside Hyde Park",
        "description": "Victorian townhouse rooms with a spa in the vaulted cellars.",
        "city": "London",
        "country": "United Kingdom",
        "region": "Greater London",
        "review_score": 9.2,
        "review_count": 642,
        "default_currency": "GBP",
        "min_rate": Decimal("180.00"),
        "hero_image": "https://images.example.com/kensington/hero.jpg",
        "latitude": 51.5072,
        "longitude": -0.1877,
        "supplier_code": "LOCAL",
        "categories": ["Luxury", "Spa"],
        "is_active": True,
        "images": [
            {"id": "img-ldn-002-1", "url": "https://images.example.com/kensington/hero.jpg", "caption": "Entrance", "is_primary": True},
        ],
        "amenities": [_AMENITIES["wifi"], _AMENITIES["spa"], _AMENITIES["pool"]],
        "add_ons": [
            {
                "id": "ao-ldn-002-spa",
                "name": "Spa access",
                "type": "SPA",
                "price": Decimal("40.00"),
                "currency": "GBP",
                "is_per_night": False,
                "is_complimentary": False,
                "description": "Day pass for two",
            },
        ],
        "room_types": [
            {
                "id": "room-ldn-002-dlx",
                "name": "Deluxe King",
                "description": "King bed overlooking the park",
                "size_sqm": 30.0,
                "view": "Park",
                "max_adults": 2,
                "max_children": 0,
                "max_occupancy": 2,
                "is_suite": False,
                "images": [],
                "amenities": [_AMENITIES["aircon"], _AMENITIES["minibar"]],
                "rate_plans": [
                    _plan(
                        "rp-ldn-002-dlx-bb",
                        "Bed and breakfast",
                        "180.00",
                        "36.00",
                        board_type="BED_AND_BREAKFAST",
                        available_rooms=3,
                    ),
                ],
            },
        ],
    },
    {
        "id": "hotel-par-001",
        "slug": "hotel-du-marais-paris",
        "name": "Hôtel du Marais",
        "headline": "Right-bank charm in the heart of Le Marais",
        "description": "Seventeenth-century building around a quiet courtyard.",
        "city": "Paris",
        "country": "France",
        "region": "Île-de-France",
        "review_score": 8.4,
        "review_count": 905,
        "default_currency": "EUR",
        "min_rate": Decimal("140.00"),
        "hero_image": "https://images.example.com/marais/hero.jpg",
        "latitude": 48.8575,
        "longitude": 2.3592,
        "supplier_code": "LOCAL",
        "categories": ["Boutique"],
        "is_active": True,
        "images": [
            {"id": "img-par-001-1", "url": "https://images.example.com/marais/hero.jpg", "caption": "Courtyard", "is_primary": True},
        ],
        "amenities": [_AMENITIES["wifi"], _AMENITIES["bar"]],
        "add_ons": [],
        "room_types": [
            {
                "id": "room-par-001-sup",
                "name": "Superior Double",
                "description": "Courtyard-facing double room",
                "size_sqm": 18.0,
                "view": "Courtyard",
                "max_adults": 2,
                "max_children": 0,
                "max_occupancy": 2,
                "is_suite": False,
                "images": [],
                "amenities": [],
                "rate_plans": [
                    _plan(
                        "rp-par-001-sup-flex",
                        "Flexible rate",
                        "140.00",
                        "14.00",
                        currency="EUR",
                        payment_type="PAY_AT_HOTEL",
                    ),
                ],
            },
        ],
    },
]


def demo_bookings(now: datetime | None = None) -> list[dict]:
    """Bookings spread across the refund tiers, relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    base = {
        "status": "CONFIRMED",
        "payment_status": "PAID",
        "currency": "GBP",
        "supplier_code": "LOCAL",
        "hotel_name": "The Riverside London",
        "guest_email": "guest@example.com",
        "cancelled_at": None,
        "refund_amount": None,
        "refund_id": None,
    }
    return [
        {
            **base,
            "id": "bk-demo-flex",
            "booking_reference": "HTL-DEMO01",
            "check_in": now + timedelta(days=10),
            "check_out": now + timedelta(days=12),
            "total_amount": Decimal("360.00"),
            "is_free_cancellation": True,
            "stripe_payment_intent_id": "pi_demo_flex",
        },
        {
            **base,
            "id": "bk-demo-nonref",
            "booking_reference": "HTL-DEMO02",
            "check_in": now + timedelta(days=5),
            "check_out": now + timedelta(days=6),
            "total_amount": Decimal("144.00"),
            "is_free_cancellation": False,
            "stripe_payment_intent_id": "pi_demo_nonref",
        },
    ]
