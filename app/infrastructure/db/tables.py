from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()

# === Local hotel catalog ===

hotels = Table(
    "hotels",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("slug", String(150), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("headline", String(255)),
    Column("description", Text),
    Column("city", String(120), nullable=False),
    Column("country", String(120), nullable=False),
    Column("region", String(120)),
    Column("review_score", Float),
    Column("review_count", Integer, nullable=False, default=0),
    Column("default_currency", String(3), nullable=False, default="GBP"),
    Column("min_rate", Numeric(12, 2)),
    Column("hero_image", String(500)),
    Column("latitude", Float),
    Column("longitude", Float),
    Column("supplier_code", String(32), nullable=False, default="LOCAL"),
    Column("categories", JSON),
    Column("is_active", Boolean, nullable=False, default=True),
)

room_types = Table(
    "room_types",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("hotel_id", String(36), ForeignKey("hotels.id"), nullable=False),
    Column("name", String(150), nullable=False),
    Column("description", Text),
    Column("size_sqm", Float),
    Column("view", String(100)),
    Column("max_adults", Integer, nullable=False, default=2),
    Column("max_children", Integer, nullable=False, default=0),
    Column("max_occupancy", Integer, nullable=False, default=2),
    Column("is_suite", Boolean, nullable=False, default=False),
    Column("sort_order", Integer, nullable=False, default=0),
)

hotel_images = Table(
    "hotel_images",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("hotel_id", String(36), ForeignKey("hotels.id"), nullable=False),
    Column("room_type_id", String(36), ForeignKey("room_types.id")),
    Column("url", String(500), nullable=False),
    Column("caption", String(255)),
    Column("is_primary", Boolean, nullable=False, default=False),
    Column("sort_order", Integer, nullable=False, default=0),
)

amenities = Table(
    "amenities",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(150), nullable=False),
    Column("category", String(60), nullable=False),
)

hotel_amenities = Table(
    "hotel_amenities",
    metadata,
    Column("hotel_id", String(36), ForeignKey("hotels.id"), primary_key=True),
    Column("amenity_id", String(36), ForeignKey("amenities.id"), primary_key=True),
    Column("priority", Integer, nullable=False, default=0),
)

room_type_amenities = Table(
    "room_type_amenities",
    metadata,
    Column("room_type_id", String(36), ForeignKey("room_types.id"), primary_key=True),
    Column("amenity_id", String(36), ForeignKey("amenities.id"), primary_key=True),
)

add_ons = Table(
    "add_ons",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("hotel_id", String(36), ForeignKey("hotels.id"), nullable=False),
    Column("name", String(150), nullable=False),
    Column("type", String(32), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("is_per_night", Boolean, nullable=False, default=False),
    Column("is_complimentary", Boolean, nullable=False, default=False),
    Column("description", String(500)),
    Column("sort_order", Integer, nullable=False, default=0),
)

cancellation_policies = Table(
    "cancellation_policies",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(150), nullable=False),
    Column("description", String(500)),
    Column("refundable_until_hours", Integer),
    Column("policy_text", Text),
)

rate_plans = Table(
    "rate_plans",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("room_type_id", String(36), ForeignKey("room_types.id"), nullable=False),
    Column("name", String(150), nullable=False),
    Column("board_type", String(32), nullable=False),
    Column("rate_type", String(32), nullable=False),
    Column("payment_type", String(32), nullable=False),
    Column("is_refundable", Boolean, nullable=False, default=False),
    Column("currency", String(3), nullable=False),
    Column("base_rate", Numeric(12, 2), nullable=False),
    Column("taxes", Numeric(12, 2), nullable=False, default=0),
    Column("fees", Numeric(12, 2), nullable=False, default=0),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column("nightly_breakdown", JSON),
    Column("promotions", JSON),
    Column("inclusions", JSON),
    Column("include_breakfast", Boolean, nullable=False, default=False),
    Column("available_rooms", Integer, nullable=False, default=0),
    Column("cancellation_policy_id", String(36), ForeignKey("cancellation_policies.id")),
)

rate_plan_add_ons = Table(
    "rate_plan_add_ons",
    metadata,
    Column("rate_plan_id", String(64), ForeignKey("rate_plans.id"), primary_key=True),
    Column("add_on_id", String(36), ForeignKey("add_ons.id"), primary_key=True),
    Column("included", Boolean, nullable=False, default=False),
    Column("additional_price", Numeric(12, 2)),
)

# === Bookings (cancellation flow) ===

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("booking_reference", String(32), nullable=False, unique=True),
    Column("status", String(32), nullable=False),
    Column("payment_status", String(32), nullable=False),
    Column("check_in", DateTime, nullable=False),
    Column("check_out", DateTime, nullable=False),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("is_free_cancellation", Boolean, nullable=False, default=False),
    Column("supplier_code", String(32), nullable=False, default="LOCAL"),
    Column("hotel_name", String(255), nullable=False, default=""),
    Column("guest_email", String(255)),
    Column("stripe_payment_intent_id", String(100)),
    Column("cancelled_at", DateTime),
    Column("refund_amount", Numeric(12, 2)),
    Column("refund_id", String(100)),
)

booking_activities = Table(
    "booking_activities",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False),
    Column("type", String(50), nullable=False),
    Column("message", String(500), nullable=False),
    Column("actor", String(255), nullable=False),
    Column("actor_role", String(32), nullable=False),
    Column("created_at", DateTime, nullable=False),
)
