import unittest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from urllib.parse import quote

from app.application.interfaces.clock import FakeClock
from app.application.use_cases.build_booking_selection import (
    AddOnSelection,
    BookingSelectionQuery,
    BuildBookingSelectionUseCase,
    parse_add_on_selections,
)
from app.config import Settings
from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.gateways.registry import SupplierRegistry
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestBuildBookingSelection(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        settings = Settings(_env_file=None)
        cache = SharedCache(settings_provider=lambda: settings, memory_backend=InMemoryCacheBackend())
        self.clock = FakeClock(NOW)
        registry = SupplierRegistry(settings, cache, InMemoryHotelInventoryRepo(), clock=self.clock)
        self.use_case = BuildBookingSelectionUseCase(registry, clock=self.clock)

    async def test_prices_stay_rooms_and_add_ons(self):
        selection = await self.use_case.execute(
            BookingSelectionQuery(
                hotel_id="hotel-ldn-001",
                rate_plan_id="rp-ldn-001-dbl-flex",
                check_in=date(2026, 3, 10),
                check_out=date(2026, 3, 13),
                rooms=2,
                add_ons=[
                    AddOnSelection("ao-ldn-001-breakfast", 2),
                    AddOnSelection("ao-ldn-001-late"),
                    AddOnSelection("ao-unknown", 5),
                ],
            )
        )

        self.assertEqual(selection.room_type.id, "room-ldn-001-dbl")
        self.assertEqual(selection.nights, 3)
        self.assertEqual(selection.rooms, 2)
        self.assertEqual([(a.id, a.quantity, a.total) for a in selection.selected_add_ons], [
            ("ao-ldn-001-breakfast", 2, Decimal("36.00")),
            ("ao-ldn-001-late", 1, Decimal("25.00")),
        ])
        pricing = selection.pricing
        self.assertEqual(pricing.nightly_rate, Decimal("150.00"))
        self.assertEqual(pricing.subtotal, Decimal("900.00"))
        self.assertEqual(pricing.taxes, Decimal("180.00"))
        self.assertEqual(pricing.fees, Decimal("0.00"))
        self.assertEqual(pricing.add_ons, Decimal("61.00"))
        self.assertEqual(pricing.total, Decimal("1141.00"))
        self.assertEqual(selection.cancellation_deadline, NOW + timedelta(hours=24))
        self.assertEqual(len(selection.available_add_ons), 2)

    async def test_default_dates_are_tomorrow_for_two_nights(self):
        selection = await self.use_case.execute(
            BookingSelectionQuery(hotel_id="the-riverside-london", rate_plan_id="rp-ldn-001-dbl-nr")
        )

        self.assertEqual((selection.check_in, selection.check_out), (date(2026, 3, 2), date(2026, 3, 4)))
        self.assertEqual(selection.pricing.total, Decimal("288.00"))
        self.assertIsNone(selection.cancellation_deadline)

    async def test_explicit_room_type(self):
        selection = await self.use_case.execute(
            BookingSelectionQuery(
                hotel_id="hotel-ldn-001",
                room_type_id="room-ldn-001-ste",
                rate_plan_id="rp-ldn-001-ste-bb",
                check_in=date(2026, 3, 10),
                check_out=date(2026, 3, 11),
            )
        )

        self.assertTrue(selection.room_type.is_suite)
        self.assertEqual(selection.pricing.total, Decimal("384.00"))

    async def test_unknown_hotel_or_rate_plan(self):
        self.assertIsNone(
            await self.use_case.execute(BookingSelectionQuery(hotel_id="hotel-x", rate_plan_id="rp-ldn-001-dbl-flex"))
        )
        self.assertIsNone(
            await self.use_case.execute(BookingSelectionQuery(hotel_id="hotel-ldn-001", rate_plan_id="rp-par-001-sup-flex"))
        )
        self.assertIsNone(await self.use_case.execute(BookingSelectionQuery(hotel_id="", rate_plan_id="")))


class TestParseAddOnSelections(unittest.TestCase):
    def test_decodes_url_encoded_json(self):
        raw = quote('[{"id": "ao-1", "quantity": 3}, {"id": "ao-2"}]')

        self.assertEqual(parse_add_on_selections(raw), [AddOnSelection("ao-1", 3), AddOnSelection("ao-2", 1)])

    def test_bad_quantities_become_one(self):
        raw = '[{"id": "a", "quantity": 0}, {"id": "b", "quantity": -2}, {"id": "c", "quantity": "many"}]'

        self.assertEqual([s.quantity for s in parse_add_on_selections(raw)], [1, 1, 1])

    def test_malformed_payloads_select_nothing(self):
        self.assertEqual(parse_add_on_selections("{not json"), [])
        self.assertEqual(parse_add_on_selections('{"id": "a"}'), [])
        self.assertEqual(parse_add_on_selections('[{"quantity": 2}, "x"]'), [])
        self.assertEqual(parse_add_on_selections(None), [])
