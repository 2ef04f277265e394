import unittest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from app.domain.entities.hotel import BoardType, SupplierSearchParams
from app.infrastructure.gateways.local_inventory_adapter import LocalInventoryAdapter
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo


class TestLocalInventoryAdapter(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.adapter = LocalInventoryAdapter(InMemoryHotelInventoryRepo())

    async def test_search_matches_destination_and_sorts_by_rating(self):
        hotels = await self.adapter.search(SupplierSearchParams(destination="london"))

        self.assertEqual([h.id for h in hotels], ["hotel-ldn-002", "hotel-ldn-001"])
        self.assertEqual(hotels[0].location, "London, United Kingdom")
        self.assertEqual(hotels[1].starting_rate, Decimal("120.00"))
        self.assertEqual(hotels[1].supplier_code, "LOCAL")

    async def test_search_applies_price_filters(self):
        hotels = await self.adapter.search(
            SupplierSearchParams(destination="London", max_price=Decimal("150"))
        )

        self.assertEqual([h.id for h in hotels], ["hotel-ldn-001"])

    async def test_search_price_sort(self):
        hotels = await self.adapter.search(SupplierSearchParams(sort_by="price-asc"))

        self.assertEqual([h.starting_rate for h in hotels], [Decimal("120.00"), Decimal("140.00"), Decimal("180.00")])

    async def test_summary_exposes_cheapest_rate_plan(self):
        hotels = await self.adapter.search(SupplierSearchParams(destination="Riverside"))

        self.assertEqual(hotels[0].min_rate_plan.id, "rp-ldn-001-dbl-nr")

    async def test_store_failure_returns_empty(self):
        repo = MagicMock()
        repo.search_hotels = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        hotels = await LocalInventoryAdapter(repo).search(SupplierSearchParams(destination="London"))

        self.assertEqual(hotels, [])

    async def test_hotel_details_by_slug(self):
        details = await self.adapter.get_hotel_details("the-riverside-london")

        self.assertEqual(details.id, "hotel-ldn-001")
        self.assertEqual(details.review_score, 8.9)
        self.assertEqual([a.id for a in details.add_ons], ["ao-ldn-001-breakfast", "ao-ldn-001-late"])
        suite = details.room_types[1]
        self.assertTrue(suite.is_suite)
        plan = suite.rate_plans[0]
        self.assertEqual(plan.board_type, BoardType.BED_AND_BREAKFAST)
        self.assertEqual(plan.total_amount, Decimal("384.00"))
        self.assertEqual(plan.cancellation_policy.refundable_until_hours, 24)

    async def test_unknown_hotel_is_none(self):
        self.assertIsNone(await self.adapter.get_hotel_details("hotel-nowhere"))
        self.assertIsNone(await self.adapter.get_hotel_details(""))

    async def test_get_rate_plan(self):
        plan = await self.adapter.get_rate_plan("rp-ldn-001-dbl-flex")

        self.assertEqual(plan.base_rate, Decimal("150.00"))
        self.assertEqual(plan.add_ons[0].additional_price, Decimal("18.00"))
        self.assertIsNone(await self.adapter.get_rate_plan("rp-missing"))
