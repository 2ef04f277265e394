import unittest
from decimal import Decimal
from unittest.mock import AsyncMock

from app.application.interfaces.supplier_adapter import SupplierRateCheck
from app.application.use_cases.prebook_rate import PrebookRateUseCase, PrebookRequest
from app.config import Settings
from app.domain.errors import SupplierRequestError, ValidationError
from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.gateways.registry import SupplierRegistry
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo


class TestPrebookRateUseCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = Settings(
            _env_file=None,
            hotelbeds_api_key="k",
            hotelbeds_api_secret="s",
            ratehawk_key_id="1",
            ratehawk_api_key="k",
        )
        cache = SharedCache(settings_provider=lambda: self.settings, memory_backend=InMemoryCacheBackend())
        self.registry = SupplierRegistry(self.settings, cache, InMemoryHotelInventoryRepo())
        self.registry.ratehawk.prebook = AsyncMock()
        self.registry.hotelbeds.check_rate = AsyncMock()
        self.use_case = PrebookRateUseCase(self.registry, self.settings)

    def _ratehawk_request(self, amount="100.00", **overrides):
        values = {
            "supplier_code": "RATEHAWK",
            "total_amount": Decimal(amount),
            "currency": "GBP",
            "hotel_id": "riverside_hotel",
            "book_hash": "h-flex-001",
        }
        values.update(overrides)
        return PrebookRequest(**values)

    async def test_small_price_move_is_accepted(self):
        self.registry.ratehawk.prebook.return_value = SupplierRateCheck(
            available=True, price=Decimal("104.99"), currency="GBP", price_changed=True
        )

        result = await self.use_case.execute(self._ratehawk_request())

        self.assertTrue(result.success)
        self.assertTrue(result.price_changed)
        self.assertEqual(result.confirmed_price, Decimal("104.99"))
        self.registry.ratehawk.prebook.assert_awaited_once_with("h-flex-001")

    async def test_move_exactly_at_tolerance_is_accepted(self):
        self.registry.ratehawk.prebook.return_value = SupplierRateCheck(available=True, price=Decimal("105.00"))

        result = await self.use_case.execute(self._ratehawk_request())

        self.assertTrue(result.success)
        self.assertEqual(result.confirmed_price, Decimal("105.00"))

    async def test_large_price_move_is_rejected(self):
        self.registry.ratehawk.prebook.return_value = SupplierRateCheck(
            available=True, price=Decimal("105.01"), currency="GBP"
        )

        result = await self.use_case.execute(self._ratehawk_request())

        self.assertFalse(result.success)
        self.assertTrue(result.price_changed)
        self.assertEqual(result.new_price, Decimal("105.01"))
        self.assertEqual(result.original_price, Decimal("100.00"))
        self.assertEqual(result.error, "Price has changed significantly")
        self.assertFalse(result.is_unavailable)

    async def test_price_drop_beyond_tolerance_is_rejected(self):
        self.registry.ratehawk.prebook.return_value = SupplierRateCheck(available=True, price=Decimal("80.00"))

        result = await self.use_case.execute(self._ratehawk_request())

        self.assertFalse(result.success)
        self.assertEqual(result.new_price, Decimal("80.00"))

    async def test_unchanged_price_confirms_quote(self):
        self.registry.hotelbeds.check_rate.return_value = SupplierRateCheck(available=True, price=Decimal("220.00"))

        result = await self.use_case.execute(
            PrebookRequest(supplier_code="HOTELBEDS", total_amount=Decimal("220.00"), rate_key="rk-flex")
        )

        self.assertTrue(result.success)
        self.assertFalse(result.price_changed)
        self.assertEqual(result.confirmed_price, Decimal("220.00"))
        self.registry.hotelbeds.check_rate.assert_awaited_once_with("rk-flex")

    async def test_unavailable_rate(self):
        self.registry.hotelbeds.check_rate.return_value = SupplierRateCheck(
            available=False, error="Rate no longer available"
        )

        result = await self.use_case.execute(
            PrebookRequest(supplier_code="HOTELBEDS", total_amount=Decimal("220.00"), rate_key="rk-gone")
        )

        self.assertFalse(result.success)
        self.assertTrue(result.is_unavailable)
        self.assertEqual(result.error, "Rate no longer available")

    async def test_supplier_failure_is_reported_as_unavailable(self):
        self.registry.ratehawk.prebook.side_effect = SupplierRequestError("RATEHAWK", "HTTP 502", status_code=502)

        result = await self.use_case.execute(self._ratehawk_request())

        self.assertTrue(result.is_unavailable)
        self.assertIn("HTTP 502", result.error)

    async def test_missing_identifiers_are_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.use_case.execute(PrebookRequest(supplier_code="RATEHAWK", total_amount=Decimal("10")))
        self.assertEqual(ctx.exception.field, "ratePlanId")

        with self.assertRaises(ValidationError) as ctx:
            await self.use_case.execute(self._ratehawk_request(book_hash=None, rate_plan_id="rp-1"))
        self.assertEqual(ctx.exception.detail, "Missing bookHash for RateHawk")

        with self.assertRaises(ValidationError) as ctx:
            await self.use_case.execute(
                PrebookRequest(supplier_code="HOTELBEDS", total_amount=Decimal("10"), book_hash="h-1")
            )
        self.assertEqual(ctx.exception.detail, "Missing rateKey for HotelBeds")

    async def test_synthetic_inventory_skips_supplier(self):
        result = await self.use_case.execute(
            PrebookRequest(
                supplier_code="RATEHAWK",
                total_amount=Decimal("199.00"),
                hotel_id="150123",
                rate_plan_id="rp-1",
            )
        )

        self.assertTrue(result.success)
        self.assertEqual(result.confirmed_price, Decimal("199.00"))
        self.assertEqual(result.currency, "GBP")
        self.registry.ratehawk.prebook.assert_not_awaited()

    async def test_synthetic_rate_plan_prefix(self):
        result = await self.use_case.execute(
            PrebookRequest(supplier_code="HOTELBEDS", total_amount=Decimal("50.00"), rate_plan_id="123456-dbl-flex")
        )

        self.assertTrue(result.success)
        self.registry.hotelbeds.check_rate.assert_not_awaited()

    async def test_ids_outside_synthetic_range_go_to_supplier(self):
        with self.assertRaises(ValidationError):
            await self.use_case.execute(
                PrebookRequest(supplier_code="HOTELBEDS", total_amount=Decimal("50.00"), hotel_id="200000", rate_plan_id="x")
            )

    async def test_local_rates_are_confirmed_as_quoted(self):
        result = await self.use_case.execute(
            PrebookRequest(
                supplier_code="LOCAL",
                total_amount=Decimal("180.00"),
                currency="GBP",
                rate_plan_id="rp-ldn-001-dbl-flex",
            )
        )

        self.assertTrue(result.success)
        self.assertEqual(result.confirmed_price, Decimal("180.00"))
        self.assertEqual(result.currency, "GBP")
