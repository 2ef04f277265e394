import unittest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from app.application.interfaces.clock import FakeClock
from app.config import Settings
from app.domain.entities.hotel import BoardType, PaymentType, RateType, SupplierSearchParams
from app.domain.errors import SupplierNotConfiguredError, SupplierRequestError
from app.infrastructure.cache.memory_backend import InMemoryCacheBackend
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.gateways.local_inventory_adapter import LocalInventoryAdapter
from app.infrastructure.gateways.ratehawk_adapter import RatehawkAdapter, map_meal, map_payment, rate_total
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo

REGION_RESPONSE = {"status": "ok", "data": {"regions": [{"id": 2114, "name": "London"}]}}

FLEX_RATE = {
    "book_hash": "h-flex-001",
    "room_name": "Deluxe Double",
    "daily_prices": ["100.00", "110.00"],
    "meal": "breakfast",
    "rooms_available": 4,
    "free_cancellation_before": "2026-03-08T12:00:00",
    "payment_options": {
        "payment_types": [{"amount": "210.00", "show_currency_code": "GBP", "currency_code": "GBP", "type": "now"}]
    },
}

SERP_RESPONSE = {
    "status": "ok",
    "data": {
        "hotels": [
            {
                "id": "riverside_hotel",
                "name": "Riverside Hotel",
                "star_rating": 4,
                "region": {"name": "London", "country_code": "GB"},
                "rates": [FLEX_RATE],
            }
        ]
    },
}


def _response(payload=None, status_code=200, text=""):
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.is_success = 200 <= status_code < 300
    mock_resp.text = text
    mock_resp.json.return_value = payload
    return mock_resp


class TestRatehawkAdapter(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = Settings(
            _env_file=None,
            ratehawk_key_id="1234",
            ratehawk_api_key="rh-key",
            ratehawk_base_url="https://rh.test/api/b2b/v3",
        )
        self.cache = SharedCache(
            settings_provider=lambda: self.settings,
            memory_backend=InMemoryCacheBackend(),
        )
        self.clock = FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))
        self.local = LocalInventoryAdapter(InMemoryHotelInventoryRepo())
        self.adapter = RatehawkAdapter(self.settings, self.cache, fallback=self.local, clock=self.clock)
        self.params = SupplierSearchParams(
            destination="London",
            check_in=date(2026, 3, 10),
            check_out=date(2026, 3, 12),
        )

    def _client(self, mock_client_cls, *responses):
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.post.side_effect = list(responses)
        mock_client_cls.return_value = mock_client
        return mock_client

    @patch("httpx.AsyncClient")
    async def test_search_resolves_region_then_normalizes(self, mock_client_cls):
        mock_client = self._client(mock_client_cls, _response(REGION_RESPONSE), _response(SERP_RESPONSE))

        hotels = await self.adapter.search(self.params)

        self.assertEqual(len(hotels), 1)
        hotel = hotels[0]
        self.assertEqual(hotel.id, "riverside_hotel")
        self.assertEqual(hotel.city, "London")
        self.assertEqual(hotel.rating, 4.0)
        self.assertEqual(hotel.supplier_code, "RATEHAWK")
        self.assertEqual(hotel.starting_rate, Decimal("105.00"))
        self.assertEqual(hotel.min_rate_plan.id, "h-flex-001")
        self.assertEqual(hotel.min_rate_plan.rate_type, RateType.FLEX)

        region_call, serp_call = mock_client.post.call_args_list
        self.assertEqual(region_call.args[0], "https://rh.test/api/b2b/v3/search/multicomplete/")
        self.assertEqual(serp_call.args[0], "https://rh.test/api/b2b/v3/search/serp/region/")
        self.assertEqual(serp_call.kwargs["json"]["region_id"], 2114)
        self.assertEqual(serp_call.kwargs["json"]["checkin"], "2026-03-10")
        self.assertEqual(serp_call.kwargs["auth"], ("1234", "rh-key"))

    @patch("httpx.AsyncClient")
    async def test_unknown_region_uses_local_inventory(self, mock_client_cls):
        self._client(mock_client_cls, _response({"status": "ok", "data": {"regions": []}}))

        hotels = await self.adapter.search(self.params)

        self.assertEqual({h.supplier_code for h in hotels}, {"LOCAL"})

    @patch("httpx.AsyncClient")
    async def test_rate_limited_search_uses_local_inventory(self, mock_client_cls):
        self._client(mock_client_cls, _response(status_code=429, text="Too Many Requests"))

        hotels = await self.adapter.search(self.params)

        self.assertEqual({h.supplier_code for h in hotels}, {"LOCAL"})

    @patch("httpx.AsyncClient")
    async def test_prebook_reports_current_price(self, mock_client_cls):
        mock_client = self._client(
            mock_client_cls,
            _response(
                {
                    "status": "ok",
                    "data": {
                        "hotels": [{"rates": [{**FLEX_RATE, "daily_prices": ["105.00", "110.00"]}]}],
                        "changes": {"price_changed": True},
                    },
                }
            ),
        )

        check = await self.adapter.prebook("h-flex-001")

        self.assertTrue(check.available)
        self.assertEqual(check.price, Decimal("215.00"))
        self.assertEqual(check.currency, "GBP")
        self.assertTrue(check.price_changed)
        args, kwargs = mock_client.post.call_args
        self.assertEqual(args[0], "https://rh.test/api/b2b/v3/search/prebook/")
        self.assertEqual(kwargs["json"], {"hash": "h-flex-001", "price_increase_percent": 5})

    @patch("httpx.AsyncClient")
    async def test_prebook_error_status_is_unavailable(self, mock_client_cls):
        self._client(mock_client_cls, _response({"status": "error", "error": "rate_not_found"}))

        check = await self.adapter.prebook("h-expired")

        self.assertFalse(check.available)
        self.assertEqual(check.error, "rate_not_found")

    @patch("httpx.AsyncClient")
    async def test_prebook_propagates_transport_failures(self, mock_client_cls):
        self._client(mock_client_cls, _response(status_code=502, text="Bad Gateway"))

        with self.assertRaises(SupplierRequestError):
            await self.adapter.prebook("h-flex-001")

    @patch("httpx.AsyncClient")
    async def test_hotel_details_group_rates_by_room(self, mock_client_cls):
        info = {"status": "ok", "data": {"id": "riverside_hotel", "name": "Riverside Hotel", "star_rating": 4,
                                          "description": "On the river", "images": ["https://img.test/1.jpg"],
                                          "amenities": ["Wi-Fi", "Bar"], "latitude": 51.5, "longitude": -0.1}}
        hotelpage = {
            "status": "ok",
            "data": {
                "hotels": [
                    {
                        "rates": [
                            FLEX_RATE,
                            {**FLEX_RATE, "book_hash": "h-nr-002", "free_cancellation_before": None, "meal": "nomeal"},
                            {**FLEX_RATE, "book_hash": "h-ste-003", "room_name": "Junior Suite"},
                        ]
                    }
                ]
            },
        }
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client

        async def post(url, **kwargs):
            return _response(info if url.endswith("/hotel/info/") else hotelpage)

        mock_client.post.side_effect = post
        mock_client_cls.return_value = mock_client

        details = await self.adapter.get_hotel_details("riverside_hotel")

        self.assertEqual(details.description, "On the river")
        self.assertEqual([a.name for a in details.amenities], ["Wi-Fi", "Bar"])
        self.assertEqual([room.name for room in details.room_types], ["Deluxe Double", "Junior Suite"])
        self.assertTrue(details.room_types[1].is_suite)
        deluxe = details.room_types[0]
        self.assertEqual([plan.id for plan in deluxe.rate_plans], ["h-flex-001", "h-nr-002"])
        non_refundable = deluxe.rate_plans[1]
        self.assertFalse(non_refundable.is_refundable)
        self.assertEqual(non_refundable.board_type, BoardType.ROOM_ONLY)
        self.assertIsNone(non_refundable.cancellation_policy.refundable_until_hours)

    @patch("httpx.AsyncClient")
    async def test_payment_only_rate_is_priced_per_requested_night(self, mock_client_cls):
        payment_only = {
            "book_hash": "h-pay-004",
            "payment_options": {"payment_types": [{"amount": "300.00", "currency_code": "GBP", "type": "now"}]},
        }
        serp = {"status": "ok", "data": {"hotels": [{"id": "riverside_hotel", "rates": [payment_only]}]}}
        self._client(mock_client_cls, _response(REGION_RESPONSE), _response(serp))

        hotels = await self.adapter.search(self.params)

        self.assertEqual(hotels[0].starting_rate, Decimal("150.00"))
        self.assertEqual(hotels[0].min_rate_plan.total_amount, Decimal("300.00"))

    @patch("httpx.AsyncClient")
    async def test_hotel_details_tolerate_non_numeric_fields(self, mock_client_cls):
        info = {"status": "ok", "data": {"id": "riverside_hotel", "name": "Riverside Hotel", "star_rating": 4,
                                          "reviews": {"rating": "n/a"}, "latitude": "unknown", "longitude": ""}}
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client

        async def post(url, **kwargs):
            return _response(info if url.endswith("/hotel/info/") else {"status": "ok", "data": {"hotels": []}})

        mock_client.post.side_effect = post
        mock_client_cls.return_value = mock_client

        details = await self.adapter.get_hotel_details("riverside_hotel")

        self.assertEqual(details.review_score, 4.0)
        self.assertIsNone(details.latitude)
        self.assertIsNone(details.longitude)

    def test_rate_plan_components_recompose_total(self):
        cases = [
            (FLEX_RATE, 2),
            ({"payment_options": {"payment_types": [{"amount": "300.00", "type": "now"}]}}, 2),
            ({"daily_prices": ["33.33", "33.33", "33.34"]}, 3),
            ({"payment_options": {"payment_types": [{"amount": "100.01", "type": "now"}]}}, 7),
        ]
        for rate, nights in cases:
            with self.subTest(rate=rate, nights=nights):
                plan = self.adapter._to_rate_plan(rate, nights)

                self.assertEqual(plan.taxes, Decimal("0.00"))
                self.assertEqual(plan.fees, Decimal("0.00"))
                self.assertEqual(plan.total_amount, plan.base_rate * nights + plan.taxes * nights + plan.fees)
                self.assertLess(abs(plan.total_amount - rate_total(rate)), Decimal("0.01") * nights)

    async def test_unconfigured_prebook_raises(self):
        adapter = RatehawkAdapter(Settings(_env_file=None), self.cache, fallback=self.local, clock=self.clock)

        with self.assertRaises(SupplierNotConfiguredError):
            await adapter.prebook("h-flex-001")


class TestRatehawkMapping(unittest.TestCase):
    def test_meal_mapping(self):
        self.assertEqual(map_meal("breakfast-buffet"), BoardType.BED_AND_BREAKFAST)
        self.assertEqual(map_meal("half-board"), BoardType.HALF_BOARD)
        self.assertEqual(map_meal("all-inclusive"), BoardType.ALL_INCLUSIVE)
        self.assertEqual(map_meal(None), BoardType.ROOM_ONLY)

    def test_rate_total_prefers_daily_prices(self):
        self.assertEqual(rate_total(FLEX_RATE), Decimal("210.00"))
        self.assertEqual(rate_total({**FLEX_RATE, "daily_prices": []}), Decimal("210.00"))
        self.assertEqual(rate_total({}), Decimal("0"))

    def test_prepaid_payment(self):
        self.assertEqual(map_payment(FLEX_RATE), PaymentType.PREPAID)
        self.assertEqual(map_payment({"payment_options": {"payment_types": [{"type": "hotel"}]}}), PaymentType.PAY_AT_HOTEL)
