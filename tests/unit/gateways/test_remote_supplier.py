import unittest

from pybreaker import CircuitBreaker

from app.config import Settings
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.gateways.local_inventory_adapter import LocalInventoryAdapter
from app.infrastructure.gateways.remote_supplier import RemoteSupplierAdapter
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo


class _NoEndpointAdapter(RemoteSupplierAdapter):
    code = "NOENDPOINT"

    async def search(self, params):
        return []

    async def get_hotel_details(self, hotel_id):
        return None

    async def get_rate_plan(self, rate_plan_id):
        return None


class _EndpointAdapter(_NoEndpointAdapter):
    @property
    def base_url(self) -> str:
        return "https://supplier.test"


class TestRemoteSupplierAdapter(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(_env_file=None)
        self.cache = SharedCache(settings_provider=lambda: self.settings)
        self.local = LocalInventoryAdapter(InMemoryHotelInventoryRepo())

    def test_adapter_without_base_url_cannot_be_built(self):
        with self.assertRaises(TypeError):
            _NoEndpointAdapter(
                self.settings, self.cache, fallback=self.local, breaker=CircuitBreaker(fail_max=3, reset_timeout=60)
            )

    def test_adapter_with_base_url_builds(self):
        adapter = _EndpointAdapter(
            self.settings, self.cache, fallback=self.local, breaker=CircuitBreaker(fail_max=3, reset_timeout=60)
        )

        self.assertEqual(adapter.base_url, "https://supplier.test")
