import asyncio
import logging
import re
from decimal import Decimal

from app.application.interfaces.clock import Clock
from app.application.interfaces.hotel_inventory_repo import HotelInventoryRepo
from app.application.interfaces.supplier_adapter import SupplierAdapter
from app.config import Settings
from app.domain.entities.hotel import HotelSummary, SupplierSearchParams
from app.infrastructure.cache.shared_cache import SharedCache
from app.infrastructure.gateways.hotelbeds_adapter import HotelbedsAdapter
from app.infrastructure.gateways.local_inventory_adapter import LocalInventoryAdapter
from app.infrastructure.gateways.normalization import sort_summaries
from app.infrastructure.gateways.ratehawk_adapter import RatehawkAdapter

logger = logging.getLogger(__name__)

DEFAULT_MULTI_SEARCH_LIMIT = 20

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def name_key(name: str) -> str:
    """Lowercase, with every run of non-alphanumerics collapsed to one space."""
    return _NON_ALNUM.sub(" ", name.lower()).strip()


def _is_cheaper(candidate: Decimal | None, current: Decimal | None) -> bool:
    if candidate is None:
        return False
    if current is None:
        return True
    return candidate < current


def dedupe_summaries(summaries: list[HotelSummary]) -> list[HotelSummary]:
    """
    Keep one entry per normalized hotel name: the lower starting rate wins,
    a priced entry beats an unpriced one and the first seen wins ties.
    """
    best: dict[str, HotelSummary] = {}
    for hotel in summaries:
        key = name_key(hotel.name) or f"id:{hotel.supplier_code}:{hotel.id}"
        current = best.get(key)
        if current is None or _is_cheaper(hotel.starting_rate, current.starting_rate):
            best[key] = hotel
    return list(best.values())


class SupplierRegistry:
    """
    Resolves inventory sources by supplier code.

    Remote adapters without credentials, unknown codes and an empty code
    all resolve to the local inventory, so the same configuration always
    yields the same adapter.
    """

    def __init__(
        self,
        settings: Settings,
        cache: SharedCache,
        inventory_repo: HotelInventoryRepo,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings
        self.local = LocalInventoryAdapter(inventory_repo)
        self.hotelbeds = HotelbedsAdapter(settings, cache, fallback=self.local, clock=clock)
        self.ratehawk = RatehawkAdapter(settings, cache, fallback=self.local, clock=clock)
        self._adapters: dict[str, SupplierAdapter] = {
            self.local.code: self.local,
            "LOCAL_MOCK": self.local,
            self.hotelbeds.code: self.hotelbeds,
            self.ratehawk.code: self.ratehawk,
        }

    def get_adapter(self, code: str | None = None) -> SupplierAdapter:
        requested = (code or self._settings.default_supplier or self.local.code).strip().upper()
        adapter = self._adapters.get(requested)
        if adapter is None or not adapter.is_configured:
            return self.local
        return adapter

    def configured_adapters(self) -> list[SupplierAdapter]:
        adapters: list[SupplierAdapter] = [self.local]
        for adapter in (self.hotelbeds, self.ratehawk):
            if adapter.is_configured:
                adapters.append(adapter)
        return adapters

    async def multi_supplier_search(self, params: SupplierSearchParams) -> list[HotelSummary]:
        adapters = self.configured_adapters()
        results = await asyncio.gather(
            *(adapter.search(params) for adapter in adapters),
            return_exceptions=True,
        )

        merged: list[HotelSummary] = []
        for adapter, result in zip(adapters, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Supplier search failed, skipping",
                    extra={"supplier": adapter.code, "error": repr(result)},
                )
                continue
            merged.extend(result)

        ranked = sort_summaries(dedupe_summaries(merged), params.sort_by or "price-asc")
        return ranked[: params.limit or DEFAULT_MULTI_SEARCH_LIMIT]
