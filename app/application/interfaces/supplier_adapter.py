from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.domain.entities.hotel import HotelDetails, HotelSummary, RatePlan, SupplierSearchParams


@dataclass
class SupplierRateCheck:
    """Outcome of re-confirming a single rate with the supplier of record."""

    available: bool
    price: Decimal | None = None
    currency: str | None = None
    price_changed: bool = False
    error: str | None = None
    payload: dict[str, Any] | None = None


class SupplierAdapter(ABC):
    """
    Capability contract every inventory source implements.

    ``search`` and ``get_hotel_details`` never raise: an unreachable or
    misconfigured supplier yields an empty list / ``None`` (or the local
    inventory, for remote suppliers that degrade).
    """

    code: str = ""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def search(self, params: SupplierSearchParams) -> list[HotelSummary]:
        pass

    @abstractmethod
    async def get_hotel_details(self, hotel_id: str) -> HotelDetails | None:
        pass

    @abstractmethod
    async def get_rate_plan(self, rate_plan_id: str) -> RatePlan | None:
        """
        Resolve a standalone rate plan.

        Suppliers that can only re-verify a rate inside a full hotel lookup
        return ``None`` unconditionally.
        """
        pass
