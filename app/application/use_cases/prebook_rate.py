import logging
import re
from dataclasses import dataclass
from decimal import Decimal

from app.application.interfaces.supplier_adapter import SupplierRateCheck
from app.config import Settings
from app.domain.errors import DomainError, ValidationError
from app.domain.value_objects.money import quantize
from app.infrastructure.gateways.registry import SupplierRegistry

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


@dataclass
class PrebookRequest:
    supplier_code: str | None
    total_amount: Decimal
    currency: str | None = None
    hotel_id: str | None = None
    rate_plan_id: str | None = None
    book_hash: str | None = None
    rate_key: str | None = None


@dataclass
class PrebookResult:
    """
    ``success`` with ``confirmed_price`` when the rate can be paid for.

    A rejection either carries ``new_price`` (the price moved beyond
    tolerance, caller must re-confirm) or only ``error`` (the supplier could
    not confirm the rate at all).
    """

    success: bool
    price_changed: bool = False
    confirmed_price: Decimal | None = None
    new_price: Decimal | None = None
    original_price: Decimal | None = None
    currency: str | None = None
    error: str | None = None

    @property
    def is_unavailable(self) -> bool:
        return not self.success and self.new_price is None


class PrebookRateUseCase:
    def __init__(self, registry: SupplierRegistry, settings: Settings) -> None:
        self._registry = registry
        self._settings = settings
        self._logger = logging.getLogger(__name__)

    async def execute(self, request: PrebookRequest) -> PrebookResult:
        """
        Re-verify a rate right before payment.

        Raises:
            ValidationError: No rate identifier, or the one the supplier needs is missing.
        """
        if not (request.rate_plan_id or request.book_hash or request.rate_key):
            raise ValidationError("ratePlanId", "Missing rate identifier")

        if self._is_test_inventory(request):
            self._logger.info(
                "Test inventory detected, skipping supplier prebook",
                extra={"hotel_id": request.hotel_id, "rate_plan_id": request.rate_plan_id},
            )
            return PrebookResult(
                success=True,
                confirmed_price=request.total_amount,
                currency=request.currency or "GBP",
            )

        supplier = (request.supplier_code or "LOCAL").upper()
        if supplier == self._registry.ratehawk.code:
            if not request.book_hash:
                raise ValidationError("bookHash", "Missing bookHash for RateHawk")
            check = await self._check(supplier, self._registry.ratehawk.prebook, request.book_hash)
        elif supplier == self._registry.hotelbeds.code:
            if not request.rate_key:
                raise ValidationError("rateKey", "Missing rateKey for HotelBeds")
            check = await self._check(supplier, self._registry.hotelbeds.check_rate, request.rate_key)
        else:
            # Local inventory has no supplier-side re-verification
            return PrebookResult(
                success=True,
                confirmed_price=request.total_amount,
                currency=request.currency,
            )

        return self._apply_tolerance(request, check)

    async def _check(self, supplier: str, verify, rate_id: str) -> SupplierRateCheck:
        try:
            return await verify(rate_id)
        except DomainError as exc:
            self._logger.warning(
                "Supplier prebook failed",
                extra={"supplier": supplier, "error_code": exc.code, "error": exc.message},
            )
            return SupplierRateCheck(available=False, error=exc.message)

    def _apply_tolerance(self, request: PrebookRequest, check: SupplierRateCheck) -> PrebookResult:
        if not check.available:
            return PrebookResult(success=False, error=check.error or "Rate no longer available")

        quoted = request.total_amount
        current = check.price if check.price is not None else quoted
        price_changed = check.price_changed or current != quoted
        currency = check.currency or request.currency

        if price_changed and quoted > 0:
            drift = abs(current - quoted) / quoted
            if drift > Decimal(str(self._settings.prebook_price_tolerance)):
                self._logger.info(
                    "Prebook rejected, price moved beyond tolerance",
                    extra={"quoted": str(quoted), "current": str(current), "drift": str(drift)},
                )
                return PrebookResult(
                    success=False,
                    price_changed=True,
                    new_price=quantize(current),
                    original_price=quoted,
                    currency=currency,
                    error="Price has changed significantly",
                )

        return PrebookResult(
            success=True,
            price_changed=price_changed,
            confirmed_price=quantize(current),
            currency=currency,
        )

    def _is_test_inventory(self, request: PrebookRequest) -> bool:
        candidate = request.hotel_id or (request.rate_plan_id or "").split("-")[0]
        match = _LEADING_DIGITS.match(candidate or "")
        if not match:
            return False
        value = int(match.group(1))
        return self._settings.test_inventory_id_min <= value < self._settings.test_inventory_id_max
