from decimal import Decimal

from pydantic import ConfigDict, Field

from app.api.schemas.hotels import Amount, CamelModel
from app.application.use_cases.prebook_rate import PrebookRequest


class PrebookRequestIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    supplier_code: str | None = None
    rate_plan_id: str | None = None
    book_hash: str | None = None
    rate_key: str | None = None
    total_amount: Decimal = Field(..., ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    hotel_id: str | None = None

    def to_request(self) -> PrebookRequest:
        return PrebookRequest(
            supplier_code=self.supplier_code,
            total_amount=self.total_amount,
            currency=self.currency,
            hotel_id=self.hotel_id,
            rate_plan_id=self.rate_plan_id,
            book_hash=self.book_hash,
            rate_key=self.rate_key,
        )


class PrebookResponse(CamelModel):
    success: bool
    price_changed: bool = False
    confirmed_price: Amount | None = None
    new_price: Amount | None = None
    original_price: Amount | None = None
    currency: str | None = None
    error: str | None = None
