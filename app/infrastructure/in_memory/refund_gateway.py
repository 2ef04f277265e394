from decimal import Decimal
from uuid import uuid4

from app.application.interfaces.refund_gateway import RefundGateway, RefundResult


class StubRefundGateway(RefundGateway):
    def __init__(self) -> None:
        self.refunds: list[tuple[str, Decimal]] = []

    async def refund(
        self,
        payment_intent_id: str,
        amount: Decimal,
        reason: str = "requested_by_customer",
        metadata: dict[str, str] | None = None,
    ) -> RefundResult:
        # Simulate an immediate refund
        self.refunds.append((payment_intent_id, amount))
        return RefundResult(refund_id=f"re_{uuid4().hex[:14]}", status="succeeded", amount=amount)
