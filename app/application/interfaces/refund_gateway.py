from dataclasses import dataclass
from decimal import Decimal


@dataclass
class RefundResult:
    refund_id: str
    status: str
    amount: Decimal


class RefundGateway:
    async def refund(
        self,
        payment_intent_id: str,
        amount: Decimal,
        reason: str = "requested_by_customer",
        metadata: dict[str, str] | None = None,
    ) -> RefundResult:
        """
        Refund part or all of a captured payment.

        Raises:
            CircuitBreakerError: When the payment processor circuit is open.
            stripe.StripeError: When the processor rejects the refund.
        """
        raise NotImplementedError
