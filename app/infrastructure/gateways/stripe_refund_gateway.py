import logging
from decimal import Decimal

import stripe

from app.application.interfaces.refund_gateway import RefundGateway, RefundResult
from app.config import get_settings
from app.domain.value_objects.money import from_cents, to_cents
from app.infrastructure.circuit_breaker import CircuitBreakerError, stripe_breaker

logger = logging.getLogger(__name__)


class StripeRefundGateway(RefundGateway):
    def __init__(self, api_key: str | None = None) -> None:
        settings = get_settings()
        stripe.api_key = api_key or settings.stripe_api_key
        stripe.max_network_retries = 2
        stripe.default_http_client = stripe.RequestsClient(timeout=10.0)

    async def refund(
        self,
        payment_intent_id: str,
        amount: Decimal,
        reason: str = "requested_by_customer",
        metadata: dict[str, str] | None = None,
    ) -> RefundResult:
        """
        Refund ``amount`` of the payment intent, protected by the Stripe circuit breaker.

        Raises:
            CircuitBreakerError: When circuit is open (too many recent failures)
            stripe.StripeError: When Stripe API call fails
        """
        try:
            # stripe has no async client; the sync call is short-lived
            refund = stripe_breaker.call(
                stripe.Refund.create,
                payment_intent=payment_intent_id,
                amount=to_cents(amount),
                reason=reason,
                metadata=metadata or {},
            )
        except CircuitBreakerError as e:
            logger.error(
                "Stripe circuit breaker is open - refund not attempted",
                extra={"circuit_state": str(e), "payment_intent_id": payment_intent_id},
            )
            raise
        except stripe.StripeError as e:
            logger.error(
                "Stripe refund failed",
                exc_info=e,
                extra={"payment_intent_id": payment_intent_id},
            )
            raise

        return RefundResult(
            refund_id=refund.id,
            status=refund.status,
            amount=from_cents(refund.amount),
        )
