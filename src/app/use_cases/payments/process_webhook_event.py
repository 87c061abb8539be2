"""ProcessWebhookEvent Use Case

Entry point for payment provider webhooks: authenticate, parse, dispatch.
"""

import logging
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.payment_provider import PaymentProvider
from .dtos import WebhookResultDTO
from .handle_order_paid import HandleOrderPaid
from .handle_order_refunded import HandleOrderRefunded

logger = logging.getLogger(__name__)

ORDER_PAID_EVENT = "order_created"
ORDER_REFUNDED_EVENT = "order_refunded"


class ProcessWebhookEvent:
    """
    Use Case: Process one webhook delivery

    The signature is checked over the raw body before anything is parsed.
    Events other than paid/refunded are acknowledged and ignored.
    """

    def __init__(
        self,
        payment_provider: PaymentProvider,
        handle_order_paid: HandleOrderPaid,
        handle_order_refunded: HandleOrderRefunded,
    ):
        self.payment_provider = payment_provider
        self.handle_order_paid = handle_order_paid
        self.handle_order_refunded = handle_order_refunded

    async def execute(self, raw_body: bytes, signature: str) -> Result[WebhookResultDTO]:
        """
        Execute webhook processing

        Args:
            raw_body: Request body exactly as received
            signature: Signature header value

        Returns:
            Result[WebhookResultDTO]: Handler result, or INVALID_SIGNATURE /
            INVALID_PAYLOAD
        """
        if not self.payment_provider.verify_signature(raw_body, signature or ""):
            logger.warning("Rejected webhook with invalid signature")
            return Return.err(
                Error(
                    code=ErrorCode.INVALID_SIGNATURE,
                    message="Invalid signature",
                )
            )

        try:
            event = self.payment_provider.parse_event(raw_body)
        except ValueError as e:
            logger.error(f"Rejected malformed webhook payload: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.INVALID_PAYLOAD,
                    message="Invalid payload",
                    reason=str(e),
                )
            )

        if event.event_name == ORDER_PAID_EVENT:
            return await self.handle_order_paid.execute(event)

        if event.event_name == ORDER_REFUNDED_EVENT:
            return await self.handle_order_refunded.execute(event)

        logger.info(f"Ignoring webhook event {event.event_name!r}")
        return Return.ok(
            WebhookResultDTO(
                event_name=event.event_name,
                external_order_id=event.external_order_id,
                ignored=True,
            )
        )
