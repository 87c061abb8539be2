"""Payment reconciliation use cases"""
from .process_webhook_event import ProcessWebhookEvent, ORDER_PAID_EVENT, ORDER_REFUNDED_EVENT
from .handle_order_paid import HandleOrderPaid
from .handle_order_refunded import HandleOrderRefunded
from .create_checkout import CreateCheckout, ListCreditPackages
from .dtos import (
    WebhookResultDTO,
    CreditPackageDTO,
    CheckoutCommandDTO,
    CheckoutResponseDTO,
)

__all__ = [
    "ProcessWebhookEvent",
    "ORDER_PAID_EVENT",
    "ORDER_REFUNDED_EVENT",
    "HandleOrderPaid",
    "HandleOrderRefunded",
    "CreateCheckout",
    "ListCreditPackages",
    "WebhookResultDTO",
    "CreditPackageDTO",
    "CheckoutCommandDTO",
    "CheckoutResponseDTO",
]
