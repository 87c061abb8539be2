from .unit_of_work import SqlAlchemyUnitOfWork
from .lemon_squeezy import LemonSqueezyPaymentProvider, DEFAULT_CREDIT_PACKAGES
from .notification_service import (
    LoggingNotificationService,
    WebhookNotificationService,
    CompositeNotificationService,
    create_notification_service,
)

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LemonSqueezyPaymentProvider",
    "DEFAULT_CREDIT_PACKAGES",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
]
