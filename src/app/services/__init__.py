from .unit_of_work import UnitOfWork
from .notification_service import NotificationService, UserNotification
from .payment_provider import PaymentProvider, PaymentEvent, CreditPackage

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "UserNotification",
    "PaymentProvider",
    "PaymentEvent",
    "CreditPackage",
]
