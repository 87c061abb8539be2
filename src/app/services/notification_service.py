"""Notification Service Interface

Defines the contract for sending user-facing notifications
(credits added, referral reward earned).
"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel, Field


class UserNotification(BaseModel):
    """A notification addressed to one user"""

    user_id: int = Field(..., description="Recipient user ID")
    type: str = Field(..., description="Notification type (e.g., 'credits_purchased')")
    title: str = Field(..., description="Short title")
    message: str = Field(..., description="Body text")
    link: Optional[str] = Field(default=None, description="In-app link")


class NotificationService(ABC):
    """
    Abstract notification service

    Implementations can deliver via:
    - Logging
    - Webhook (HTTP POST to the notifications service)
    - Composite of several channels

    Delivery is best-effort: it runs after the ledger commit and its failure
    never undoes a committed mutation.
    """

    @abstractmethod
    async def send(self, notification: UserNotification) -> bool:
        """
        Deliver a notification

        Args:
            notification: UserNotification to deliver

        Returns:
            True if delivered, False otherwise
        """
        pass
