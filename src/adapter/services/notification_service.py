"""Notification Service Implementations

Provides concrete implementations for sending user notifications.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService, UserNotification

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs notifications

    Useful for development and testing, or as a fallback.
    """

    async def send(self, notification: UserNotification) -> bool:
        logger.info(
            f"[NOTIFICATION] User: {notification.user_id}, "
            f"Type: {notification.type}, "
            f"Title: {notification.title}, "
            f"Message: {notification.message}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts notifications to an HTTP webhook

    Sends a JSON payload to the configured URL (typically the platform's
    notifications endpoint).
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST notifications to
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    async def send(self, notification: UserNotification) -> bool:
        """
        Send a notification via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "user_id": notification.user_id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "link": notification.link,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Webhook notification '{notification.type}' sent for user "
                    f"{notification.user_id} to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send webhook notification '{notification.type}' "
                f"for user {notification.user_id}: {e}"
            )
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send(self, notification: UserNotification) -> bool:
        """
        Send a notification through all configured services

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            try:
                if await service.send(notification):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
