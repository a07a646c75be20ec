"""Webhook notification channel.

Posts a short message to the recipient's Discord-compatible webhook. Used to
tell organizers that a payment proof is waiting for review.
"""

import httpx
import structlog
from django.conf import settings
from django.utils import timezone

from notifications.enums import DeliveryChannel, DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.base import NotificationChannel
from notifications.service.templates.registry import get_template

logger = structlog.get_logger(__name__)

# Discord rejects message content longer than this.
MAX_CONTENT_LENGTH = 2000


class WebhookChannel(NotificationChannel):
    """Discord-style webhook channel."""

    def get_channel_name(self) -> str:
        """Return channel name."""
        return DeliveryChannel.WEBHOOK

    def can_deliver(self, notification: Notification) -> bool:
        return bool(notification.user.discord_webhook_url)

    def deliver(self, notification: Notification, delivery: NotificationDelivery) -> bool:
        """Post the notification to the webhook.

        Transient failures (network errors, 429 and 5xx answers) are re-raised so
        the delivery task can retry them. Anything else marks the delivery failed.
        """
        delivery.attempted_at = timezone.now()
        delivery.retry_count += 1

        try:
            content = get_template(notification.notification_type).get_webhook_message(notification)
            response = httpx.post(
                notification.user.discord_webhook_url,
                json={"content": content[:MAX_CONTENT_LENGTH]},
                timeout=settings.NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except Exception as e:
            delivery.status = DeliveryStatus.FAILED
            delivery.error_message = str(e)
            delivery.save(update_fields=["status", "error_message", "retry_count", "attempted_at", "updated_at"])
            logger.error(
                "webhook_notification_failed",
                notification_id=str(notification.id),
                notification_type=notification.notification_type,
                user_id=str(notification.user.id),
                error=str(e),
                retry_count=delivery.retry_count,
            )
            if self.should_retry(e):
                raise
            return False

        delivery.status = DeliveryStatus.SENT
        delivery.delivered_at = timezone.now()
        delivery.metadata["status_code"] = response.status_code
        delivery.save(
            update_fields=["status", "delivered_at", "metadata", "retry_count", "attempted_at", "updated_at"]
        )
        logger.info(
            "webhook_notification_sent",
            notification_id=str(notification.id),
            notification_type=notification.notification_type,
            user_id=str(notification.user.id),
        )
        return True

    def should_retry(self, error: Exception) -> bool:
        """Retry transport errors, rate limiting and server errors."""
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code == 429 or error.response.status_code >= 500
        return isinstance(error, httpx.TransportError)
