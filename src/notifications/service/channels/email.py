"""Email notification channel implementation."""

import base64
from smtplib import SMTPException

import structlog
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone

from notifications.enums import DeliveryChannel, DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.base import NotificationChannel
from notifications.service.templates.registry import get_template

logger = structlog.get_logger(__name__)


class EmailChannel(NotificationChannel):
    """Email notification channel."""

    def get_channel_name(self) -> str:
        """Return channel name."""
        return DeliveryChannel.EMAIL

    def can_deliver(self, notification: Notification) -> bool:
        """Check if email can be sent to user."""
        if not notification.user.is_active:
            return False
        if not notification.user.email:
            logger.warning(
                "user_missing_email",
                notification_id=str(notification.id),
                user_id=str(notification.user.id),
            )
            return False
        return True

    def deliver(self, notification: Notification, delivery: NotificationDelivery) -> bool:
        """Send email notification.

        Args:
            notification: The notification to deliver
            delivery: The delivery record to update

        Returns:
            True if delivery succeeded
        """
        delivery.attempted_at = timezone.now()
        delivery.retry_count += 1

        try:
            template = get_template(notification.notification_type)

            subject = template.get_email_subject(notification)
            text_body = template.get_email_text_body(notification)
            html_body = template.get_email_html_body(notification)
            attachments = template.get_email_attachments(notification)

            email_msg = EmailMultiAlternatives(
                subject=subject,
                body=text_body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[notification.user.email],
            )

            if html_body:
                email_msg.attach_alternative(html_body, "text/html")

            for filename, attachment_data in attachments.items():
                email_msg.attach(
                    filename,
                    base64.b64decode(attachment_data["content_base64"]),
                    attachment_data["mimetype"],
                )

            email_msg.send(fail_silently=False)

            delivery.status = DeliveryStatus.SENT
            delivery.delivered_at = timezone.now()
            delivery.metadata["attachments"] = sorted(attachments)
            delivery.save(
                update_fields=[
                    "status",
                    "delivered_at",
                    "metadata",
                    "retry_count",
                    "attempted_at",
                    "updated_at",
                ]
            )

            logger.info(
                "email_notification_sent",
                notification_id=str(notification.id),
                notification_type=notification.notification_type,
                user_id=str(notification.user.id),
            )

            return True

        except Exception as e:
            delivery.status = DeliveryStatus.FAILED
            delivery.error_message = str(e)
            delivery.save(update_fields=["status", "error_message", "retry_count", "attempted_at", "updated_at"])

            logger.error(
                "email_notification_failed",
                notification_id=str(notification.id),
                notification_type=notification.notification_type,
                user_id=str(notification.user.id),
                error=str(e),
                retry_count=delivery.retry_count,
            )

            return False

    def should_retry(self, error: Exception) -> bool:
        """Determine if email delivery should be retried."""
        retryable = (SMTPException, OSError, TimeoutError, ConnectionError)
        return isinstance(error, retryable)
