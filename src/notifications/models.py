"""Models for the notification system."""

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel
from notifications.enums import DeliveryChannel, DeliveryStatus, NotificationType


class Notification(TimeStampedModel):
    """Core notification record - channel agnostic.

    Everything needed to render the message lives in the ``context`` JSON, so a
    notification can be delivered (or re-delivered) without the registration that
    triggered it.
    """

    notification_type = models.CharField(
        max_length=50,
        db_index=True,
        choices=NotificationType.choices,
    )

    title = models.CharField(max_length=255, blank=True, default="", help_text="Rendered notification title")
    body = models.TextField(blank=True, default="", help_text="Rendered plain text body")

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")

    context = models.JSONField(default=dict, help_text="Structured context data (validated TypedDict)")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "notification_type", "created_at"], name="notif_user_type_created_idx"),
        ]
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"

    def __str__(self) -> str:
        return f"{self.notification_type} for user {self.user_id} at {self.created_at}"


class NotificationDelivery(TimeStampedModel):
    """Tracks delivery attempts for each channel.

    One Notification can have multiple NotificationDelivery records
    (one per channel).
    """

    notification = models.ForeignKey(Notification, on_delete=models.CASCADE, related_name="deliveries")

    channel = models.CharField(max_length=20, choices=DeliveryChannel.choices, db_index=True)

    status = models.CharField(
        max_length=20,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.PENDING,
        db_index=True,
    )

    attempted_at = models.DateTimeField(null=True, blank=True, help_text="When delivery was last attempted")
    delivered_at = models.DateTimeField(null=True, blank=True, help_text="When delivery succeeded")
    error_message = models.TextField(blank=True, help_text="Error message if delivery failed")
    retry_count = models.PositiveIntegerField(default=0, help_text="Number of delivery attempts")

    metadata = models.JSONField(default=dict, blank=True, help_text="Channel-specific data (webhook status, etc.)")

    class Meta:
        constraints = [models.UniqueConstraint(fields=["notification", "channel"], name="unique_notification_channel")]
        indexes = [
            models.Index(fields=["status", "created_at"], name="notif_delivery_status_idx"),
        ]
        verbose_name = "Notification Delivery"
        verbose_name_plural = "Notification Deliveries"

    def __str__(self) -> str:
        return f"{self.notification.notification_type} via {self.channel} - {self.status}"
