"""Core notification dispatcher service."""

import typing as t

import structlog

from accounts.models import FelicityUser
from notifications.context_schemas import validate_notification_context
from notifications.enums import DeliveryChannel, NotificationType
from notifications.models import Notification

logger = structlog.get_logger(__name__)

# Notification types that are also pushed to the recipient's webhook, when one is configured.
WEBHOOK_NOTIFICATION_TYPES = frozenset({NotificationType.PAYMENT_PROOF_SUBMITTED})


def create_notification(
    notification_type: NotificationType | str,
    user: FelicityUser,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record.

    Args:
        notification_type: Type of notification
        user: User to notify
        context: Notification context data

    Returns:
        Created Notification instance

    Raises:
        ValueError: If context validation fails
    """
    if isinstance(notification_type, str):
        notification_type = NotificationType(notification_type)

    validate_notification_context(notification_type, context)

    # title/body are rendered by the dispatcher task
    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
    )

    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        notification_type=notification_type,
        user_id=str(user.id),
    )

    return notification


def determine_delivery_channels(user: FelicityUser, notification_type: str) -> list[str]:
    """Determine which channels should receive this notification.

    Email goes to everyone with an address. Organizers who configured a webhook
    also get the types in ``WEBHOOK_NOTIFICATION_TYPES`` there.
    """
    channels: list[str] = []
    if user.email:
        channels.append(DeliveryChannel.EMAIL)
    if user.discord_webhook_url and notification_type in WEBHOOK_NOTIFICATION_TYPES:
        channels.append(DeliveryChannel.WEBHOOK)

    logger.debug(
        "determined_delivery_channels",
        user_id=str(user.id),
        notification_type=notification_type,
        channels=channels,
    )

    return channels
