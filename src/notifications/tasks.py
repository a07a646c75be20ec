"""Celery tasks for notification dispatch."""

import typing as t

import structlog
from celery import group, shared_task

from notifications.enums import DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.registry import get_channel_instance

logger = structlog.get_logger(__name__)

MAX_DELIVERY_ATTEMPTS = 3


@shared_task(bind=True, max_retries=3)
def dispatch_notification(self: t.Any, notification_id: str) -> dict[str, t.Any]:
    """Main dispatcher task - creates delivery records and dispatches to channels.

    This task:
    1. Loads notification
    2. Renders the title and plain text body from its template
    3. Determines delivery channels for the recipient
    4. Creates NotificationDelivery records
    5. Dispatches to channel-specific delivery tasks

    Args:
        self: Celery task instance (automatically passed when bind=True)
        notification_id: UUID of notification to dispatch

    Returns:
        Dict with dispatch stats
    """
    from notifications.service.dispatcher import determine_delivery_channels
    from notifications.service.templates.registry import get_template

    notification = Notification.objects.select_related("user").get(pk=notification_id)

    try:
        template = get_template(notification.notification_type)
        notification.title = template.get_title(notification)[:255]
        notification.body = template.get_email_text_body(notification)
        notification.save(update_fields=["title", "body", "updated_at"])
    except Exception as e:
        # Channels render on their own, so a failure here is not fatal.
        logger.error(
            "notification_render_failed",
            notification_id=notification_id,
            notification_type=notification.notification_type,
            error=str(e),
        )

    channels = determine_delivery_channels(notification.user, notification.notification_type)

    deliveries = []
    for channel in channels:
        delivery, created = NotificationDelivery.objects.get_or_create(
            notification=notification,
            channel=channel,
            defaults={"status": DeliveryStatus.PENDING},
        )
        if created:
            deliveries.append(delivery)

    if deliveries:
        delivery_tasks = group(deliver_to_channel.si(str(delivery.id)) for delivery in deliveries)
        delivery_tasks.apply_async()

    logger.info(
        "notification_dispatched",
        notification_id=notification_id,
        notification_type=notification.notification_type,
        user_id=str(notification.user.id),
        channels=channels,
        delivery_count=len(deliveries),
    )

    return {
        "notification_id": notification_id,
        "channels": channels,
        "deliveries_created": len(deliveries),
    }


@shared_task(bind=True, max_retries=MAX_DELIVERY_ATTEMPTS)
def deliver_to_channel(self: t.Any, delivery_id: str) -> dict[str, t.Any]:
    """Deliver notification through specific channel.

    Handles retries for transient failures.

    Args:
        self: Celery task instance (automatically passed when bind=True)
        delivery_id: UUID of delivery record

    Returns:
        Dict with delivery result
    """
    delivery = NotificationDelivery.objects.select_related("notification", "notification__user").get(pk=delivery_id)
    channel = get_channel_instance(delivery.channel)

    if not channel.can_deliver(delivery.notification):
        delivery.status = DeliveryStatus.SKIPPED
        delivery.save(update_fields=["status", "updated_at"])
        logger.info("delivery_skipped", delivery_id=delivery_id, channel=delivery.channel)
        return {"status": "skipped"}

    try:
        success = channel.deliver(delivery.notification, delivery)
    except Exception as e:
        # Refresh to get the retry_count written by the channel's deliver()
        delivery.refresh_from_db()

        logger.error(
            "delivery_exception",
            delivery_id=delivery_id,
            channel=delivery.channel,
            error=str(e),
            retry_count=delivery.retry_count,
        )

        if channel.should_retry(e) and delivery.retry_count < MAX_DELIVERY_ATTEMPTS:
            # Exponential backoff: 2^retry_count minutes
            countdown = 2**delivery.retry_count * 60
            logger.info(
                "retrying_delivery",
                delivery_id=delivery_id,
                channel=delivery.channel,
                countdown=countdown,
                retry_count=delivery.retry_count,
            )
            raise self.retry(exc=e, countdown=countdown)

        delivery.status = DeliveryStatus.FAILED
        delivery.error_message = str(e)
        delivery.save(update_fields=["status", "error_message", "updated_at"])
        raise

    if not success:
        logger.warning("delivery_failed_gracefully", delivery_id=delivery_id, channel=delivery.channel)
        return {"status": "failed", "graceful": True}

    return {"status": "sent", "channel": delivery.channel}
