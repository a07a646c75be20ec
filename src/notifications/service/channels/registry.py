"""Channel registry for notification delivery."""

from notifications.enums import DeliveryChannel
from notifications.service.channels.base import NotificationChannel
from notifications.service.channels.email import EmailChannel
from notifications.service.channels.webhook import WebhookChannel

CHANNEL_INSTANCES: dict[str, NotificationChannel] = {
    DeliveryChannel.EMAIL: EmailChannel(),
    DeliveryChannel.WEBHOOK: WebhookChannel(),
}


def get_channel_instance(channel: str) -> NotificationChannel:
    """Get channel instance by name.

    Raises:
        KeyError: If channel is not registered
    """
    return CHANNEL_INSTANCES[channel]
