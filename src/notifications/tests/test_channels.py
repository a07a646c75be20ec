"""Tests for notification channel delivery."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from django.core import mail

from notifications.enums import DeliveryStatus
from notifications.models import Notification, NotificationDelivery
from notifications.service.channels.email import EmailChannel
from notifications.service.channels.registry import get_channel_instance
from notifications.service.channels.webhook import MAX_CONTENT_LENGTH, WebhookChannel

pytestmark = pytest.mark.django_db

WEBHOOK_REQUEST = httpx.Request("POST", "https://discord.com/api/webhooks/123/abc")


def _response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=WEBHOOK_REQUEST)


class TestEmailChannel:
    """Test email notification channel."""

    def test_can_deliver_requires_active_user_with_email(self, notification: Notification) -> None:
        channel = EmailChannel()
        assert channel.can_deliver(notification) is True

        notification.user.email = ""
        assert channel.can_deliver(notification) is False

        notification.user.email = "back@example.com"
        notification.user.is_active = False
        assert channel.can_deliver(notification) is False

    def test_deliver_sends_email_with_ticket(
        self,
        notification_with_delivery: tuple[Notification, NotificationDelivery],
    ) -> None:
        """A confirmation carries the ticket QR as a PNG attachment."""
        # Arrange
        notification, delivery = notification_with_delivery

        # Act
        result = EmailChannel().deliver(notification, delivery)

        # Assert
        assert result is True
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == [notification.user.email]
        assert notification.context["event_name"] in message.subject
        assert notification.context["ticket_id"] in message.body
        assert message.alternatives
        filename, content, mimetype = message.attachments[0]
        assert filename == "ticket.png"
        assert mimetype == "image/png"
        assert content.startswith(b"\x89PNG")

        delivery.refresh_from_db()
        assert delivery.status == DeliveryStatus.SENT
        assert delivery.retry_count == 1
        assert delivery.delivered_at is not None
        assert delivery.metadata["attachments"] == ["ticket.png"]

    def test_deliver_without_ticket_sends_no_attachment(
        self,
        notification_with_delivery: tuple[Notification, NotificationDelivery],
    ) -> None:
        """A ticket still being issued is simply left out of the email."""
        notification, delivery = notification_with_delivery
        from events.models import Registration

        Registration.objects.filter(pk=notification.context["registration_id"]).update(qr_code=None)

        assert EmailChannel().deliver(notification, delivery) is True
        assert mail.outbox[0].attachments == []

    def test_deliver_failure_marks_delivery_failed(
        self,
        notification_with_delivery: tuple[Notification, NotificationDelivery],
    ) -> None:
        notification, delivery = notification_with_delivery

        with patch("notifications.service.channels.email.EmailMultiAlternatives.send", side_effect=OSError("down")):
            result = EmailChannel().deliver(notification, delivery)

        assert result is False
        delivery.refresh_from_db()
        assert delivery.status == DeliveryStatus.FAILED
        assert delivery.error_message == "down"


class TestWebhookChannel:
    """Test the Discord-style webhook channel."""

    def test_can_deliver_requires_webhook_url(
        self,
        notification: Notification,
        proof_notification: tuple[Notification, NotificationDelivery],
    ) -> None:
        channel = WebhookChannel()
        assert channel.can_deliver(notification) is False
        assert channel.can_deliver(proof_notification[0]) is True

    def test_deliver_posts_message(self, proof_notification: tuple[Notification, NotificationDelivery]) -> None:
        # Arrange
        notification, delivery = proof_notification

        # Act
        with patch("notifications.service.channels.webhook.httpx.post", return_value=_response(204)) as post:
            result = WebhookChannel().deliver(notification, delivery)

        # Assert
        assert result is True
        post.assert_called_once()
        url = post.call_args.args[0]
        payload = post.call_args.kwargs["json"]
        assert url == notification.user.discord_webhook_url
        assert notification.context["participant_name"] in payload["content"]
        assert len(payload["content"]) <= MAX_CONTENT_LENGTH
        delivery.refresh_from_db()
        assert delivery.status == DeliveryStatus.SENT
        assert delivery.metadata["status_code"] == 204

    def test_client_error_is_not_retried(self, proof_notification: tuple[Notification, NotificationDelivery]) -> None:
        notification, delivery = proof_notification

        with patch("notifications.service.channels.webhook.httpx.post", return_value=_response(404)):
            result = WebhookChannel().deliver(notification, delivery)

        assert result is False
        delivery.refresh_from_db()
        assert delivery.status == DeliveryStatus.FAILED

    @pytest.mark.parametrize(
        "side_effect",
        [
            httpx.ConnectTimeout("timed out", request=WEBHOOK_REQUEST),
            MagicMock(return_value=_response(503)),
            MagicMock(return_value=_response(429)),
        ],
    )
    def test_transient_errors_are_raised_for_retry(
        self,
        proof_notification: tuple[Notification, NotificationDelivery],
        side_effect: object,
    ) -> None:
        notification, delivery = proof_notification
        channel = WebhookChannel()

        with patch("notifications.service.channels.webhook.httpx.post", side_effect=side_effect):
            with pytest.raises(httpx.HTTPError) as exc_info:
                channel.deliver(notification, delivery)

        assert channel.should_retry(exc_info.value)
        delivery.refresh_from_db()
        assert delivery.status == DeliveryStatus.FAILED
        assert delivery.retry_count == 1


def test_registry_returns_channel_instances() -> None:
    assert isinstance(get_channel_instance("email"), EmailChannel)
    assert isinstance(get_channel_instance("webhook"), WebhookChannel)
