"""Fixtures for notification tests."""

import typing as t

import pytest

from accounts.models import FelicityUser
from events.models import Event, Registration
from events.service.registration_notification_service import build_registration_context
from events.service.registration_service import RegistrationService
from notifications.enums import DeliveryChannel, DeliveryStatus, NotificationType
from notifications.models import Notification, NotificationDelivery


@pytest.fixture
def confirmed_registration(event: Event, participant: FelicityUser) -> Registration:
    return RegistrationService(event=event, user=participant).register()


@pytest.fixture
def registration_context(confirmed_registration: Registration) -> dict[str, t.Any]:
    return build_registration_context(confirmed_registration)


@pytest.fixture
def notification(participant: FelicityUser, registration_context: dict[str, t.Any]) -> Notification:
    """A REGISTRATION_CONFIRMED notification for the participant."""
    return Notification.objects.create(
        notification_type=NotificationType.REGISTRATION_CONFIRMED,
        user=participant,
        context=registration_context,
    )


@pytest.fixture
def notification_with_delivery(notification: Notification) -> tuple[Notification, NotificationDelivery]:
    delivery = NotificationDelivery.objects.create(
        notification=notification,
        channel=DeliveryChannel.EMAIL,
        status=DeliveryStatus.PENDING,
    )
    return notification, delivery


@pytest.fixture
def webhook_organizer(organizer: FelicityUser) -> FelicityUser:
    organizer.discord_webhook_url = "https://discord.com/api/webhooks/123/abc"
    organizer.save()
    return organizer


@pytest.fixture
def proof_notification(
    webhook_organizer: FelicityUser, registration_context: dict[str, t.Any]
) -> tuple[Notification, NotificationDelivery]:
    """A PAYMENT_PROOF_SUBMITTED notification for an organizer with a webhook, plus its webhook delivery."""
    notification = Notification.objects.create(
        notification_type=NotificationType.PAYMENT_PROOF_SUBMITTED,
        user=webhook_organizer,
        context={**registration_context, "payment_proof": "payment-proofs/x/proof.png"},
    )
    delivery = NotificationDelivery.objects.create(
        notification=notification,
        channel=DeliveryChannel.WEBHOOK,
        status=DeliveryStatus.PENDING,
    )
    return notification, delivery
