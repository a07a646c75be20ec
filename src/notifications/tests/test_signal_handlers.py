"""Tests for the notification_requested signal handler."""

import typing as t
from unittest.mock import patch

import pytest
from django.core import mail

from accounts.models import FelicityUser
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.signals import notification_requested

pytestmark = pytest.mark.django_db


def test_signal_creates_and_dispatches(participant: FelicityUser, registration_context: dict[str, t.Any]) -> None:
    notification_requested.send(
        sender=test_signal_creates_and_dispatches,
        user=participant,
        notification_type=NotificationType.REGISTRATION_CONFIRMED,
        context=registration_context,
    )

    notification = Notification.objects.get(user=participant)
    assert notification.notification_type == NotificationType.REGISTRATION_CONFIRMED
    assert len(mail.outbox) == 1


def test_invalid_context_is_swallowed(participant: FelicityUser) -> None:
    """A broken notification must never propagate to the lifecycle operation that requested it."""
    notification_requested.send(
        sender=test_invalid_context_is_swallowed,
        user=participant,
        notification_type=NotificationType.PAYMENT_APPROVED,
        context={"event_name": "incomplete"},
    )

    assert not Notification.objects.exists()


def test_missing_user_is_ignored() -> None:
    notification_requested.send(
        sender=test_missing_user_is_ignored,
        user=None,
        notification_type=NotificationType.PAYMENT_APPROVED,
        context={},
    )

    assert not Notification.objects.exists()


def test_dispatch_failure_is_swallowed(participant: FelicityUser, registration_context: dict[str, t.Any]) -> None:
    with patch("notifications.tasks.dispatch_notification.delay", side_effect=ConnectionError("broker down")):
        notification_requested.send(
            sender=test_dispatch_failure_is_swallowed,
            user=participant,
            notification_type=NotificationType.REGISTRATION_CONFIRMED,
            context=registration_context,
        )

    assert Notification.objects.filter(user=participant).exists()
    assert mail.outbox == []
