"""Lifecycle operations notify participants and organizers once the change commits."""

import typing as t
from unittest.mock import patch

import pytest
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile

from accounts.models import FelicityUser
from events.exceptions import InvalidStateError
from events.models import Event, Registration
from events.service import payment_service, registration_service
from events.service.registration_service import RegistrationService
from notifications.enums import NotificationType
from notifications.models import Notification

pytestmark = pytest.mark.django_db


def _types_for(user: FelicityUser) -> list[str]:
    notifications = Notification.objects.filter(user=user).order_by("created_at")
    return list(notifications.values_list("notification_type", flat=True))


def test_confirmation_email_carries_the_ticket(
    event: Event, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        registration = RegistrationService(event=event, user=participant).register()

    assert _types_for(participant) == [NotificationType.REGISTRATION_CONFIRMED]
    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == [participant.email]
    assert registration.ticket_id in message.body
    assert [a[0] for a in message.attachments] == ["ticket.png"]


def test_nothing_is_sent_before_commit(event: Event, participant: FelicityUser) -> None:
    RegistrationService(event=event, user=participant).register()

    assert not Notification.objects.exists()
    assert mail.outbox == []


def test_failed_registration_sends_nothing(
    event: Event, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
) -> None:
    Event.objects.filter(pk=event.pk).update(registration_open=False)
    event.refresh_from_db()

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(InvalidStateError):
            RegistrationService(event=event, user=participant).register()

    assert callbacks == []
    assert mail.outbox == []


def test_payment_flow_notifications(
    merch_event: Event,
    participant: FelicityUser,
    organizer: FelicityUser,
    png_proof: SimpleUploadedFile,
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    """Placing an order is silent; the proof goes to the organizer and the decision to the participant."""
    with django_capture_on_commit_callbacks(execute=True):
        order = RegistrationService(event=merch_event, user=participant).register(size="M", color="black")
    assert mail.outbox == []

    with django_capture_on_commit_callbacks(execute=True):
        payment_service.upload_proof(order.id, participant, png_proof)
    assert _types_for(organizer) == [NotificationType.PAYMENT_PROOF_SUBMITTED]
    assert mail.outbox[-1].to == [organizer.email]

    with django_capture_on_commit_callbacks(execute=True):
        payment_service.approve_payment(order.id, organizer, "Thanks!")
    assert _types_for(participant) == [NotificationType.PAYMENT_APPROVED]
    approval_email = mail.outbox[-1]
    assert approval_email.to == [participant.email]
    assert "Thanks!" in approval_email.body


def test_rejection_notifies_participant(
    merch_event: Event, participant: FelicityUser, organizer: FelicityUser, django_capture_on_commit_callbacks: t.Any
) -> None:
    order = RegistrationService(event=merch_event, user=participant).register(size="M", color="black")

    with django_capture_on_commit_callbacks(execute=True):
        payment_service.reject_payment(order.id, organizer, "Wrong amount")

    assert _types_for(participant) == [NotificationType.PAYMENT_REJECTED]
    assert "Wrong amount" in mail.outbox[-1].body


def test_cancellation_notifies_participant(
    event: Event, participant: FelicityUser, organizer: FelicityUser, django_capture_on_commit_callbacks: t.Any
) -> None:
    registration = RegistrationService(event=event, user=participant).register()

    with django_capture_on_commit_callbacks(execute=True):
        registration_service.cancel_registration(registration.id, organizer, "Venue flooded")

    assert _types_for(participant) == [NotificationType.REGISTRATION_CANCELLED]
    assert "Venue flooded" in mail.outbox[-1].body


def test_notification_failure_never_fails_the_operation(
    event: Event, participant: FelicityUser, django_capture_on_commit_callbacks: t.Any
) -> None:
    with patch("notifications.service.signal_handlers.create_notification", side_effect=RuntimeError("boom")):
        with django_capture_on_commit_callbacks(execute=True):
            registration = RegistrationService(event=event, user=participant).register()

    registration.refresh_from_db()
    assert registration.registration_status == Registration.RegistrationStatus.CONFIRMED
    assert mail.outbox == []
