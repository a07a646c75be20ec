"""Tests for the Registration and Event models."""

import re
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounts.models import FelicityUser
from events.models import DELETED_PARTICIPANT_NAME, Event, Registration, generate_ticket_id

pytestmark = pytest.mark.django_db


def test_generate_ticket_id_format() -> None:
    ticket_id = generate_ticket_id()
    assert re.fullmatch(r"TKT-[0-9A-Z]+-[0-9A-F]{12}", ticket_id)


def test_generate_ticket_id_is_unique() -> None:
    assert len({generate_ticket_id() for _ in range(500)}) == 500


def test_registration_gets_a_ticket_id(event: Event, participant: FelicityUser) -> None:
    registration = Registration.objects.create(event=event, participant=participant)
    assert registration.ticket_id.startswith("TKT-")
    assert registration.registration_status == Registration.RegistrationStatus.PENDING
    assert registration.qr_code is None


def test_qr_code_requires_confirmed_status(event: Event, participant: FelicityUser) -> None:
    """The database refuses a QR code on a registration that is not confirmed."""
    registration = Registration.objects.create(event=event, participant=participant)
    with pytest.raises(IntegrityError), transaction.atomic():
        Registration.objects.filter(pk=registration.pk).update(qr_code="data:image/png;base64,AAAA")


def test_cancelled_registration_cannot_be_attended(event: Event, participant: FelicityUser) -> None:
    registration = Registration.objects.create(
        event=event, participant=participant, registration_status=Registration.RegistrationStatus.CANCELLED
    )
    with pytest.raises(IntegrityError), transaction.atomic():
        Registration.objects.filter(pk=registration.pk).update(attended=True)


def test_quantity_must_be_positive(event: Event, participant: FelicityUser) -> None:
    with pytest.raises(ValidationError):
        Registration.objects.create(event=event, participant=participant, quantity=0)


def test_deleted_participant_keeps_registration(event: Event, participant: FelicityUser) -> None:
    """Deleting an account keeps the registration, shown under a placeholder name."""
    registration = Registration.objects.create(event=event, participant=participant)
    participant.delete()

    registration.refresh_from_db()
    assert registration.participant is None
    assert registration.participant_name == DELETED_PARTICIPANT_NAME
    assert registration.participant_email is None


def test_event_end_before_start_is_invalid(event: Event) -> None:
    event.end = event.start - timedelta(hours=1)
    with pytest.raises(ValidationError):
        event.save()


def test_normal_event_cannot_have_sizes(event: Event) -> None:
    event.sizes = ["M"]
    with pytest.raises(ValidationError):
        event.save()


def test_event_is_managed_by(
    event: Event,
    organizer: FelicityUser,
    other_organizer: FelicityUser,
    admin_user: FelicityUser,
    participant: FelicityUser,
) -> None:
    assert event.is_managed_by(organizer)
    assert event.is_managed_by(admin_user)
    assert not event.is_managed_by(other_organizer)
    assert not event.is_managed_by(participant)


def test_requires_payment_approval(
    event: Event, paid_event: Event, merch_event: Event, free_merch_event: Event
) -> None:
    """Only paid merchandise goes through payment approval."""
    assert not event.requires_payment_approval
    assert not paid_event.requires_payment_approval
    assert merch_event.requires_payment_approval
    assert not free_merch_event.requires_payment_approval


def test_manager_exposes_queryset_helpers(
    event: Event, merch_event: Event, participant: FelicityUser, organizer: FelicityUser
) -> None:
    confirmed = Registration.objects.create(
        event=event, participant=participant, registration_status=Registration.RegistrationStatus.CONFIRMED
    )
    order = Registration.objects.create(
        event=merch_event,
        participant=participant,
        registration_status=Registration.RegistrationStatus.PENDING_APPROVAL,
        payment_approval_status=Registration.ApprovalStatus.PENDING,
    )

    loaded = Registration.objects.with_relations().get(pk=confirmed.pk)
    assert loaded.event.organizer == organizer
    assert list(Registration.objects.awaiting_payment_review()) == [order]
    assert list(Registration.objects.missing_ticket()) == [confirmed]
    assert set(Registration.objects.for_user(organizer)) == {confirmed, order}
