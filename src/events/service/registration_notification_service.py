"""Notifications emitted by the registration lifecycle.

All of them are scheduled with ``transaction.on_commit`` so a rolled-back state
change never produces a message, and none of them can fail the caller: the
``notification_requested`` handler logs and swallows every error.
"""

import typing as t

import structlog
from django.db import transaction

from events.models import Registration
from notifications.enums import NotificationType
from notifications.signals import notification_requested

if t.TYPE_CHECKING:
    from accounts.models import FelicityUser

logger = structlog.get_logger(__name__)


def build_registration_context(registration: Registration) -> dict[str, t.Any]:
    event = registration.event
    context: dict[str, t.Any] = {
        "registration_id": str(registration.id),
        "ticket_id": registration.ticket_id,
        "event_id": str(event.id),
        "event_name": event.name,
        "event_type": event.event_type,
        "event_start": event.start.isoformat(),
        "venue": event.venue,
        "participant_name": registration.participant_name,
        "quantity": registration.quantity,
        "amount_paid": str(registration.amount_paid),
        "registration_status": registration.registration_status,
    }
    if event.is_merchandise:
        context["merchandise_size"] = registration.merchandise_size
        context["merchandise_color"] = registration.merchandise_color
    return context


def _send_after_commit(
    notification_type: NotificationType,
    user: "FelicityUser | None",
    context: dict[str, t.Any],
) -> None:
    if user is None:
        logger.info("notification_skipped_no_recipient", notification_type=notification_type)
        return

    def send_notification() -> None:
        notification_requested.send(
            sender=_send_after_commit,
            user=user,
            notification_type=notification_type,
            context=context,
        )

    transaction.on_commit(send_notification)


def notify_registration_confirmed(registration: Registration) -> None:
    """The ticket QR is attached at send time, so a late-issued ticket still makes it into the email."""
    context = build_registration_context(registration)
    _send_after_commit(NotificationType.REGISTRATION_CONFIRMED, registration.participant, context)


def notify_payment_proof_submitted(registration: Registration) -> None:
    """Tell the organizer a proof is waiting for review."""
    context = build_registration_context(registration)
    context["payment_proof"] = registration.payment_proof
    _send_after_commit(NotificationType.PAYMENT_PROOF_SUBMITTED, registration.event.organizer, context)


def notify_payment_approved(registration: Registration) -> None:
    context = build_registration_context(registration)
    context["admin_notes"] = registration.admin_notes
    _send_after_commit(NotificationType.PAYMENT_APPROVED, registration.participant, context)


def notify_payment_rejected(registration: Registration) -> None:
    context = build_registration_context(registration)
    context["admin_notes"] = registration.admin_notes
    _send_after_commit(NotificationType.PAYMENT_REJECTED, registration.participant, context)


def notify_registration_cancelled(registration: Registration) -> None:
    context = build_registration_context(registration)
    context["cancellation_reason"] = registration.cancellation_reason
    _send_after_commit(NotificationType.REGISTRATION_CANCELLED, registration.participant, context)
