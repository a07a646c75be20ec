"""Templates for registration lifecycle notifications."""

import base64
import typing as t

import structlog
from django.utils.translation import gettext as _

from events.models import Registration
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.service.templates.base import NotificationTemplate
from notifications.service.templates.registry import register_template

logger = structlog.get_logger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


def _build_ticket_attachments(registration_id: str | None) -> dict[str, t.Any]:
    """Attach the ticket QR code as a PNG, read from the registration at send time.

    A ticket that is still being issued simply has no attachment; the participant
    can fetch it later from their registration.
    """
    if not registration_id:
        return {}
    qr_code = (
        Registration.objects.filter(pk=registration_id, registration_status=Registration.RegistrationStatus.CONFIRMED)
        .values_list("qr_code", flat=True)
        .first()
    )
    if not qr_code or not qr_code.startswith(DATA_URL_PREFIX):
        logger.info("ticket_attachment_unavailable", registration_id=registration_id)
        return {}
    return {
        "ticket.png": {
            "content_base64": qr_code.removeprefix(DATA_URL_PREFIX),
            "mimetype": "image/png",
        }
    }


# --- Template Classes ---


class RegistrationConfirmedTemplate(NotificationTemplate):
    """Template for REGISTRATION_CONFIRMED notification."""

    def get_title(self, notification: Notification) -> str:
        ctx = notification.context
        if ctx.get("event_type") == "merchandise":
            return _("Order Confirmed - %(event)s") % {"event": ctx.get("event_name", "")}
        return _("Registration Confirmed - %(event)s") % {"event": ctx.get("event_name", "")}

    def get_email_attachments(self, notification: Notification) -> dict[str, t.Any]:
        return _build_ticket_attachments(notification.context.get("registration_id"))


class RegistrationCancelledTemplate(NotificationTemplate):
    """Template for REGISTRATION_CANCELLED notification."""

    def get_title(self, notification: Notification) -> str:
        return _("Registration Cancelled - %(event)s") % {"event": notification.context.get("event_name", "")}


class PaymentProofSubmittedTemplate(NotificationTemplate):
    """Template for PAYMENT_PROOF_SUBMITTED notification (to the organizer)."""

    def get_title(self, notification: Notification) -> str:
        ctx = notification.context
        return _("Payment proof from %(participant)s - %(event)s") % {
            "participant": ctx.get("participant_name", ""),
            "event": ctx.get("event_name", ""),
        }


class PaymentApprovedTemplate(NotificationTemplate):
    """Template for PAYMENT_APPROVED notification."""

    def get_title(self, notification: Notification) -> str:
        return _("Payment Approved - %(event)s") % {"event": notification.context.get("event_name", "")}

    def get_email_attachments(self, notification: Notification) -> dict[str, t.Any]:
        return _build_ticket_attachments(notification.context.get("registration_id"))


class PaymentRejectedTemplate(NotificationTemplate):
    """Template for PAYMENT_REJECTED notification."""

    def get_title(self, notification: Notification) -> str:
        return _("Payment Rejected - %(event)s") % {"event": notification.context.get("event_name", "")}


register_template(NotificationType.REGISTRATION_CONFIRMED, RegistrationConfirmedTemplate())
register_template(NotificationType.REGISTRATION_CANCELLED, RegistrationCancelledTemplate())
register_template(NotificationType.PAYMENT_PROOF_SUBMITTED, PaymentProofSubmittedTemplate())
register_template(NotificationType.PAYMENT_APPROVED, PaymentApprovedTemplate())
register_template(NotificationType.PAYMENT_REJECTED, PaymentRejectedTemplate())
