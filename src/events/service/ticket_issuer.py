"""Ticket issuance: turns a confirmed registration into a scannable QR code.

``issue_ticket`` is pure. ``store_issued_ticket`` persists its output and never
raises: a registration whose QR could not be stored stays confirmed with
``qr_code = None`` and is picked up again by ``events.tasks.issue_missing_tickets``.
"""

import base64
import typing as t
from io import BytesIO

import qrcode
import structlog
from django.utils import timezone

from events.models import Registration

logger = structlog.get_logger(__name__)


class IssuedTicket(t.NamedTuple):
    ticket_id: str
    qr_payload: str
    qr_code: str


def render_qr_data_url(payload: str) -> str:
    """Render ``payload`` as a base64 PNG data URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return "data:image/png;base64," + base64.b64encode(buffered.getvalue()).decode("utf-8")


def issue_ticket(registration: Registration) -> IssuedTicket:
    """Build the ticket for a registration.

    The QR payload is the ticket id alone. Status, attendance and everything else
    mutable is looked up at scan time, so a printed ticket never goes stale.
    """
    payload = registration.ticket_id
    return IssuedTicket(ticket_id=registration.ticket_id, qr_payload=payload, qr_code=render_qr_data_url(payload))


def store_issued_ticket(registration: Registration) -> bool:
    """Issue and persist the ticket of a confirmed registration.

    Returns:
        True if the QR code was stored. False if issuance failed or the registration
        is no longer confirmed; the failure is logged and the registration left as is.
    """
    try:
        ticket = issue_ticket(registration)
        issued_at = timezone.now()
        updated = Registration.objects.filter(
            pk=registration.pk, registration_status=Registration.RegistrationStatus.CONFIRMED
        ).update(qr_code=ticket.qr_code, ticket_issued_at=issued_at, updated_at=issued_at)
    except Exception:
        logger.warning(
            "ticket_issuance_failed",
            registration_id=str(registration.pk),
            ticket_id=registration.ticket_id,
            exc_info=True,
        )
        return False

    if not updated:
        logger.info(
            "ticket_issuance_skipped",
            registration_id=str(registration.pk),
            reason="registration_not_confirmed",
        )
        return False

    registration.qr_code = ticket.qr_code
    registration.ticket_issued_at = issued_at
    logger.info("ticket_issued", registration_id=str(registration.pk), ticket_id=ticket.ticket_id)
    return True
