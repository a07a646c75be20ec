"""Celery tasks for the registration lifecycle."""

import structlog
from celery import shared_task

from .models import Registration
from .service.ticket_issuer import store_issued_ticket

logger = structlog.get_logger(__name__)


@shared_task(name="events.tasks.issue_missing_tickets")
def issue_missing_tickets() -> dict[str, int]:
    """Retry ticket issuance for confirmed registrations that still have no QR code.

    Safe to run periodically: registrations that are no longer confirmed, or were
    issued in the meantime, are skipped by ``store_issued_ticket``.
    """
    issued = failed = 0
    for registration in Registration.objects.missing_ticket().iterator():
        if store_issued_ticket(registration):
            issued += 1
        else:
            failed += 1
    if issued or failed:
        logger.info("missing_tickets_swept", issued=issued, failed=failed)
    return {"issued": issued, "failed": failed}
