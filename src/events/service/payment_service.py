"""Manual payment approval for paid merchandise orders.

Participant uploads a proof -> organizer approves or rejects. Stock and seats are
taken only on approval, in the same transaction as the status change.
"""

import typing as t
from pathlib import PurePath
from uuid import UUID

import structlog
from django.conf import settings
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.utils import timezone
from PIL import Image, UnidentifiedImageError

from accounts.models import FelicityUser
from events.exceptions import (
    ForbiddenError,
    InvalidStateError,
    LifecycleValidationError,
    StorageUnavailableError,
)
from events.models import Event, Registration
from events.models.registration import RegistrationQuerySet
from events.service import registration_notification_service as notifications
from events.service.registration_service import (
    exhausted_error,
    get_managed_event,
    get_registration_for_update,
)
from events.service.ticket_issuer import store_issued_ticket
from events.service.transitions import compare_and_set, ensure_approval_transition

logger = structlog.get_logger(__name__)

Status = Registration.RegistrationStatus
Approval = Registration.ApprovalStatus

ApprovalFilter = t.Literal["pending", "approved", "rejected", "all"]


def _validate_proof_file(file: UploadedFile) -> None:
    if file.content_type not in settings.PAYMENT_PROOF_ALLOWED_CONTENT_TYPES:
        raise LifecycleValidationError("Payment proof must be a JPEG, PNG, GIF or WebP image.")
    if file.size is None or file.size > settings.PAYMENT_PROOF_MAX_SIZE_BYTES:
        raise LifecycleValidationError(
            f"Payment proof must be at most {settings.PAYMENT_PROOF_MAX_SIZE_BYTES // (1024 * 1024)} MB."
        )
    try:
        with Image.open(file) as img:
            img.verify()
    except (UnidentifiedImageError, OSError) as e:
        raise LifecycleValidationError("File is not a valid image.") from e
    finally:
        file.seek(0)


def _ensure_reviewable(registration: Registration, organizer: FelicityUser) -> None:
    if not registration.event.is_managed_by(organizer):
        raise ForbiddenError("Only the event's organizer can review payments.")
    if registration.registration_status != Status.PENDING_APPROVAL:
        raise InvalidStateError(f"A {registration.registration_status} registration cannot be reviewed.")


def upload_proof(registration_id: UUID, actor: FelicityUser, file: UploadedFile) -> Registration:
    """Attach a payment proof to a pending order. A repeated upload replaces the previous reference."""
    registration = get_registration_for_update(registration_id)
    if registration.participant_id != actor.id:
        raise ForbiddenError("You can only upload a payment proof for your own order.")
    if registration.registration_status != Status.PENDING_APPROVAL:
        raise InvalidStateError("Payment proofs can only be uploaded while the order awaits approval.")
    ensure_approval_transition(registration.payment_approval_status, Approval.PENDING)
    _validate_proof_file(file)

    name = PurePath(file.name or "proof").name
    try:
        path = default_storage.save(f"{settings.PAYMENT_PROOF_UPLOAD_DIR}/{registration.id}/{name}", file)
    except OSError as e:
        logger.error("payment_proof_storage_failed", registration_id=str(registration.id), error=str(e))
        raise StorageUnavailableError("The payment proof could not be stored. Please retry.") from e

    now = timezone.now()
    updated = Registration.objects.filter(pk=registration.pk, registration_status=Status.PENDING_APPROVAL).update(
        payment_proof=path,
        payment_proof_uploaded_at=now,
        payment_approval_status=Approval.PENDING,
        updated_at=now,
    )
    if not updated:
        default_storage.delete(path)
        raise InvalidStateError("The order was reviewed while the proof was uploading.")

    registration.refresh_from_db()
    logger.info("payment_proof_uploaded", registration_id=str(registration.id), path=path)
    notifications.notify_payment_proof_submitted(registration)
    return registration


def list_payment_approvals(
    event_id: UUID, organizer: FelicityUser, status: ApprovalFilter = "pending"
) -> RegistrationQuerySet:
    event = get_managed_event(event_id, organizer)
    qs = (
        Registration.objects.with_relations()
        .filter(event=event, payment_approval_status__isnull=False)
        .order_by("-payment_proof_uploaded_at", "-created_at")
    )
    if status == "pending":
        # a cancelled order keeps its pending approval record but can no longer be reviewed
        qs = qs.awaiting_payment_review()
    elif status != "all":
        qs = qs.filter(payment_approval_status=status)
    return qs


def approve_payment(registration_id: UUID, organizer: FelicityUser, notes: str = "") -> Registration:
    """Confirm a paid order.

    The status change and the stock/seat reservation commit together. If the
    reservation loses the race for the last units, nothing is written and the
    order stays pending approval.

    Raises:
        StockExceededError: Not enough stock left for the order.
        CapacityExceededError: The event is full.
    """
    registration = get_registration_for_update(registration_id)
    _ensure_reviewable(registration, organizer)
    ensure_approval_transition(registration.payment_approval_status, Approval.APPROVED)

    event = registration.event
    now = timezone.now()
    with transaction.atomic():
        compare_and_set(
            registration.pk,
            Status.PENDING_APPROVAL,
            Status.CONFIRMED,
            payment_status=Registration.PaymentStatus.COMPLETED,
            payment_approval_status=Approval.APPROVED,
            reviewed_by=organizer,
            reviewed_at=now,
            admin_notes=notes,
        )
        if not Event.objects.reserve(event.pk, registration.quantity, consume_stock=True):
            raise exhausted_error(event.pk, registration.quantity)

    registration.refresh_from_db()
    logger.info(
        "payment_approved",
        registration_id=str(registration.id),
        event_id=str(event.id),
        reviewed_by=str(organizer.id),
        quantity=registration.quantity,
    )
    store_issued_ticket(registration)
    notifications.notify_payment_approved(registration)
    return registration


def reject_payment(registration_id: UUID, organizer: FelicityUser, notes: str = "") -> Registration:
    """Reject a paid order. Nothing was reserved, so no counter changes."""
    registration = get_registration_for_update(registration_id)
    _ensure_reviewable(registration, organizer)
    ensure_approval_transition(registration.payment_approval_status, Approval.REJECTED)

    compare_and_set(
        registration.pk,
        Status.PENDING_APPROVAL,
        Status.REJECTED,
        payment_status=Registration.PaymentStatus.FAILED,
        payment_approval_status=Approval.REJECTED,
        reviewed_by=organizer,
        reviewed_at=timezone.now(),
        admin_notes=notes,
        qr_code=None,
    )

    registration.refresh_from_db()
    logger.info("payment_rejected", registration_id=str(registration.id), reviewed_by=str(organizer.id))
    notifications.notify_payment_rejected(registration)
    return registration
