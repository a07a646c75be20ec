"""QR check-in, manual attendance overrides and the organizer's attendance views."""

import typing as t
from datetime import datetime
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyCheckedInError,
    ForbiddenError,
    InvalidStateError,
    LifecycleValidationError,
    NotFoundError,
)
from events.models import AttendanceOverride, Event, Registration
from events.service.registration_service import get_managed_event, get_registration_for_update

logger = structlog.get_logger(__name__)

Status = Registration.RegistrationStatus
ScanMethod = Registration.ScanMethod

SCAN_METHODS = (ScanMethod.CAMERA, ScanMethod.FILE_UPLOAD)

EXPORT_COLUMNS = (
    "ticket_id",
    "participant_name",
    "participant_email",
    "quantity",
    "attended",
    "attended_at",
    "scan_method",
    "scanned_by",
    "override_reason",
)


class AttendanceStats(t.NamedTuple):
    total: int
    attended: int
    not_attended: int
    attendance_rate: int


class AttendanceDashboard(t.NamedTuple):
    event: Event
    stats: AttendanceStats
    registrations: list[Registration]


class AttendanceExport(t.NamedTuple):
    columns: tuple[str, ...]
    rows: list[list[t.Any]]


def _user_name(user: FelicityUser | None) -> str | None:
    return user.get_display_name() if user else None


def check_in_details(registration: Registration) -> dict[str, t.Any]:
    """The existing check-in, reported back on a repeated scan."""
    return {
        "ticket_id": registration.ticket_id,
        "participant": registration.participant_name,
        "attended_at": registration.attended_at.isoformat() if registration.attended_at else None,
        "scanned_by": _user_name(registration.scanned_by),
        "scan_method": registration.scan_method or None,
    }


def scan_ticket(
    ticket_id: str,
    scanner: FelicityUser,
    method: str = ScanMethod.CAMERA,
    event_id: UUID | None = None,
) -> Registration:
    """Check in the holder of ``ticket_id``.

    A ticket can be checked in once. The attendance flip is a single conditional
    UPDATE, so of two simultaneous scans exactly one succeeds and the other gets
    ``AlreadyCheckedInError`` with the winner's details.
    """
    if method not in SCAN_METHODS:
        raise LifecycleValidationError("Scan method must be camera or file_upload.")
    try:
        registration = Registration.objects.with_relations().get(ticket_id=ticket_id.strip())
    except Registration.DoesNotExist as e:
        raise NotFoundError("Ticket not found.") from e

    if not registration.event.is_managed_by(scanner):
        raise ForbiddenError("Only the event's organizer can check in tickets.")
    if event_id is not None and registration.event_id != event_id:
        raise InvalidStateError("This ticket belongs to a different event.")
    if registration.attended:
        raise AlreadyCheckedInError(data=check_in_details(registration))
    if registration.registration_status != Status.CONFIRMED:
        raise InvalidStateError(f"A {registration.registration_status} registration cannot be checked in.")

    now = timezone.now()
    updated = Registration.objects.filter(
        pk=registration.pk, attended=False, registration_status=Status.CONFIRMED
    ).update(attended=True, attended_at=now, scanned_by=scanner, scan_method=method, updated_at=now)
    registration.refresh_from_db()
    if not updated:
        if registration.attended:
            raise AlreadyCheckedInError(data=check_in_details(registration))
        raise InvalidStateError(f"A {registration.registration_status} registration cannot be checked in.")

    logger.info(
        "ticket_checked_in",
        registration_id=str(registration.id),
        event_id=str(registration.event_id),
        scanned_by=str(scanner.id),
        scan_method=method,
    )
    return registration


def manual_override(
    registration_id: UUID,
    organizer: FelicityUser,
    mark_attended: bool,
    reason: str,
) -> Registration:
    """Set attendance by hand, recording who did it and why.

    Every call is recorded, including un-marking: the registration keeps the latest
    override and ``AttendanceOverride`` keeps all of them.
    """
    reason = (reason or "").strip()
    if not reason:
        raise LifecycleValidationError("A reason is required for a manual override.")

    registration = get_registration_for_update(registration_id)
    if not registration.event.is_managed_by(organizer):
        raise ForbiddenError("Only the event's organizer can override attendance.")
    status = registration.registration_status
    if mark_attended and status != Status.CONFIRMED:
        raise InvalidStateError(f"A {status} registration cannot be marked as attended.")

    now = timezone.now()
    with transaction.atomic():
        updated = Registration.objects.filter(pk=registration.pk, registration_status=status).update(
            attended=mark_attended,
            attended_at=now if mark_attended else None,
            scanned_by=organizer if mark_attended else None,
            scan_method=ScanMethod.MANUAL,
            override_is_overridden=True,
            override_reason=reason,
            overridden_by=organizer,
            overridden_at=now,
            updated_at=now,
        )
        if not updated:
            raise InvalidStateError("The registration was changed by another request. Reload and try again.")
        AttendanceOverride.objects.create(
            registration=registration,
            marked_attended=mark_attended,
            reason=reason,
            overridden_by=organizer,
        )

    registration.refresh_from_db()
    logger.info(
        "attendance_overridden",
        registration_id=str(registration.id),
        marked_attended=mark_attended,
        overridden_by=str(organizer.id),
    )
    return registration


def attendance_dashboard(event_id: UUID, organizer: FelicityUser) -> AttendanceDashboard:
    event = get_managed_event(event_id, organizer)
    registrations = list(
        Registration.objects.with_relations().filter(event=event, registration_status=Status.CONFIRMED)
    )
    total = len(registrations)
    attended = sum(1 for r in registrations if r.attended)
    stats = AttendanceStats(
        total=total,
        attended=attended,
        not_attended=total - attended,
        attendance_rate=round(attended / total * 100) if total else 0,
    )
    return AttendanceDashboard(event=event, stats=stats, registrations=registrations)


def _export_cell(value: t.Any) -> t.Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def attendance_export(event_id: UUID, organizer: FelicityUser) -> AttendanceExport:
    """Tabular attendance data for confirmed registrations, ready to be written out as CSV."""
    dashboard = attendance_dashboard(event_id, organizer)
    rows = [
        [
            _export_cell(value)
            for value in (
                r.ticket_id,
                r.participant_name,
                r.participant_email,
                r.quantity,
                r.attended,
                r.attended_at,
                r.scan_method or None,
                _user_name(r.scanned_by),
                r.override_reason or None,
            )
        ]
        for r in dashboard.registrations
    ]
    return AttendanceExport(columns=EXPORT_COLUMNS, rows=rows)


def audit_log(event_id: UUID, organizer: FelicityUser) -> list[Registration]:
    """Registrations with a manual override, most recent override first."""
    event = get_managed_event(event_id, organizer)
    return list(
        Registration.objects.with_relations()
        .filter(event=event, override_is_overridden=True)
        .prefetch_related(
            Prefetch(
                "attendance_overrides",
                queryset=AttendanceOverride.objects.select_related("overridden_by").order_by("-created_at"),
            )
        )
        .order_by("-overridden_at")
    )
