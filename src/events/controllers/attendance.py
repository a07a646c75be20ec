from uuid import UUID

from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.controllers import UserAwareController
from common.schema import Envelope, ErrorResponse
from common.throttling import ScanThrottle, UserDefaultThrottle, WriteThrottle
from events import schema
from events.service import attendance_service

from .permissions import ORGANIZER_ROLES

ERRORS = {frozenset({400, 403, 404, 409, 503}): ErrorResponse}


@api_controller(
    "/attendance",
    auth=BaseJWTAuth(roles=ORGANIZER_ROLES),
    tags=["Attendance"],
    throttle=UserDefaultThrottle(),
)
class AttendanceController(UserAwareController):
    @route.post(
        "/scan",
        url_name="scan_ticket",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
        throttle=ScanThrottle(),
    )
    def scan(self, payload: schema.ScanSchema) -> dict[str, object]:
        """Check in a ticket by its id, as read from the QR code.

        A repeated scan answers 409 ``AlreadyCheckedIn`` with the original check-in in ``data``.
        """
        registration = attendance_service.scan_ticket(
            payload.ticket_id, self.user(), method=payload.method, event_id=payload.event_id
        )
        return {"data": registration}

    @route.post(
        "/manual-override",
        url_name="manual_override",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
        throttle=WriteThrottle(),
    )
    def manual_override(self, payload: schema.ManualOverrideSchema) -> dict[str, object]:
        """Mark or unmark attendance by hand. A reason is required and every override is logged."""
        registration = attendance_service.manual_override(
            payload.registration_id, self.user(), payload.mark_attended, payload.reason
        )
        return {"data": registration}

    @route.get(
        "/events/{event_id}/dashboard",
        url_name="attendance_dashboard",
        response={200: Envelope[schema.AttendanceDashboardSchema], **ERRORS},
    )
    def dashboard(self, event_id: UUID) -> dict[str, object]:
        """Confirmed registrations of an event with attendance stats."""
        dashboard = attendance_service.attendance_dashboard(event_id, self.user())
        return {
            "data": {
                "event": dashboard.event,
                "stats": dashboard.stats._asdict(),
                "registrations": dashboard.registrations,
            }
        }

    @route.get(
        "/events/{event_id}/export",
        url_name="attendance_export",
        response={200: Envelope[schema.AttendanceExportSchema], **ERRORS},
    )
    def export(self, event_id: UUID) -> dict[str, object]:
        """Attendance as columns and rows."""
        export = attendance_service.attendance_export(event_id, self.user())
        return {"data": {"columns": list(export.columns), "rows": export.rows}}

    @route.get(
        "/events/{event_id}/audit-log",
        url_name="attendance_audit_log",
        response={200: Envelope[list[schema.AuditLogEntrySchema]], **ERRORS},
    )
    def audit_log(self, event_id: UUID) -> dict[str, object]:
        """Registrations with manual overrides, latest first, each with its full override history."""
        return {"data": attendance_service.audit_log(event_id, self.user())}
