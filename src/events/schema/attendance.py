"""Check-in and attendance report schemas."""

import typing as t
from datetime import datetime
from uuid import UUID

from ninja import ModelSchema, Schema

from accounts.schema import MinimalFelicityUserSchema
from common.schema import ReasonString, StrippedString
from events.models import AttendanceOverride, Registration

from .event import MinimalEventSchema
from .registration import RegistrationSchema


class ScanSchema(Schema):
    ticket_id: StrippedString
    method: t.Literal["camera", "file_upload"] = "camera"
    event_id: UUID | None = None


class ManualOverrideSchema(Schema):
    registration_id: UUID
    mark_attended: bool
    reason: ReasonString


class AttendanceStatsSchema(Schema):
    total: int
    attended: int
    not_attended: int
    attendance_rate: int


class AttendanceDashboardSchema(Schema):
    event: MinimalEventSchema
    stats: AttendanceStatsSchema
    registrations: list[RegistrationSchema]


class AttendanceExportSchema(Schema):
    columns: list[str]
    rows: list[list[t.Any]]


class AttendanceOverrideSchema(ModelSchema):
    overridden_by: MinimalFelicityUserSchema | None = None

    class Meta:
        model = AttendanceOverride
        fields = ["marked_attended", "reason", "created_at"]


class AuditLogEntrySchema(Schema):
    registration_id: UUID
    ticket_id: str
    participant_name: str
    attended: bool
    attended_at: datetime | None = None
    scan_method: Registration.ScanMethod | None = None
    override_reason: str
    overridden_by: MinimalFelicityUserSchema | None = None
    overridden_at: datetime | None = None
    history: list[AttendanceOverrideSchema]

    @staticmethod
    def resolve_registration_id(obj: Registration) -> UUID:
        return obj.id

    @staticmethod
    def resolve_scan_method(obj: Registration) -> str | None:
        return obj.scan_method or None

    @staticmethod
    def resolve_history(obj: Registration) -> list[AttendanceOverride]:
        return list(obj.attendance_overrides.all())
