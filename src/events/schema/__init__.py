"""Events schema package."""

from .attendance import (
    AttendanceDashboardSchema,
    AttendanceExportSchema,
    AttendanceOverrideSchema,
    AttendanceStatsSchema,
    AuditLogEntrySchema,
    ManualOverrideSchema,
    ScanSchema,
)
from .event import MinimalEventSchema
from .registration import (
    CancelRegistrationSchema,
    ManualOverrideRecordSchema,
    MerchandiseDetailsSchema,
    PaymentApprovalRecordSchema,
    PaymentReviewSchema,
    RegistrationCreateSchema,
    RegistrationSchema,
)

__all__ = [
    "AttendanceDashboardSchema",
    "AttendanceExportSchema",
    "AttendanceOverrideSchema",
    "AttendanceStatsSchema",
    "AuditLogEntrySchema",
    "CancelRegistrationSchema",
    "ManualOverrideRecordSchema",
    "ManualOverrideSchema",
    "MerchandiseDetailsSchema",
    "MinimalEventSchema",
    "PaymentApprovalRecordSchema",
    "PaymentReviewSchema",
    "RegistrationCreateSchema",
    "RegistrationSchema",
    "ScanSchema",
]
