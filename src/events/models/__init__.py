from .event import Event
from .registration import DELETED_PARTICIPANT_NAME, AttendanceOverride, Registration, generate_ticket_id

__all__ = [
    "DELETED_PARTICIPANT_NAME",
    "AttendanceOverride",
    "Event",
    "Registration",
    "generate_ticket_id",
]
