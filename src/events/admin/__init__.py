# src/events/admin/__init__.py
"""Events admin module.

Django autodiscover imports this module, which registers the admin classes
via the @admin.register decorators in the submodules.
"""

from events.admin.event import EventAdmin
from events.admin.registration import AttendanceOverrideAdmin, RegistrationAdmin

__all__ = [
    "EventAdmin",
    "RegistrationAdmin",
    "AttendanceOverrideAdmin",
]
