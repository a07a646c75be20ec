from .attendance import AttendanceController
from .payments import PaymentController
from .registrations import RegistrationController

LIFECYCLE_CONTROLLERS = [RegistrationController, PaymentController, AttendanceController]

__all__ = ["LIFECYCLE_CONTROLLERS", "AttendanceController", "PaymentController", "RegistrationController"]
