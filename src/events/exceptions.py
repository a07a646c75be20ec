"""Errors raised by the registration lifecycle.

Each error carries a stable ``error_kind`` that API clients can branch on, and the
HTTP status it maps to. ``data`` holds structured details (e.g. an existing check-in).
"""

import typing as t


class LifecycleError(Exception):
    """Base class for all registration lifecycle errors."""

    error_kind: t.ClassVar[str] = "LifecycleError"
    status_code: t.ClassVar[int] = 400
    default_message: t.ClassVar[str] = "The operation could not be completed."

    def __init__(self, message: str | None = None, *, data: dict[str, t.Any] | None = None) -> None:
        """Initialize the error with an optional message and structured payload."""
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class NotFoundError(LifecycleError):
    error_kind = "NotFound"
    status_code = 404
    default_message = "Not found."


class ForbiddenError(LifecycleError):
    error_kind = "Forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class InvalidStateError(LifecycleError):
    error_kind = "InvalidState"
    status_code = 409
    default_message = "This operation is not allowed in the current state."


class AlreadyCheckedInError(LifecycleError):
    """Raised on a repeated scan. Not fatal: ``data`` holds the original check-in."""

    error_kind = "AlreadyCheckedIn"
    status_code = 409
    default_message = "This ticket has already been checked in."


class CapacityExceededError(LifecycleError):
    error_kind = "CapacityExceeded"
    status_code = 409
    default_message = "The event has reached its maximum capacity."


class StockExceededError(LifecycleError):
    error_kind = "StockExceeded"
    status_code = 409
    default_message = "Not enough stock left for this order."


class LifecycleValidationError(LifecycleError):
    error_kind = "ValidationError"
    status_code = 400
    default_message = "Invalid input."


class StorageUnavailableError(LifecycleError):
    error_kind = "StorageUnavailable"
    status_code = 503
    default_message = "Storage is temporarily unavailable. Please retry."
