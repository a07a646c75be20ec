"""Exception handlers for the API.

Every failure leaves the API as ``{"ok": false, "error_kind": ..., "message": ...}``
so clients can branch on ``error_kind`` without parsing messages.
"""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404, HttpRequest
from ninja.errors import AuthenticationError, HttpError
from ninja.errors import ValidationError as NinjaValidationError
from ninja.responses import Response
from ninja_extra.exceptions import APIException

from events.exceptions import LifecycleError

logger = structlog.get_logger(__name__)

API_ERROR_KINDS = {
    400: "ValidationError",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "InvalidState",
    429: "RateLimited",
}


def error_response(
    status: int, error_kind: str, message: str, data: dict[str, t.Any] | None = None
) -> Response:
    """Build the error envelope."""
    payload: dict[str, t.Any] = {"ok": False, "error_kind": error_kind, "message": message}
    if data is not None:
        payload["data"] = data
    return Response(status=status, data=payload)


def handle_lifecycle_error(request: HttpRequest, exc: LifecycleError | t.Type[LifecycleError]) -> Response:
    """Handle the domain errors raised by the lifecycle services."""
    assert isinstance(exc, LifecycleError)
    logger.info(
        "lifecycle_error",
        error_kind=exc.error_kind,
        message=exc.message,
        method=request.method,
        path=request.path,
    )
    return error_response(exc.status_code, exc.error_kind, exc.message, exc.data)


def handle_request_validation_error(
    request: HttpRequest, exc: NinjaValidationError | t.Type[NinjaValidationError]
) -> Response:
    """Handle malformed request bodies, queries and paths (instead of ninja's 422)."""
    assert isinstance(exc, NinjaValidationError)
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors
    ]
    message = errors[0]["msg"] if errors else "Invalid request."
    return error_response(400, "ValidationError", message, {"errors": errors})


def handle_django_validation_error(
    request: HttpRequest, exc: DjangoValidationError | t.Type[DjangoValidationError]
) -> Response:
    """Handle a model validation error."""
    assert isinstance(exc, DjangoValidationError)
    logger.warning("VALIDATION_ERROR", path=request.path, messages=exc.messages)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": exc.messages}
    return error_response(400, "ValidationError", "; ".join(exc.messages), {"errors": error_dict})


def handle_api_exception(request: HttpRequest, exc: APIException | t.Type[APIException]) -> Response:
    """Handle authentication, permission and throttling errors raised by ninja_extra."""
    assert isinstance(exc, APIException)
    status = exc.status_code
    detail = exc.detail
    message = str(detail.get("detail", detail)) if isinstance(detail, dict) else str(detail)
    headers: dict[str, str] = {}
    if wait := getattr(exc, "wait", None):
        headers["Retry-After"] = str(int(wait))
    response = error_response(status, API_ERROR_KINDS.get(status, "Error"), message)
    for key, value in headers.items():
        response[key] = value
    return response


def handle_http_error(request: HttpRequest, exc: HttpError | t.Type[HttpError]) -> Response:
    """Handle errors raised by ninja itself, e.g. an unparseable request body."""
    assert isinstance(exc, HttpError)
    return error_response(exc.status_code, API_ERROR_KINDS.get(exc.status_code, "Error"), str(exc))


def handle_authentication_error(
    request: HttpRequest, exc: AuthenticationError | t.Type[AuthenticationError]
) -> Response:
    return error_response(401, "Unauthorized", "Authentication credentials were not provided or are invalid.")


def handle_not_found(request: HttpRequest, exc: Http404 | t.Type[Http404]) -> Response:
    return error_response(404, "NotFound", "Not found.")


def handle_integrity_error(request: HttpRequest, exc: IntegrityError | t.Type[IntegrityError]) -> Response:
    """A database constraint rejected the write, typically a concurrent change."""
    logger.warning("INTEGRITY_ERROR", path=request.path, error=str(exc))
    return error_response(409, "InvalidState", "The request conflicts with the current state. Reload and try again.")


def handle_database_unavailable(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    logger.error("DATABASE_UNAVAILABLE", path=request.path, error=str(exc))
    return error_response(503, "StorageUnavailable", "The service is temporarily unavailable. Please retry.")


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Logs the traceback with an obfuscated copy of the request. Staff users (and
    DEBUG) also get the traceback in the response.
    """
    metadata = {
        "headers": obfuscate(dict(request.headers)),
        "method": request.method,
        "path": request.path,
        "GET": obfuscate(request.GET.dict()),
        # request.user is set by the auth flow, if it ran
        "user": str(request.user) if getattr(request, "user", None) else None,
    }
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            metadata["json_payload"] = obfuscate(orjson.loads(request.body))
        except Exception:  # pragma: no cover
            metadata["json_payload"] = None
    logger.exception("INTERNAL_SERVER_ERROR", **metadata)

    data: dict[str, t.Any] | None = None
    is_staff = getattr(request, "user", None) and getattr(request.user, "is_staff", False)
    if settings.DEBUG or is_staff:  # pragma: no cover
        data = {"traceback": traceback.format_exc()}
    return error_response(500, "InternalError", "Internal Server Error.", data)


SENSITIVE_KEYS = {"password", "token", "refresh", "access", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: t.Any) -> t.Any:
    """Obfuscate sensitive data in payloads and headers."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
