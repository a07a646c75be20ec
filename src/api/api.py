from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, InterfaceError, OperationalError
from django.http import Http404, HttpRequest
from ninja.errors import AuthenticationError, HttpError
from ninja.errors import ValidationError as NinjaValidationError
from ninja_extra import NinjaExtraAPI
from ninja_extra.exceptions import APIException
from ninja_jwt.controller import NinjaJWTDefaultController

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers import LIFECYCLE_CONTROLLERS
from events.exceptions import LifecycleError

from .exception_handlers import (
    handle_api_exception,
    handle_authentication_error,
    handle_database_unavailable,
    handle_django_validation_error,
    handle_general_exception,
    handle_http_error,
    handle_integrity_error,
    handle_lifecycle_error,
    handle_not_found,
    handle_request_validation_error,
)

api = NinjaExtraAPI(
    title="Felicity Backend API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Felicity registration and payment API {settings.VERSION}",
    app_name=f"felicity-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse}, auth=None)
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk}, auth=None)
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    # Auth controllers
    NinjaJWTDefaultController,
    # Registration lifecycle controllers
    *LIFECYCLE_CONTROLLERS,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    LifecycleError: handle_lifecycle_error,
    NinjaValidationError: handle_request_validation_error,
    ValidationError: handle_django_validation_error,
    APIException: handle_api_exception,
    AuthenticationError: handle_authentication_error,
    HttpError: handle_http_error,
    Http404: handle_not_found,
    IntegrityError: handle_integrity_error,
    OperationalError: handle_database_unavailable,
    InterfaceError: handle_database_unavailable,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
