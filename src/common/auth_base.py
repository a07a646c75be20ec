"""Base authentication classes for the Felicity API."""

import typing as t

from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from ninja_extra import status
from ninja_extra.exceptions import APIException
from ninja_jwt.authentication import JWTAuth


class PermissionDenied(APIException):
    """Exception raised when user doesn't have required permissions."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Permission denied")


class BaseJWTAuth(JWTAuth):
    """JWT authentication with an optional role requirement.

    The authenticated user is the principal ``{id, role}`` that every lifecycle
    operation receives. Endpoints that are only meaningful for organizers or
    admins can reject other roles before the handler runs; finer checks (does
    this organizer own this event?) stay in the service layer.
    """

    def __init__(self, *, roles: t.Iterable[str] | None = None) -> None:
        """Initialize the BaseJWTAuth authentication class.

        Args:
            roles: Roles allowed to call the endpoint. ``None`` allows every role.
        """
        self.roles = frozenset(roles) if roles is not None else None
        super().__init__()

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate and verify the user's role.

        Args:
            request: The HTTP request object
            token: The JWT token string

        Returns:
            The authenticated user object if all checks pass

        Raises:
            PermissionDenied: If the user's role is not allowed
        """
        user = super().authenticate(request, token)

        if user and not isinstance(user, AnonymousUser):
            if (
                self.roles is not None
                and getattr(user, "role", None) not in self.roles
                and not getattr(user, "is_superuser", False)
            ):
                raise PermissionDenied(str(_("Your role cannot perform this action.")))

        return user
