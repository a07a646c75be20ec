import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class FelicityUserQueryset(models.QuerySet["FelicityUser"]):
    """Queryset for FelicityUser."""

    def organizers(self) -> t.Self:
        return self.filter(role=FelicityUser.Role.ORGANIZER)


class FelicityUserManager(UserManager["FelicityUser"]):
    def get_queryset(self) -> FelicityUserQueryset:
        """Get queryset for FelicityUser."""
        return FelicityUserQueryset(self.model)

    def organizers(self) -> FelicityUserQueryset:
        return self.get_queryset().organizers()


class FelicityUser(AbstractUser):
    """The authenticated principal.

    Credentials and sessions are handled by the JWT layer; the lifecycle only
    ever looks at ``id`` and ``role``.
    """

    class Role(models.TextChoices):
        PARTICIPANT = "participant", "Participant"
        ORGANIZER = "organizer", "Organizer"
        ADMIN = "admin", "Admin"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PARTICIPANT, db_index=True)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")
    organizer_name = models.CharField(max_length=255, blank=True, help_text="Public name shown for organizers")
    discord_webhook_url = models.URLField(
        max_length=500, blank=True, help_text="Organizers only: webhook notified about new payment proofs"
    )

    objects = FelicityUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.organizer_name
            or self.preferred_name
            or self.get_full_name()
            or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
