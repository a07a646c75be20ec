"""
Project-wide fixtures: users, authenticated API clients and events of every kind.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta
from decimal import Decimal
from io import BytesIO
from pathlib import Path

import faker
import pytest
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from PIL import Image

from accounts.models import FelicityUser
from events.models import Event


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test so rate limits never leak between tests."""
    cache.clear()


@pytest.fixture(autouse=True)
def isolated_media_root(settings: t.Any, tmp_path: Path) -> Path:
    """Store uploaded files in a per-test directory."""
    settings.MEDIA_ROOT = str(tmp_path / "media")
    return tmp_path / "media"


class FelicityUserFactory:
    """Factory for creating FelicityUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> FelicityUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return FelicityUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> FelicityUser:
        return self.create_user(**kwargs)


@pytest.fixture
def felicity_user_factory() -> FelicityUserFactory:
    return FelicityUserFactory()


@pytest.fixture
def participant(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    return felicity_user_factory()


@pytest.fixture
def other_participant(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    return felicity_user_factory()


@pytest.fixture
def organizer(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    return felicity_user_factory(role=FelicityUser.Role.ORGANIZER, organizer_name="Dance Club")


@pytest.fixture
def other_organizer(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    return felicity_user_factory(role=FelicityUser.Role.ORGANIZER, organizer_name="Chess Club")


@pytest.fixture
def admin_user(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    return felicity_user_factory(role=FelicityUser.Role.ADMIN)


def _client_for(user: FelicityUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def participant_client(participant: FelicityUser) -> Client:
    """API client for a participant."""
    return _client_for(participant)


@pytest.fixture
def other_participant_client(other_participant: FelicityUser) -> Client:
    return _client_for(other_participant)


@pytest.fixture
def organizer_client(organizer: FelicityUser) -> Client:
    """API client for the organizer of the event fixtures."""
    return _client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: FelicityUser) -> Client:
    """API client for an organizer who does not own the event fixtures."""
    return _client_for(other_organizer)


@pytest.fixture
def admin_client_jwt(admin_user: FelicityUser) -> Client:
    return _client_for(admin_user)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )


@pytest.fixture
def event(organizer: FelicityUser, next_week: datetime) -> Event:
    """A published, free, normal event with 10 seats."""
    return Event.objects.create(
        organizer=organizer,
        name="Spring Workshop",
        venue="Hall A",
        event_type=Event.EventType.NORMAL,
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        max_participants=10,
    )


@pytest.fixture
def paid_event(organizer: FelicityUser, next_week: datetime) -> Event:
    """A published, paid, normal event."""
    return Event.objects.create(
        organizer=organizer,
        name="Gala Dinner",
        event_type=Event.EventType.NORMAL,
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        price=Decimal("25.00"),
        max_participants=50,
    )


@pytest.fixture
def merch_event(organizer: FelicityUser, next_week: datetime) -> Event:
    """A published, paid merchandise sale: 1 unit of stock, sizes and colors restricted."""
    return Event.objects.create(
        organizer=organizer,
        name="Club Hoodie",
        event_type=Event.EventType.MERCHANDISE,
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        price=Decimal("30.00"),
        available_stock=1,
        sizes=["S", "M", "L"],
        colors=["black", "white"],
        purchase_limit_per_participant=3,
    )


@pytest.fixture
def free_merch_event(organizer: FelicityUser, next_week: datetime) -> Event:
    """A published, free merchandise giveaway with 5 units."""
    return Event.objects.create(
        organizer=organizer,
        name="Sticker Pack",
        event_type=Event.EventType.MERCHANDISE,
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        available_stock=5,
    )


def make_png_upload(name: str = "proof.png", size: tuple[int, int] = (8, 8)) -> SimpleUploadedFile:
    buffer = BytesIO()
    Image.new("RGB", size, color="red").save(buffer, "PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


@pytest.fixture
def png_proof() -> SimpleUploadedFile:
    """A small, valid PNG payment proof."""
    return make_png_upload()
