"""Tests for the conditional counter updates on Event."""

import pytest

from events.models import Event

pytestmark = pytest.mark.django_db


class TestReserve:
    def test_reserve_takes_a_seat(self, event: Event) -> None:
        """A reservation within capacity increments the counter."""
        assert Event.objects.reserve(event.pk, 1, consume_stock=False) is True
        event.refresh_from_db()
        assert event.current_registrations == 1

    def test_reserve_refuses_past_capacity(self, event: Event) -> None:
        """The last seat can be taken, the one after it cannot."""
        Event.objects.filter(pk=event.pk).update(current_registrations=9)

        assert Event.objects.reserve(event.pk, 1, consume_stock=False) is True
        assert Event.objects.reserve(event.pk, 1, consume_stock=False) is False

        event.refresh_from_db()
        assert event.current_registrations == 10

    def test_reserve_without_capacity_limit(self, event: Event) -> None:
        Event.objects.filter(pk=event.pk).update(max_participants=None, current_registrations=500)
        assert Event.objects.reserve(event.pk, 3, consume_stock=False) is True
        event.refresh_from_db()
        assert event.current_registrations == 503

    def test_reserve_consumes_stock(self, free_merch_event: Event) -> None:
        assert Event.objects.reserve(free_merch_event.pk, 2, consume_stock=True) is True
        free_merch_event.refresh_from_db()
        assert free_merch_event.available_stock == 3
        assert free_merch_event.current_registrations == 2

    def test_reserve_refuses_more_than_stock(self, free_merch_event: Event) -> None:
        """Stock never goes negative and nothing is written on refusal."""
        assert Event.objects.reserve(free_merch_event.pk, 6, consume_stock=True) is False
        free_merch_event.refresh_from_db()
        assert free_merch_event.available_stock == 5
        assert free_merch_event.current_registrations == 0

    def test_reserve_untracked_stock_stays_untracked(self, free_merch_event: Event) -> None:
        Event.objects.filter(pk=free_merch_event.pk).update(available_stock=None)
        assert Event.objects.reserve(free_merch_event.pk, 100, consume_stock=True) is True
        free_merch_event.refresh_from_db()
        assert free_merch_event.available_stock is None

    def test_reserve_uses_database_values_not_stale_instances(self, event: Event) -> None:
        """Counters are evaluated by the database, so a stale in-memory event cannot overshoot."""
        Event.objects.filter(pk=event.pk).update(max_participants=1)
        stale = Event.objects.get(pk=event.pk)

        assert Event.objects.reserve(event.pk, 1, consume_stock=False) is True
        assert stale.current_registrations == 0
        assert Event.objects.reserve(stale.pk, 1, consume_stock=False) is False


class TestRelease:
    def test_release_gives_seats_back(self, event: Event) -> None:
        Event.objects.filter(pk=event.pk).update(current_registrations=4)
        Event.objects.release(event.pk, 3, restore_stock=False)
        event.refresh_from_db()
        assert event.current_registrations == 1

    def test_release_never_goes_below_zero(self, event: Event) -> None:
        Event.objects.filter(pk=event.pk).update(current_registrations=1)
        Event.objects.release(event.pk, 5, restore_stock=False)
        event.refresh_from_db()
        assert event.current_registrations == 0

    def test_release_restores_stock_only_when_asked(self, free_merch_event: Event) -> None:
        Event.objects.reserve(free_merch_event.pk, 2, consume_stock=True)

        Event.objects.release(free_merch_event.pk, 1, restore_stock=False)
        free_merch_event.refresh_from_db()
        assert free_merch_event.available_stock == 3

        Event.objects.release(free_merch_event.pk, 1, restore_stock=True)
        free_merch_event.refresh_from_db()
        assert free_merch_event.available_stock == 4
        assert free_merch_event.current_registrations == 0
