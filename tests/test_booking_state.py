"""Unit tests for booking entity state transitions (State Pattern)."""

import itertools
from datetime import datetime, timezone

import pytest

from airport_transfer.domain.entities import Booking
from airport_transfer.domain.enums import (
    BOOKING_TRANSITIONS,
    OWNER_TARGETS,
    TERMINAL_STATUSES,
    Actor,
    BookingStatus,
    VehicleClass,
    allowed_targets,
)
from airport_transfer.domain.errors import IllegalTransition


def _booking(status=BookingStatus.PENDING) -> Booking:
    return Booking(
        id="b1",
        owner_id="customer-1",
        pickup="Haridwar",
        drop="Dehradun Airport",
        scheduled_at=datetime(2026, 11, 2, 1, 0, tzinfo=timezone.utc),
        vehicle_class=VehicleClass.STANDARD,
        fare=2000,
        status=status,
    )


LEGAL = set(BOOKING_TRANSITIONS)
ILLEGAL = [
    pair for pair in itertools.product(BookingStatus, repeat=2) if pair not in LEGAL
]


class TestBookingStateMachine:
    def test_initial_status_is_pending(self):
        assert _booking().status == BookingStatus.PENDING

    # ── Valid transitions ─────────────────────────────────────────

    def test_pending_to_confirmed(self):
        booking = _booking().transition_to(BookingStatus.CONFIRMED)
        assert booking.status == BookingStatus.CONFIRMED

    def test_confirmed_to_completed(self):
        booking = _booking(BookingStatus.CONFIRMED)
        assert booking.transition_to(BookingStatus.COMPLETED).status == BookingStatus.COMPLETED

    def test_pending_to_cancelled(self):
        booking = _booking().transition_to(BookingStatus.CANCELLED)
        assert booking.status == BookingStatus.CANCELLED

    def test_confirmed_to_cancelled(self):
        booking = _booking(BookingStatus.CONFIRMED).transition_to(BookingStatus.CANCELLED)
        assert booking.status == BookingStatus.CANCELLED

    def test_transition_returns_copy_and_keeps_fare(self):
        original = _booking()
        moved = original.transition_to(BookingStatus.CONFIRMED)
        assert original.status == BookingStatus.PENDING
        assert moved.fare == original.fare
        assert moved.owner_id == original.owner_id

    # ── Invalid transitions ───────────────────────────────────────

    @pytest.mark.parametrize("current,target", ILLEGAL)
    def test_undefined_edges_fail(self, current, target):
        with pytest.raises(IllegalTransition):
            _booking(current).transition_to(target)

    def test_pending_to_completed_skipping_confirmation_fails(self):
        with pytest.raises(IllegalTransition, match="pending to completed"):
            _booking().transition_to(BookingStatus.COMPLETED)


class TestTransitionTable:
    def test_terminal_statuses_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            assert allowed_targets(status) == set()

    def test_owner_may_only_cancel(self):
        assert OWNER_TARGETS == {BookingStatus.CANCELLED}

    def test_owner_cancel_only_while_pending(self):
        owner_edges = [pair for pair, actors in BOOKING_TRANSITIONS.items() if Actor.OWNER in actors]
        assert owner_edges == [(BookingStatus.PENDING, BookingStatus.CANCELLED)]

    def test_admin_may_take_every_edge(self):
        assert all(Actor.ADMIN in actors for actors in BOOKING_TRANSITIONS.values())
