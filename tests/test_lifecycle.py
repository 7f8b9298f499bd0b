"""Tests for the booking lifecycle engine (in-memory store)."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from airport_transfer.domain.entities import Caller, TripRequest
from airport_transfer.domain.enums import BOOKING_TRANSITIONS, BookingStatus, Role, VehicleClass
from airport_transfer.domain.errors import (
    AuthenticationRequired,
    Forbidden,
    IllegalTransition,
    InvalidInput,
    InvalidVehicleClass,
    NotFound,
)
from airport_transfer.domain.lifecycle import (
    BookingLifecycle,
    combine_date_time,
    parse_schedule,
)
from conftest import NOW, TickingClock

IST = timezone(timedelta(hours=5, minutes=30))


def _trip(**overrides) -> TripRequest:
    fields = dict(
        pickup="Haridwar",
        drop="Dehradun Airport",
        scheduled_at="2026-11-02T06:30",
        vehicle_class="standard",
    )
    fields.update(overrides)
    return TripRequest(**fields)


async def _booking_in(lifecycle, owner, admin, status):
    """Drive a fresh booking into *status* through legal edges."""
    booking = await lifecycle.submit(owner, _trip())
    path = {
        BookingStatus.PENDING: [],
        BookingStatus.CONFIRMED: [BookingStatus.CONFIRMED],
        BookingStatus.COMPLETED: [BookingStatus.CONFIRMED, BookingStatus.COMPLETED],
        BookingStatus.CANCELLED: [BookingStatus.CANCELLED],
    }[status]
    for step in path:
        booking = await lifecycle.transition(booking.id, step, admin)
    return booking


class TestSubmit:
    @pytest.mark.asyncio
    async def test_scenario_standard_booking(self, lifecycle, customer, booking_store):
        booking = await lifecycle.submit(customer, _trip(drop="Dehradun Airport"))

        assert booking.fare == 2000
        assert booking.status == BookingStatus.PENDING
        assert booking.owner_id == customer.id
        assert booking.created_at == NOW
        assert booking.vehicle_class is VehicleClass.STANDARD
        assert await booking_store.get_by_id(booking.id) == booking

    @pytest.mark.asyncio
    async def test_unauthenticated_submit(self, lifecycle, booking_store):
        with pytest.raises(AuthenticationRequired):
            await lifecycle.submit(None, _trip())
        assert await booking_store.list_all() == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"pickup": ""},
            {"pickup": "   "},
            {"drop": None},
            {"scheduled_at": ""},
            {"scheduled_at": None},
            {"scheduled_at": "next tuesday"},
            {"scheduled_at": "2026-13-45T25:00"},
        ],
    )
    @pytest.mark.asyncio
    async def test_missing_or_malformed_fields(self, lifecycle, customer, overrides):
        with pytest.raises(InvalidInput):
            await lifecycle.submit(customer, _trip(**overrides))

    @pytest.mark.asyncio
    async def test_past_pickup_rejected(self, lifecycle, customer):
        with pytest.raises(InvalidInput, match="past"):
            await lifecycle.submit(customer, _trip(scheduled_at="2026-10-01T10:00"))

    @pytest.mark.asyncio
    async def test_unknown_vehicle_class(self, lifecycle, customer):
        with pytest.raises(InvalidVehicleClass):
            await lifecycle.submit(customer, _trip(vehicle_class="rickshaw"))

    @pytest.mark.asyncio
    async def test_locations_are_trimmed(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip(pickup="  Haridwar  "))
        assert booking.pickup == "Haridwar"

    @pytest.mark.asyncio
    async def test_fare_follows_vehicle_class(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip(vehicle_class="premium-sedan"))
        assert booking.fare == 9900

    @pytest.mark.asyncio
    async def test_idempotency_key_returns_original(self, lifecycle, customer, booking_store):
        first = await lifecycle.submit(customer, _trip(idempotency_key="click-1"))
        second = await lifecycle.submit(customer, _trip(idempotency_key="click-1"))
        assert first.id == second.id
        assert len(await booking_store.list_all()) == 1

    @pytest.mark.asyncio
    async def test_without_key_each_submit_is_independent(self, lifecycle, customer, booking_store):
        await lifecycle.submit(customer, _trip())
        await lifecycle.submit(customer, _trip())
        assert len(await booking_store.list_all()) == 2

    @pytest.mark.asyncio
    async def test_same_key_for_different_owners(self, lifecycle, customer, other_customer):
        a = await lifecycle.submit(customer, _trip(idempotency_key="k"))
        b = await lifecycle.submit(other_customer, _trip(idempotency_key="k"))
        assert a.id != b.id


class TestSchedule:
    def test_naive_time_uses_local_offset(self):
        moment = parse_schedule("2026-11-02T06:30", IST)
        assert moment == datetime(2026, 11, 2, 1, 0, tzinfo=timezone.utc)

    def test_aware_time_kept(self):
        moment = parse_schedule("2026-11-02T06:30:00+00:00", IST)
        assert moment.utcoffset() == timedelta(0)

    def test_combine_date_time(self):
        assert combine_date_time("2026-11-02", "06:30") == "2026-11-02T06:30"
        assert combine_date_time("2026-11-02", "") is None
        assert combine_date_time(None, "06:30") is None

    @pytest.mark.asyncio
    async def test_engine_applies_service_offset(self, booking_store, customer):
        engine = BookingLifecycle(
            booking_store, clock=lambda: NOW, local_utc_offset=timedelta(hours=5, minutes=30)
        )
        booking = await engine.submit(customer, _trip(scheduled_at="2026-11-02T06:30"))
        assert booking.scheduled_at == datetime(2026, 11, 2, 1, 0, tzinfo=timezone.utc)


class TestTransition:
    @pytest.mark.asyncio
    async def test_scenario_admin_confirms_then_completes(self, lifecycle, customer, admin):
        booking = await lifecycle.submit(customer, _trip())

        confirmed = await lifecycle.transition(booking.id, "confirmed", admin)
        assert confirmed.status == BookingStatus.CONFIRMED
        completed = await lifecycle.transition(booking.id, "completed", admin)
        assert completed.status == BookingStatus.COMPLETED

        with pytest.raises(IllegalTransition):
            await lifecycle.transition(booking.id, "pending", admin)

    @pytest.mark.asyncio
    async def test_scenario_owner_cannot_complete(self, lifecycle, customer, booking_store):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(Forbidden):
            await lifecycle.transition(booking.id, "completed", customer)
        assert (await booking_store.get_by_id(booking.id)).status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_owner_cannot_confirm(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(Forbidden):
            await lifecycle.transition(booking.id, BookingStatus.CONFIRMED, customer)

    @pytest.mark.asyncio
    async def test_owner_cancels_pending(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip())
        cancelled = await lifecycle.cancel(booking.id, customer)
        assert cancelled.status == BookingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_owner_cannot_cancel_confirmed(self, lifecycle, customer, admin):
        booking = await _booking_in(lifecycle, customer, admin, BookingStatus.CONFIRMED)
        with pytest.raises(Forbidden):
            await lifecycle.cancel(booking.id, customer)

    @pytest.mark.asyncio
    async def test_owner_cancelling_twice_is_illegal(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip())
        await lifecycle.cancel(booking.id, customer)
        with pytest.raises(IllegalTransition):
            await lifecycle.cancel(booking.id, customer)

    @pytest.mark.asyncio
    async def test_admin_cancels_confirmed(self, lifecycle, customer, admin):
        booking = await _booking_in(lifecycle, customer, admin, BookingStatus.CONFIRMED)
        assert (await lifecycle.cancel(booking.id, admin)).status == BookingStatus.CANCELLED

    @pytest.mark.parametrize(
        "current,target",
        [
            pair
            for pair in itertools.product(BookingStatus, repeat=2)
            if pair not in BOOKING_TRANSITIONS
        ],
    )
    @pytest.mark.asyncio
    async def test_undefined_edges_signal_illegal_transition(
        self, lifecycle, customer, admin, current, target
    ):
        booking = await _booking_in(lifecycle, customer, admin, current)
        with pytest.raises(IllegalTransition):
            await lifecycle.transition(booking.id, target, admin)

    @pytest.mark.parametrize("current", list(BookingStatus))
    @pytest.mark.parametrize("target", list(BookingStatus))
    @pytest.mark.asyncio
    async def test_stranger_always_forbidden(
        self, lifecycle, customer, other_customer, admin, current, target
    ):
        booking = await _booking_in(lifecycle, customer, admin, current)
        with pytest.raises(Forbidden):
            await lifecycle.transition(booking.id, target, other_customer)

    @pytest.mark.asyncio
    async def test_fare_never_changes(self, lifecycle, customer, admin, booking_store):
        booking = await lifecycle.submit(customer, _trip(vehicle_class="premium-large"))
        await lifecycle.transition(booking.id, "confirmed", admin)
        await lifecycle.transition(booking.id, "completed", admin)
        assert (await booking_store.get_by_id(booking.id)).fare == 4550

    @pytest.mark.asyncio
    async def test_rate_change_does_not_touch_existing_fares(self, booking_store, customer, admin):
        from airport_transfer.domain.pricing import DEFAULT_RATES, FareEstimator, VehicleRate

        old = BookingLifecycle(booking_store, clock=lambda: NOW)
        booking = await old.submit(customer, _trip())

        rates = dict(DEFAULT_RATES)
        rates[VehicleClass.STANDARD] = VehicleRate("Sedan (4 Seats)", 4, 2600, 1.0)
        new = BookingLifecycle(booking_store, FareEstimator(rates), clock=lambda: NOW)
        confirmed = await new.transition(booking.id, "confirmed", admin)
        assert confirmed.fare == 2000
        assert (await new.submit(customer, _trip())).fare == 2600

    @pytest.mark.asyncio
    async def test_missing_booking(self, lifecycle, admin):
        with pytest.raises(NotFound):
            await lifecycle.transition("nope", "confirmed", admin)

    @pytest.mark.asyncio
    async def test_unknown_target_status(self, lifecycle, customer, admin):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(InvalidInput):
            await lifecycle.transition(booking.id, "teleported", admin)

    @pytest.mark.asyncio
    async def test_stranger_with_unknown_status_is_forbidden(
        self, lifecycle, customer, other_customer
    ):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(Forbidden):
            await lifecycle.transition(booking.id, "teleported", other_customer)

    @pytest.mark.parametrize("who", ["customer", "admin"])
    @pytest.mark.asyncio
    async def test_missing_booking_checked_before_status(self, lifecycle, request, who):
        with pytest.raises(NotFound):
            await lifecycle.transition("nope", "teleported", request.getfixturevalue(who))

    @pytest.mark.asyncio
    async def test_anonymous_transition(self, lifecycle, customer):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(AuthenticationRequired):
            await lifecycle.transition(booking.id, "cancelled", None)


class TestDelete:
    @pytest.mark.asyncio
    async def test_scenario_user_cannot_delete(self, lifecycle, customer, booking_store):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(Forbidden):
            await lifecycle.delete(booking.id, customer)
        assert await booking_store.get_by_id(booking.id) is not None

    @pytest.mark.asyncio
    async def test_admin_deletes_in_any_status(self, lifecycle, customer, admin, booking_store):
        booking = await _booking_in(lifecycle, customer, admin, BookingStatus.COMPLETED)
        await lifecycle.delete(booking.id, admin)
        assert await booking_store.get_by_id(booking.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, lifecycle, admin):
        with pytest.raises(NotFound):
            await lifecycle.delete("nope", admin)


class TestVisibility:
    @pytest.mark.asyncio
    async def test_owner_and_admin_can_read(self, lifecycle, customer, admin):
        booking = await lifecycle.submit(customer, _trip())
        assert (await lifecycle.get(booking.id, customer)).id == booking.id
        assert (await lifecycle.get(booking.id, admin)).id == booking.id

    @pytest.mark.asyncio
    async def test_other_customer_sees_nothing(self, lifecycle, customer, other_customer):
        booking = await lifecycle.submit(customer, _trip())
        with pytest.raises(NotFound):
            await lifecycle.get(booking.id, other_customer)
        assert await lifecycle.list_for_owner(other_customer) == []

    @pytest.mark.asyncio
    async def test_list_all_requires_admin(self, lifecycle, customer):
        with pytest.raises(Forbidden):
            await lifecycle.list_all(customer)

    @pytest.mark.asyncio
    async def test_lists_are_newest_first(self, booking_store, customer, admin):
        engine = BookingLifecycle(booking_store, clock=TickingClock())
        first = await engine.submit(customer, _trip(pickup="first"))
        second = await engine.submit(customer, _trip(pickup="second"))
        third = await engine.submit(Caller("someone", Role.USER), _trip(pickup="third"))

        assert [b.id for b in await engine.list_for_owner(customer)] == [second.id, first.id]
        assert [b.id for b in await engine.list_all(admin)] == [third.id, second.id, first.id]
