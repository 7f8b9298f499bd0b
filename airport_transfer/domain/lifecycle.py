"""
Booking Lifecycle Engine
========================

Single entry point for every write to a booking:

* ``submit``     -- (none) -> PENDING, by an authenticated customer
* ``transition`` -- status changes, checked against ``BOOKING_TRANSITIONS``
* ``delete``     -- unconditional removal, admins only

Authorization is decided before edge legality: a caller who may not touch
a booking gets ``Forbidden`` even when the requested edge does not exist,
so the state machine is never revealed to unauthorized callers.  A
transition checks, in order: the booking exists, the caller may touch it,
the target is a known status, the caller may take that edge, the edge
exists.

Concurrency
-----------
No locks are taken.  Status updates are a compare-and-set against the
status that was read, so a concurrent writer surfaces as ``ConflictError``
instead of being silently overwritten.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

from .aggregation import newest_first
from .entities import Booking, Caller, TripRequest
from .enums import BOOKING_TRANSITIONS, OWNER_TARGETS, Actor, BookingStatus
from .errors import (
    AuthenticationRequired,
    ConflictError,
    Forbidden,
    InvalidInput,
    NotFound,
)
from .ports import BookingStore
from .pricing import FareEstimator, parse_vehicle_class

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Input parsing ─────────────────────────────────────────────────────


def parse_status(value) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidInput(f"Unknown booking status: {value!r}") from None


def combine_date_time(date: Optional[str], time: Optional[str]) -> Optional[str]:
    """Join separate date and time form fields into one ISO string."""
    if not date or not time:
        return None
    return f"{date.strip()}T{time.strip()}"


def parse_schedule(value, local_tz: tzinfo = timezone.utc) -> datetime:
    """Resolve *value* to a UTC instant; naive times are read as *local_tz*."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput("Pickup date and time are required")
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidInput(f"Invalid pickup date/time: {value!r}") from None
    else:
        raise InvalidInput(f"Invalid pickup date/time: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=local_tz)
    return moment.astimezone(timezone.utc)


def _required_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field_name} is required")
    return value.strip()


def _require_caller(caller: Optional[Caller]) -> Caller:
    if caller is None:
        raise AuthenticationRequired("Please login to continue")
    return caller


# ── Engine ────────────────────────────────────────────────────────────


class BookingLifecycle:
    """Enforces the booking state machine and who may drive it."""

    def __init__(
        self,
        store: BookingStore,
        estimator: FareEstimator | None = None,
        clock: Clock = utc_now,
        local_utc_offset: timedelta = timedelta(0),
    ):
        self.store = store
        self.estimator = estimator or FareEstimator()
        self.clock = clock
        self.local_tz = timezone(local_utc_offset)

    async def submit(self, caller: Optional[Caller], trip: TripRequest) -> Booking:
        caller = _require_caller(caller)

        pickup = _required_text(trip.pickup, "Pickup location")
        drop = _required_text(trip.drop, "Drop location")
        scheduled_at = parse_schedule(trip.scheduled_at, self.local_tz)
        now = self.clock()
        if scheduled_at < now:
            raise InvalidInput("Pickup time must not be in the past")
        vehicle_class = parse_vehicle_class(trip.vehicle_class)

        # ── Idempotency guard ─────────────────────────────────────
        if trip.idempotency_key:
            existing = await self.store.get_by_idempotency_key(
                caller.id, trip.idempotency_key
            )
            if existing:
                return existing

        booking = Booking(
            id=uuid.uuid4().hex,
            owner_id=caller.id,
            pickup=pickup,
            drop=drop,
            scheduled_at=scheduled_at,
            vehicle_class=vehicle_class,
            fare=self.estimator.estimate(vehicle_class),
            status=BookingStatus.PENDING,
            created_at=now,
            idempotency_key=trip.idempotency_key,
        )
        try:
            await self.store.insert(booking)
        except ConflictError:
            # A concurrent submit with the same key got there first.
            if not trip.idempotency_key:
                raise
            existing = await self.store.get_by_idempotency_key(
                caller.id, trip.idempotency_key
            )
            if existing is None:
                raise
            return existing
        logger.info(
            "Booking %s submitted by %s (%s, fare=%d)",
            booking.id, caller.id, vehicle_class.value, booking.fare,
        )
        return booking

    async def transition(
        self, booking_id: str, target, caller: Optional[Caller]
    ) -> Booking:
        caller = _require_caller(caller)
        booking = await self._load(booking_id)
        if not booking.is_visible_to(caller):
            raise Forbidden()
        target = parse_status(target)

        self._authorize(booking, target, caller)
        updated = booking.transition_to(target)

        await self.store.update_status(
            booking.id, target, expected_status=booking.status
        )
        logger.info(
            "Booking %s: %s -> %s by %s",
            booking.id, booking.status.value, target.value, caller.id,
        )
        return updated

    async def cancel(self, booking_id: str, caller: Optional[Caller]) -> Booking:
        return await self.transition(booking_id, BookingStatus.CANCELLED, caller)

    async def delete(self, booking_id: str, caller: Optional[Caller]) -> None:
        caller = _require_caller(caller)
        if not caller.is_admin:
            raise Forbidden("Only administrators can delete bookings")
        await self._load(booking_id)
        await self.store.delete(booking_id)
        logger.info("Booking %s deleted by %s", booking_id, caller.id)

    async def get(self, booking_id: str, caller: Optional[Caller]) -> Booking:
        caller = _require_caller(caller)
        booking = await self._load(booking_id)
        if not booking.is_visible_to(caller):
            raise NotFound()
        return booking

    async def list_for_owner(self, caller: Optional[Caller]) -> list[Booking]:
        caller = _require_caller(caller)
        return newest_first(await self.store.list_by_owner(caller.id))

    async def list_all(self, caller: Optional[Caller]) -> list[Booking]:
        caller = _require_caller(caller)
        if not caller.is_admin:
            raise Forbidden("Administrator access required")
        return newest_first(await self.store.list_all())

    # ── Internals ─────────────────────────────────────────────────

    async def _load(self, booking_id: str) -> Booking:
        booking = await self.store.get_by_id(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    @staticmethod
    def _authorize(booking: Booking, target: BookingStatus, caller: Caller) -> None:
        if caller.is_admin:
            return
        actors = BOOKING_TRANSITIONS.get((booking.status, target))
        if actors is None:
            # Undefined edge: owners only learn that if they asked for
            # something they could ever do themselves.
            permitted = target in OWNER_TARGETS
        else:
            permitted = Actor.OWNER in actors
        if not permitted:
            raise Forbidden(
                f"Customers cannot mark a booking as {target.value}"
            )

