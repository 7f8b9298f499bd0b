"""
In-process implementations of the store ports.

Useful for tests and for running the lifecycle engine without a database.
Dicts keep insertion order, which gives the same stable listing order as
the SQL store's surrogate key.  Each write touches a single record in one
step, so a status update is atomic from the caller's point of view.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Optional

from airport_transfer.domain.entities import Account, Booking
from airport_transfer.domain.enums import BookingStatus, Role
from airport_transfer.domain.errors import ConflictError, NotFound


class InMemoryBookingStore:
    def __init__(self):
        self._bookings: dict[str, Booking] = {}

    async def insert(self, booking: Booking) -> str:
        if booking.id in self._bookings:
            raise ConflictError(f"Booking {booking.id} already exists")
        if booking.idempotency_key and self._find_by_key(
            booking.owner_id, booking.idempotency_key
        ):
            raise ConflictError(f"Booking {booking.id} conflicts with an existing booking")
        self._bookings[booking.id] = booking
        return booking.id

    async def get_by_id(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def _find_by_key(self, owner_id: str, key: str) -> Optional[Booking]:
        for booking in self._bookings.values():
            if booking.owner_id == owner_id and booking.idempotency_key == key:
                return booking
        return None

    async def get_by_idempotency_key(
        self, owner_id: str, key: str
    ) -> Optional[Booking]:
        return self._find_by_key(owner_id, key)

    async def list_by_owner(self, owner_id: str) -> list[Booking]:
        return [b for b in self._bookings.values() if b.owner_id == owner_id]

    async def list_all(self) -> list[Booking]:
        return list(self._bookings.values())

    async def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
    ) -> None:
        current = self._bookings.get(booking_id)
        if current is None:
            raise NotFound(f"Booking {booking_id} not found")
        if expected_status is not None and current.status is not expected_status:
            raise ConflictError(
                f"Booking {booking_id} was modified concurrently; reload and retry"
            )
        self._bookings[booking_id] = dataclasses.replace(current, status=status)

    async def delete(self, booking_id: str) -> None:
        self._bookings.pop(booking_id, None)


class InMemoryProfileStore:
    def __init__(self):
        self._profiles: dict[str, Account] = {}

    async def create_profile(
        self, identity_id: str, fields: Mapping[str, Any]
    ) -> None:
        self._profiles[identity_id] = Account(
            id=identity_id,
            role=Role(fields.get("role", Role.USER)),
            email=fields.get("email"),
            display_name=fields.get("display_name"),
            contact_phone=fields.get("contact_phone"),
        )

    async def get_profile(self, identity_id: str) -> Optional[Account]:
        return self._profiles.get(identity_id)
