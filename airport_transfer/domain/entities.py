"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Booking``: enforces valid lifecycle transitions
  (PENDING -> CONFIRMED -> COMPLETED, PENDING | CONFIRMED -> CANCELLED).
- ``Booking`` is immutable: a transition returns a new value, so the id,
  owner, fare and creation time can never be rewritten by a status change.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import BOOKING_TRANSITIONS, BookingStatus, Role, VehicleClass
from .errors import IllegalTransition


# ── Identity & access ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Identity:
    """What the authentication collaborator knows about a signed-in party."""

    id: str
    email: Optional[str] = None
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class Caller:
    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass
class Account:
    """Profile record kept next to an identity."""

    id: str
    role: Role = Role.USER
    email: Optional[str] = None
    display_name: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: Optional[datetime] = None


# ── Bookings ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TripRequest:
    """Raw trip details as typed by a customer; validated by the engine."""

    pickup: Any = None
    drop: Any = None
    scheduled_at: Any = None
    vehicle_class: Any = VehicleClass.STANDARD
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class Booking:
    id: str
    owner_id: str
    pickup: str
    drop: str
    scheduled_at: datetime
    vehicle_class: VehicleClass
    fare: int
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = None
    idempotency_key: Optional[str] = field(default=None, compare=False)

    def can_transition_to(self, new_status: BookingStatus) -> bool:
        return (self.status, new_status) in BOOKING_TRANSITIONS

    def transition_to(self, new_status: BookingStatus) -> "Booking":
        """Return a copy in *new_status* if the edge is legal, else raise."""
        if not self.can_transition_to(new_status):
            raise IllegalTransition(self.status, new_status)
        return dataclasses.replace(self, status=new_status)

    def is_visible_to(self, caller: Caller) -> bool:
        return caller.is_admin or caller.id == self.owner_id
