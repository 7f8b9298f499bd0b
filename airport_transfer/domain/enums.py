"""Domain enumerations and state-transition rules."""

import enum


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class Actor(str, enum.Enum):
    """Who may invoke a transition: the booking's owner or any admin."""

    OWNER = "owner"
    ADMIN = "admin"


class VehicleClass(str, enum.Enum):
    STANDARD = "standard"
    PREMIUM_LARGE = "premium-large"
    PREMIUM_SEDAN = "premium-sedan"


# State machine: (current, next) -> actors allowed to take that edge.
# Creation (none -> PENDING) happens through submit, not through this table.
BOOKING_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Actor]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({Actor.ADMIN}),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): frozenset({Actor.ADMIN}),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): frozenset(
        {Actor.OWNER, Actor.ADMIN}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset({Actor.ADMIN}),
}

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

# Statuses that count towards revenue.
BILLABLE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.COMPLETED})

# Targets an owner may ever request; anything else is admin territory.
OWNER_TARGETS = frozenset(
    target
    for (_, target), actors in BOOKING_TRANSITIONS.items()
    if Actor.OWNER in actors
)


def allowed_targets(status: BookingStatus) -> set[BookingStatus]:
    """Statuses reachable in one step from *status*."""
    return {to for (frm, to) in BOOKING_TRANSITIONS if frm is status}


def _check_transition_table() -> None:
    for status in BookingStatus:
        outgoing = allowed_targets(status)
        if status in TERMINAL_STATUSES and outgoing:
            raise AssertionError(f"terminal status {status} has outgoing edges")
        if status not in TERMINAL_STATUSES and not outgoing:
            raise AssertionError(f"non-terminal status {status} is a dead end")


_check_transition_table()
