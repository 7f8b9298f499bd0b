"""
Admin aggregation & filter view.

Pure read-side projections over a snapshot of bookings, recomputed on
every call.  Nothing here mutates a booking or talks to a store.

Complexity: O(n) per figure, O(n log n) for ``newest_first``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from .entities import Booking
from .enums import BILLABLE_STATUSES, BookingStatus
from .errors import InvalidInput

ALL = "all"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def total_revenue(bookings: Iterable[Booking]) -> int:
    return sum(b.fare for b in bookings if b.status in BILLABLE_STATUSES)


def pending_count(bookings: Iterable[Booking]) -> int:
    return sum(1 for b in bookings if b.status is BookingStatus.PENDING)


def total_volume(bookings: Iterable[Booking]) -> int:
    return sum(1 for _ in bookings)


def _status_filter(value) -> BookingStatus | None:
    if value is None or value == ALL:
        return None
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidInput(f"Unknown status filter: {value!r}") from None


def filter_bookings(
    bookings: Sequence[Booking],
    status_filter: str | BookingStatus = ALL,
    search_term: str = "",
) -> list[Booking]:
    """
    Keep bookings matching *status_filter* (or ``"all"``) AND whose id,
    pickup or drop contains *search_term*, case-insensitively.

    Relative order of the input is preserved.
    """
    wanted = _status_filter(status_filter)
    needle = (search_term or "").lower()

    def matches(b: Booking) -> bool:
        if wanted is not None and b.status is not wanted:
            return False
        if not needle:
            return True
        return (
            needle in b.id.lower()
            or needle in b.pickup.lower()
            or needle in b.drop.lower()
        )

    return [b for b in bookings if matches(b)]


def newest_first(bookings: Iterable[Booking]) -> list[Booking]:
    """Descending by ``created_at``; ties keep store order (stable sort)."""
    return sorted(bookings, key=lambda b: b.created_at or _EPOCH, reverse=True)


@dataclass(frozen=True)
class DashboardSummary:
    total_revenue: int
    pending_count: int
    total_volume: int
    by_status: dict[str, int] = field(default_factory=dict)


def summarize(bookings: Sequence[Booking]) -> DashboardSummary:
    counts = Counter(b.status for b in bookings)
    return DashboardSummary(
        total_revenue=total_revenue(bookings),
        pending_count=pending_count(bookings),
        total_volume=total_volume(bookings),
        by_status={s.value: counts.get(s, 0) for s in BookingStatus},
    )
