"""Remove slot candidates that collide with active bookings.

The check compares start instants only: a candidate is hidden when an
active booking starts strictly less than `tolerance` away from it. Booking
duration is not considered, so a long lesson does not hide a slot that
starts inside it. Creation uses an exact-instant check instead; both rules
are kept as they are for compatibility with existing clients.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta
from typing import Protocol

from tutorbook.core.enums import ACTIVE_BOOKING_STATUSES, BookingStatusEnum
from tutorbook.modules.scheduling.projection import BookingSlotCandidate

DEFAULT_COLLISION_TOLERANCE = timedelta(minutes=5)


class BlockingBooking(Protocol):
    date: datetime
    status: BookingStatusEnum


def blocking_instants(bookings: Iterable[BlockingBooking]) -> list[datetime]:
    """Start instants of bookings that still hold their slot."""
    return [booking.date for booking in bookings if booking.status in ACTIVE_BOOKING_STATUSES]


def collides(
    starts_at: datetime,
    taken: Iterable[datetime],
    tolerance: timedelta = DEFAULT_COLLISION_TOLERANCE,
) -> bool:
    return any(abs(instant - starts_at) < tolerance for instant in taken)


def filter_bookable(
    candidates: Iterable[BookingSlotCandidate],
    bookings: Iterable[BlockingBooking],
    *,
    tolerance: timedelta = DEFAULT_COLLISION_TOLERANCE,
) -> Iterator[BookingSlotCandidate]:
    """Yield candidates not blocked by a pending or confirmed booking."""
    taken = blocking_instants(bookings)
    for candidate in candidates:
        if not collides(candidate.starts_at, taken, tolerance):
            yield candidate
