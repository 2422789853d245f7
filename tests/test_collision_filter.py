from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from tutorbook.core.enums import BookingStatusEnum
from tutorbook.modules.scheduling.collision import collides, filter_bookable
from tutorbook.modules.scheduling.projection import BookingSlotCandidate

TEACHER_ID = uuid4()


@dataclass
class FakeBlockingBooking:
    date: datetime
    status: BookingStatusEnum
    duration_minutes: int = 60


def _candidate(hour: int, minute: int) -> BookingSlotCandidate:
    return BookingSlotCandidate(
        teacher_id=TEACHER_ID,
        date=date(2024, 6, 10),
        start_time=f"{hour:02d}:{minute:02d}",
        duration_minutes=60,
        starts_at=datetime(2024, 6, 10, hour, minute, tzinfo=UTC),
    )


def test_confirmed_booking_hides_same_start_but_not_ten_minutes_later() -> None:
    booking = FakeBlockingBooking(date=datetime(2024, 6, 10, 14, 0, tzinfo=UTC), status=BookingStatusEnum.CONFIRMED)
    candidates = [_candidate(14, 0), _candidate(14, 10)]

    bookable = list(filter_bookable(candidates, [booking]))

    assert [c.start_time for c in bookable] == ["14:10"]


def test_long_booking_does_not_hide_slot_starting_inside_it() -> None:
    booking = FakeBlockingBooking(
        date=datetime(2024, 6, 10, 14, 0, tzinfo=UTC),
        status=BookingStatusEnum.CONFIRMED,
        duration_minutes=90,
    )

    bookable = list(filter_bookable([_candidate(15, 0)], [booking]))

    assert [c.start_time for c in bookable] == ["15:00"]


@pytest.mark.parametrize(
    ("offset", "blocked"),
    [
        (timedelta(0), True),
        (timedelta(minutes=4, seconds=59), True),
        (-timedelta(minutes=4), True),
        (timedelta(minutes=5), False),
        (-timedelta(minutes=5), False),
        (timedelta(minutes=10), False),
    ],
)
def test_tolerance_window_is_strict(offset: timedelta, blocked: bool) -> None:
    slot_start = datetime(2024, 6, 10, 14, 0, tzinfo=UTC)

    assert collides(slot_start, [slot_start + offset]) is blocked


@pytest.mark.parametrize("status", [BookingStatusEnum.CANCELLED, BookingStatusEnum.EXPIRED])
def test_inactive_bookings_never_block(status: BookingStatusEnum) -> None:
    booking = FakeBlockingBooking(date=datetime(2024, 6, 10, 14, 0, tzinfo=UTC), status=status)

    assert list(filter_bookable([_candidate(14, 0)], [booking])) == [_candidate(14, 0)]


def test_pending_booking_blocks_like_confirmed() -> None:
    booking = FakeBlockingBooking(
        date=datetime(2024, 6, 10, 14, 2, tzinfo=UTC),
        status=BookingStatusEnum.PENDING_PAYMENT,
    )

    assert list(filter_bookable([_candidate(14, 0)], [booking])) == []


def test_filter_keeps_candidate_order_and_custom_tolerance() -> None:
    booking = FakeBlockingBooking(date=datetime(2024, 6, 10, 14, 0, tzinfo=UTC), status=BookingStatusEnum.CONFIRMED)
    candidates = [_candidate(16, 0), _candidate(14, 10), _candidate(9, 0)]

    bookable = list(filter_bookable(candidates, [booking], tolerance=timedelta(minutes=15)))

    assert [c.start_time for c in bookable] == ["16:00", "09:00"]
