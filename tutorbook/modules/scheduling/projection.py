"""Expand a weekly availability template into dated slot candidates."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from tutorbook.core.enums import WeekdayEnum
from tutorbook.modules.availability.schemas import AvailabilityTemplate
from tutorbook.shared.utils import ensure_utc

DEFAULT_HORIZON_DAYS = 14
DEFAULT_SLOT_DURATION_MINUTES = 60


@dataclass(frozen=True, slots=True)
class BookingSlotCandidate:
    """Concrete dated slot, recomputed on every query and never stored."""

    teacher_id: UUID
    date: date
    start_time: str
    duration_minutes: int
    starts_at: datetime


def project_slots(
    teacher_id: UUID,
    template: AvailabilityTemplate,
    now: datetime,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    timezone: str | tzinfo = "UTC",
    default_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
) -> Iterator[BookingSlotCandidate]:
    """Yield candidates for days 1..horizon_days after `now`'s calendar date.

    Today is never projected. Candidates come out grouped by day in
    ascending order, then in template order within the day.
    """
    zone = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
    today = ensure_utc(now).astimezone(zone).date()

    for offset in range(1, horizon_days + 1):
        day = today + timedelta(days=offset)
        weekday = WeekdayEnum.from_index(day.weekday())
        for slot in template.slots_for(weekday):
            yield BookingSlotCandidate(
                teacher_id=teacher_id,
                date=day,
                start_time=slot.start_time,
                duration_minutes=slot.duration_minutes or default_duration_minutes,
                starts_at=datetime(day.year, day.month, day.day, slot.hour, slot.minute, tzinfo=zone),
            )
