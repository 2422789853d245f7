"""Availability schemas.

A template is an immutable value: updates build a new one and swap it in
whole, so readers never observe a half-applied week.
"""

from __future__ import annotations

import re
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tutorbook.core.enums import WeekdayEnum

_HH_MM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class SlotTemplate(BaseModel):
    """One recurring offered window inside a weekday."""

    model_config = ConfigDict(frozen=True)

    start_time: str = Field(examples=["14:00"])
    duration_minutes: int | None = Field(default=None, gt=0)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        """Accept only zero-padded 24h `HH:MM`."""
        if not _HH_MM.match(value):
            raise ValueError("start_time must use HH:MM 24h format")
        return value

    @property
    def hour(self) -> int:
        return int(self.start_time[:2])

    @property
    def minute(self) -> int:
        return int(self.start_time[3:])


class AvailabilityTemplate(BaseModel):
    """Teacher's weekly pattern. Overlapping slots within a day are allowed."""

    model_config = ConfigDict(frozen=True)

    weekly_slots: dict[WeekdayEnum, tuple[SlotTemplate, ...]] = Field(default_factory=dict)

    def slots_for(self, weekday: WeekdayEnum) -> tuple[SlotTemplate, ...]:
        return self.weekly_slots.get(weekday, ())

    def is_empty(self) -> bool:
        return not any(self.weekly_slots.values())

    def to_storage(self) -> dict[str, list[dict]]:
        """Serialize to the JSON shape stored in the availability table."""
        return {
            day.value: [slot.model_dump(mode="json") for slot in slots]
            for day, slots in self.weekly_slots.items()
        }


class AvailabilityUpdate(BaseModel):
    """Replace-whole-template request."""

    weekly_slots: dict[WeekdayEnum, list[SlotTemplate]]

    def to_template(self) -> AvailabilityTemplate:
        return AvailabilityTemplate(
            weekly_slots={day: tuple(slots) for day, slots in self.weekly_slots.items()},
        )


class AvailabilityRead(BaseModel):
    """Availability response schema."""

    teacher_id: UUID
    weekly_slots: dict[WeekdayEnum, list[SlotTemplate]]
