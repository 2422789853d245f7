"""Scheduling schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BookableSlotRead(BaseModel):
    """Bookable slot response schema."""

    model_config = ConfigDict(from_attributes=True)

    teacher_id: UUID
    date: dt.date
    start_time: str
    duration_minutes: int
    starts_at: dt.datetime
    price: int
