"""Booking schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.core.enums import BookingStatusEnum


class BookingCreate(BaseModel):
    """Create booking request (student picks a projected slot)."""

    teacher_id: UUID
    date: datetime
    duration_minutes: int = Field(gt=0, le=24 * 60)
    subject_id: UUID | None = None
    notes: str | None = Field(default=None, max_length=2000)


class MeetingLinkUpdate(BaseModel):
    """Set meeting link request."""

    meeting_link: str = Field(min_length=1, max_length=512)


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    teacher_id: UUID
    subject_id: UUID | None
    date: datetime
    duration_minutes: int
    notes: str | None
    price: int
    status: BookingStatusEnum
    meeting_link: str | None
    confirmed_at: datetime | None
    canceled_at: datetime | None
    expired_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ExpiredBookingsRead(BaseModel):
    """Result of an on-demand expiry run."""

    expired: int
