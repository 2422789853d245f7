"""Teachers schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TeacherProfileCreate(BaseModel):
    """Create teacher profile request."""

    user_id: UUID
    display_name: str = Field(min_length=2, max_length=128)
    bio: str = Field(default="", max_length=5000)
    hourly_rate: int | None = Field(default=None, gt=0)


class TeacherProfileUpdate(BaseModel):
    """Update teacher profile request.

    Only fields present in the payload are applied; sending `hourly_rate: null`
    clears the rate so the default applies again.
    """

    display_name: str | None = Field(default=None, min_length=2, max_length=128)
    bio: str | None = Field(default=None, max_length=5000)
    hourly_rate: int | None = Field(default=None, gt=0)
    is_approved: bool | None = None


class TeacherProfileRead(BaseModel):
    """Teacher profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    display_name: str
    bio: str
    hourly_rate: int | None
    is_approved: bool
    created_at: datetime
    updated_at: datetime
