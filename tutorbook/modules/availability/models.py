"""Availability ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from tutorbook.core.database import Base, BaseModelMixin


class TeacherAvailability(BaseModelMixin, Base):
    """Recurring weekly availability, one row per teacher."""

    __tablename__ = "teacher_availability"

    teacher_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    # {"Monday": [{"start_time": "09:00", "duration_minutes": 60}], ...}
    weekly_slots: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
