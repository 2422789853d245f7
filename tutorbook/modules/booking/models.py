"""Booking ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from tutorbook.core.database import Base, BaseModelMixin
from tutorbook.core.enums import ACTIVE_BOOKING_STATUSES, BookingStatusEnum

ACTIVE_SLOT_INDEX_NAME = "uq_bookings_teacher_active_date"


class Booking(BaseModelMixin, Base):
    """Private lesson booking; `date` is the lesson start instant."""

    __tablename__ = "bookings"

    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)

    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(BookingStatusEnum, name="booking_status_enum", native_enum=False),
        default=BookingStatusEnum.PENDING_PAYMENT,
        nullable=False,
    )
    meeting_link: Mapped[str | None] = mapped_column(String(512), nullable=True)

    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_bookings_teacher_status_date", "teacher_id", "status", "date"),
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            "teacher_id",
            "date",
            unique=True,
            postgresql_where=text(
                "status IN (" + ", ".join(f"'{item.value}'" for item in ACTIVE_BOOKING_STATUSES) + ")",
            ),
        ),
    )
