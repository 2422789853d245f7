"""Availability repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.modules.availability.models import TeacherAvailability
from tutorbook.shared.utils import utc_now


class AvailabilityRepository:
    """DB operations for teacher availability templates."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_teacher_id(self, teacher_id: UUID) -> TeacherAvailability | None:
        stmt = select(TeacherAvailability).where(TeacherAvailability.teacher_id == teacher_id)
        return await self.session.scalar(stmt)

    async def replace(self, teacher_id: UUID, weekly_slots: dict) -> TeacherAvailability:
        """Insert or overwrite the teacher's template in a single statement."""
        now = utc_now()
        stmt = (
            insert(TeacherAvailability)
            .values(teacher_id=teacher_id, weekly_slots=weekly_slots, created_at=now, updated_at=now)
            .on_conflict_do_update(
                index_elements=[TeacherAvailability.teacher_id],
                set_={"weekly_slots": weekly_slots, "updated_at": now},
            )
            .returning(TeacherAvailability)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)
