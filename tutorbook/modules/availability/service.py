"""Availability business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import RoleEnum
from tutorbook.core.locks import KeyedLockRegistry, booking_locks
from tutorbook.modules.availability.repository import AvailabilityRepository
from tutorbook.modules.availability.schemas import AvailabilityTemplate
from tutorbook.modules.identity.models import User
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import NotFoundException, UnauthorizedException

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Owns each teacher's recurring weekly template."""

    def __init__(
        self,
        repository: AvailabilityRepository,
        teachers_repository: TeachersRepository,
        locks: KeyedLockRegistry = booking_locks,
    ) -> None:
        self.repository = repository
        self.teachers_repository = teachers_repository
        self.locks = locks

    async def get_availability(self, teacher_id: UUID) -> AvailabilityTemplate:
        """Return the teacher's template, or an empty one if never set."""
        row = await self.repository.get_by_teacher_id(teacher_id)
        if row is None:
            return AvailabilityTemplate()
        return AvailabilityTemplate.model_validate({"weekly_slots": row.weekly_slots})

    async def set_availability(
        self,
        teacher_id: UUID,
        template: AvailabilityTemplate,
        actor: User,
    ) -> AvailabilityTemplate:
        """Replace the whole template. Slot overlaps are not checked."""
        if actor.role.name != RoleEnum.ADMIN and actor.id != teacher_id:
            raise UnauthorizedException("Only the teacher can change their availability")

        profile = await self.teachers_repository.get_profile_by_user_id(teacher_id)
        if profile is None:
            raise NotFoundException("Teacher not found")

        async with self.locks.hold(("availability", teacher_id)):
            await self.repository.replace(teacher_id, template.to_storage())

        logger.info(
            "Availability replaced for teacher %s (%d slots)",
            teacher_id,
            sum(len(slots) for slots in template.weekly_slots.values()),
        )
        return template


async def get_availability_service(
    session: AsyncSession = Depends(get_db_session),
) -> AvailabilityService:
    """Dependency provider for availability service."""
    return AvailabilityService(
        repository=AvailabilityRepository(session),
        teachers_repository=TeachersRepository(session),
    )
