"""Teachers business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.models import User
from tutorbook.modules.teachers.models import TeacherProfile
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.modules.teachers.schemas import TeacherProfileCreate, TeacherProfileUpdate
from tutorbook.shared.exceptions import ConflictException, NotFoundException, UnauthorizedException

_NULLABLE_PROFILE_FIELDS = frozenset({"hourly_rate"})


class TeachersService:
    """Teachers domain service."""

    def __init__(self, repository: TeachersRepository) -> None:
        self.repository = repository

    async def create_profile(self, payload: TeacherProfileCreate, actor: User) -> TeacherProfile:
        """Create teacher profile."""
        if actor.role.name != RoleEnum.ADMIN and actor.id != payload.user_id:
            raise UnauthorizedException("Only admin or owner can create profile")

        existing = await self.repository.get_profile_by_user_id(payload.user_id)
        if existing is not None:
            raise ConflictException("Teacher profile already exists for user")

        return await self.repository.create_profile(
            user_id=payload.user_id,
            display_name=payload.display_name,
            bio=payload.bio,
            hourly_rate=payload.hourly_rate,
        )

    async def update_profile(
        self,
        profile_id: UUID,
        payload: TeacherProfileUpdate,
        actor: User,
    ) -> TeacherProfile:
        """Update teacher profile."""
        profile = await self.repository.get_profile_by_id(profile_id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")

        if actor.role.name != RoleEnum.ADMIN and actor.id != profile.user_id:
            raise UnauthorizedException("Only admin or owner can update profile")

        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key in _NULLABLE_PROFILE_FIELDS
        }
        if actor.role.name != RoleEnum.ADMIN and "is_approved" in changes:
            raise UnauthorizedException("Only admin can approve teacher profile")

        return await self.repository.update_profile(profile, **changes)

    async def list_profiles(self, limit: int, offset: int) -> tuple[list[TeacherProfile], int]:
        """List teacher profiles."""
        return await self.repository.list_profiles(limit=limit, offset=offset)

    async def get_teacher(self, teacher_id: UUID) -> TeacherProfile:
        """Return the profile of a teacher user or raise NotFound."""
        profile = await self.repository.get_profile_by_user_id(teacher_id)
        if profile is None:
            raise NotFoundException("Teacher not found")
        return profile


async def get_teachers_service(session: AsyncSession = Depends(get_db_session)) -> TeachersService:
    """Dependency provider for teachers service."""
    return TeachersService(TeachersRepository(session))
