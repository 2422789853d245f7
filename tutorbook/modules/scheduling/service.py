"""Scheduling business logic layer."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.config import get_settings
from tutorbook.core.database import get_db_session
from tutorbook.modules.availability.repository import AvailabilityRepository
from tutorbook.modules.availability.service import AvailabilityService
from tutorbook.modules.booking.pricing import calculate_price
from tutorbook.modules.booking.repository import BookingRepository
from tutorbook.modules.scheduling.collision import filter_bookable
from tutorbook.modules.scheduling.projection import BookingSlotCandidate, project_slots
from tutorbook.modules.teachers.models import TeacherProfile
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import NotFoundException
from tutorbook.shared.utils import ensure_utc, utc_now

settings = get_settings()


class SchedulingService:
    """Turn a teacher's weekly template into bookable dated slots."""

    def __init__(
        self,
        availability_service: AvailabilityService,
        booking_repository: BookingRepository,
        teachers_repository: TeachersRepository,
    ) -> None:
        self.availability_service = availability_service
        self.booking_repository = booking_repository
        self.teachers_repository = teachers_repository

    async def _get_teacher(self, teacher_id: UUID) -> TeacherProfile:
        teacher = await self.teachers_repository.get_profile_by_user_id(teacher_id)
        if teacher is None:
            raise NotFoundException("Teacher not found")
        return teacher

    async def _bookable_slots(self, teacher_id: UUID, now: datetime) -> list[BookingSlotCandidate]:
        template = await self.availability_service.get_availability(teacher_id)
        if template.is_empty():
            return []

        tolerance = timedelta(minutes=settings.slot_collision_tolerance_minutes)
        horizon_end = now + timedelta(days=settings.booking_lookahead_days + 1) + tolerance
        bookings = await self.booking_repository.list_active_bookings(teacher_id, now - tolerance, horizon_end)

        candidates = project_slots(
            teacher_id,
            template,
            now,
            horizon_days=settings.booking_lookahead_days,
            timezone=settings.schedule_timezone,
            default_duration_minutes=settings.default_slot_duration_minutes,
        )
        return list(filter_bookable(candidates, bookings, tolerance=tolerance))

    async def get_bookable_slots(self, teacher_id: UUID, now: datetime | None = None) -> list[BookingSlotCandidate]:
        """Projected candidates minus those taken by pending/confirmed bookings."""
        await self._get_teacher(teacher_id)
        return await self._bookable_slots(teacher_id, ensure_utc(now or utc_now()))

    async def quote_bookable_slots(
        self,
        teacher_id: UUID,
        now: datetime | None = None,
    ) -> list[tuple[BookingSlotCandidate, int]]:
        """Bookable slots paired with the price a booking would lock in now."""
        teacher = await self._get_teacher(teacher_id)
        slots = await self._bookable_slots(teacher_id, ensure_utc(now or utc_now()))
        return [(slot, calculate_price(slot.duration_minutes, teacher.hourly_rate)) for slot in slots]


async def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Dependency provider for scheduling service."""
    teachers_repository = TeachersRepository(session)
    return SchedulingService(
        availability_service=AvailabilityService(AvailabilityRepository(session), teachers_repository),
        booking_repository=BookingRepository(session),
        teachers_repository=teachers_repository,
    )
