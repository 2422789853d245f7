"""Availability API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from tutorbook.modules.availability.schemas import AvailabilityRead, AvailabilityTemplate, AvailabilityUpdate
from tutorbook.modules.availability.service import AvailabilityService, get_availability_service
from tutorbook.modules.identity.service import get_current_user

router = APIRouter(prefix="/teachers", tags=["availability"])


def _to_read(teacher_id: UUID, template: AvailabilityTemplate) -> AvailabilityRead:
    return AvailabilityRead(
        teacher_id=teacher_id,
        weekly_slots={day: list(slots) for day, slots in template.weekly_slots.items()},
    )


@router.get("/{teacher_id}/availability", response_model=AvailabilityRead)
async def get_availability(
    teacher_id: UUID,
    service: AvailabilityService = Depends(get_availability_service),
    current_user=Depends(get_current_user),
) -> AvailabilityRead:
    """Return the teacher's recurring weekly template."""
    template = await service.get_availability(teacher_id)
    return _to_read(teacher_id, template)


@router.put("/{teacher_id}/availability", response_model=AvailabilityRead)
async def set_availability(
    teacher_id: UUID,
    payload: AvailabilityUpdate,
    service: AvailabilityService = Depends(get_availability_service),
    current_user=Depends(get_current_user),
) -> AvailabilityRead:
    """Replace the teacher's weekly template wholesale."""
    template = await service.set_availability(teacher_id, payload.to_template(), current_user)
    return _to_read(teacher_id, template)
