"""Scheduling API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from tutorbook.modules.identity.service import get_current_user
from tutorbook.modules.scheduling.schemas import BookableSlotRead
from tutorbook.modules.scheduling.service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/teachers", tags=["scheduling"])


@router.get("/{teacher_id}/slots", response_model=list[BookableSlotRead])
async def list_bookable_slots(
    teacher_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(get_current_user),
) -> list[BookableSlotRead]:
    """List bookable slots for the next lookahead window, excluding today."""
    quoted = await service.quote_bookable_slots(teacher_id)
    return [
        BookableSlotRead(
            teacher_id=slot.teacher_id,
            date=slot.date,
            start_time=slot.start_time,
            duration_minutes=slot.duration_minutes,
            starts_at=slot.starts_at,
            price=price,
        )
        for slot, price in quoted
    ]
