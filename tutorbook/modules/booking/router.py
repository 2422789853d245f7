"""Booking API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.booking.schemas import BookingCreate, BookingRead, ExpiredBookingsRead, MeetingLinkUpdate
from tutorbook.modules.booking.service import BookingService, get_booking_service
from tutorbook.modules.identity.service import get_current_user, require_roles
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/booking", tags=["booking"])


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> BookingRead:
    """Create booking in PENDING_PAYMENT state."""
    booking = await service.create_booking(
        student_id=current_user.id,
        teacher_id=payload.teacher_id,
        date=payload.date,
        duration_minutes=payload.duration_minutes,
        subject_id=payload.subject_id,
        notes=payload.notes,
    )
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/pay", response_model=BookingRead)
async def pay_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> BookingRead:
    """Confirm booking by (simulated) payment within the payment window."""
    booking = await service.pay_booking(booking_id, current_user.id)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Cancel booking as its student, its teacher or an admin."""
    booking = await service.cancel_booking(booking_id, current_user)
    return BookingRead.model_validate(booking)


@router.put("/{booking_id}/meeting-link", response_model=BookingRead)
async def set_meeting_link(
    booking_id: UUID,
    payload: MeetingLinkUpdate,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Attach meeting link to booking."""
    booking = await service.set_meeting_link(booking_id, payload.meeting_link, current_user)
    return BookingRead.model_validate(booking)


@router.post("/expire", response_model=ExpiredBookingsRead)
async def expire_stale_bookings(
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> ExpiredBookingsRead:
    """Expire overdue pending bookings (admin task endpoint)."""
    return ExpiredBookingsRead(expired=await service.expire_stale_bookings(current_user))


@router.get("/my", response_model=Page[BookingRead])
async def list_my_bookings(
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> Page[BookingRead]:
    """List bookings for current user."""
    items, total = await service.list_bookings(current_user, pagination.limit, pagination.offset)
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Return single booking."""
    booking = await service.get_booking(booking_id, current_user)
    return BookingRead.model_validate(booking)
