"""Booking business logic layer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.config import get_settings
from tutorbook.core.database import get_db_session
from tutorbook.core.enums import BookingStatusEnum, RoleEnum
from tutorbook.core.locks import KeyedLockRegistry, booking_locks
from tutorbook.core.metrics import record_booking_transition
from tutorbook.modules.audit.repository import AuditRepository
from tutorbook.modules.booking.models import Booking
from tutorbook.modules.booking.pricing import calculate_price
from tutorbook.modules.booking.repository import BookingRepository
from tutorbook.modules.identity.models import User
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import (
    BookingExpiredException,
    InvalidStateException,
    NotFoundException,
    NotOwnerException,
    SlotUnavailableException,
    UnauthorizedException,
)
from tutorbook.shared.utils import ensure_utc, minutes_between, utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


class BookingService:
    """Booking lifecycle: pending_payment -> confirmed | cancelled | expired."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        teachers_repository: TeachersRepository,
        audit_repository: AuditRepository,
        locks: KeyedLockRegistry = booking_locks,
    ) -> None:
        self.booking_repository = booking_repository
        self.teachers_repository = teachers_repository
        self.audit_repository = audit_repository
        self.locks = locks

    def _validate_actor_access(self, booking: Booking, actor: User) -> None:
        if actor.role.name == RoleEnum.ADMIN:
            return
        if booking.student_id == actor.id or booking.teacher_id == actor.id:
            return
        raise NotOwnerException("You cannot manage this booking")

    def _payment_window_elapsed(self, booking: Booking, now: datetime) -> bool:
        return minutes_between(booking.created_at, now) > settings.booking_payment_window_minutes

    async def _publish(self, booking: Booking, event_type: str, **extra) -> None:
        payload = {
            "booking_id": str(booking.id),
            "student_id": str(booking.student_id),
            "teacher_id": str(booking.teacher_id),
            "date": booking.date.isoformat(),
        }
        payload.update(extra)
        await self.audit_repository.create_outbox_event(
            aggregate_type="booking",
            aggregate_id=str(booking.id),
            event_type=event_type,
            payload=payload,
        )

    async def _mark_expired(self, booking: Booking, now: datetime) -> None:
        booking.status = BookingStatusEnum.EXPIRED
        booking.expired_at = now
        await self.booking_repository.save(booking)
        await self._publish(booking, "booking.expired")
        record_booking_transition("expired")
        logger.info("Booking %s expired (created at %s)", booking.id, booking.created_at.isoformat())

    def _is_stale(self, booking: Booking, now: datetime) -> bool:
        return booking.status == BookingStatusEnum.PENDING_PAYMENT and self._payment_window_elapsed(booking, now)

    async def _expire_if_stale(self, booking: Booking, now: datetime) -> Booking:
        """Lazy expiry: applied whenever a pending booking is read.

        The row is re-read under the booking lock so a payment or cancel that
        committed after the first read is never overwritten.
        """
        if not self._is_stale(booking, now):
            return booking

        async with self.locks.hold(("booking", booking.id)):
            current = await self.booking_repository.get_booking_by_id(booking.id, for_update=True)
            if current is None:
                return booking
            if self._is_stale(current, now):
                await self._mark_expired(current, now)
        return current

    async def create_booking(
        self,
        student_id: UUID,
        teacher_id: UUID,
        date: datetime,
        duration_minutes: int,
        subject_id: UUID | None = None,
        notes: str | None = None,
        *,
        now: datetime | None = None,
    ) -> Booking:
        """Create a booking in PENDING_PAYMENT with the price locked in."""
        now = now or utc_now()
        if date.tzinfo is None:
            # Wall-clock slot times are read in the schedule timezone.
            date = date.replace(tzinfo=ZoneInfo(settings.schedule_timezone))
        starts_at = ensure_utc(date)

        teacher = await self.teachers_repository.get_profile_by_user_id(teacher_id)
        if teacher is None:
            raise NotFoundException("Teacher not found")

        price = calculate_price(duration_minutes, teacher.hourly_rate)

        async with self.locks.hold(("booking-slot", teacher_id, starts_at)):
            existing = await self.booking_repository.find_active_booking_at(teacher_id, starts_at)
            if existing is not None:
                record_booking_transition("create_rejected")
                logger.warning(
                    "Slot %s for teacher %s already held by booking %s",
                    starts_at.isoformat(),
                    teacher_id,
                    existing.id,
                )
                raise SlotUnavailableException("Slot already booked")

            try:
                booking = await self.booking_repository.create_booking(
                    student_id=student_id,
                    teacher_id=teacher_id,
                    date=starts_at,
                    duration_minutes=duration_minutes,
                    price=price,
                    created_at=now,
                    subject_id=subject_id,
                    notes=notes,
                )
            except IntegrityError as exc:
                record_booking_transition("create_rejected")
                raise SlotUnavailableException("Slot already booked") from exc

        await self._publish(booking, "booking.created", price=price)
        record_booking_transition("created")
        logger.info("Booking %s created for teacher %s at %s", booking.id, teacher_id, starts_at.isoformat())
        return booking

    async def pay_booking(self, booking_id: UUID, payer_id: UUID, now: datetime | None = None) -> Booking:
        """Confirm a pending booking. Payment itself is simulated."""
        now = now or utc_now()

        async with self.locks.hold(("booking", booking_id)):
            booking = await self.booking_repository.get_booking_by_id(booking_id, for_update=True)
            if booking is None:
                raise NotFoundException("Booking not found")
            if booking.student_id != payer_id:
                raise NotOwnerException("Booking does not belong to current student")

            if booking.status != BookingStatusEnum.PENDING_PAYMENT:
                record_booking_transition("pay_rejected")
                raise InvalidStateException(f"Booking is {booking.status}", current_status=booking.status)

            if self._payment_window_elapsed(booking, now):
                await self._mark_expired(booking, now)
                raise BookingExpiredException("Booking expired")

            booking.status = BookingStatusEnum.CONFIRMED
            booking.confirmed_at = now
            await self.booking_repository.save(booking)

        await self._publish(booking, "booking.confirmed", price=booking.price)
        record_booking_transition("confirmed")
        logger.info("Booking %s confirmed", booking.id)
        return booking

    async def cancel_booking(self, booking_id: UUID, actor: User, now: datetime | None = None) -> Booking:
        """Cancel a pending or confirmed booking.

        Repeating the call on a cancelled (or already expired) booking is a
        no-op that returns the booking unchanged.
        """
        now = now or utc_now()

        async with self.locks.hold(("booking", booking_id)):
            booking = await self.booking_repository.get_booking_by_id(booking_id, for_update=True)
            if booking is None:
                raise NotFoundException("Booking not found")

            self._validate_actor_access(booking, actor)

            if booking.status in (BookingStatusEnum.CANCELLED, BookingStatusEnum.EXPIRED):
                return booking

            booking.status = BookingStatusEnum.CANCELLED
            booking.canceled_at = now
            await self.booking_repository.save(booking)

        await self._publish(booking, "booking.cancelled", cancelled_by=str(actor.id))
        record_booking_transition("cancelled")
        logger.info("Booking %s cancelled by %s", booking.id, actor.id)
        return booking

    async def set_meeting_link(self, booking_id: UUID, meeting_link: str, actor: User) -> Booking:
        """Attach a meeting link; only the booking's teacher (or admin) may."""
        async with self.locks.hold(("booking", booking_id)):
            booking = await self.booking_repository.get_booking_by_id(booking_id, for_update=True)
            if booking is None:
                raise NotFoundException("Booking not found")
            if actor.role.name != RoleEnum.ADMIN and booking.teacher_id != actor.id:
                raise NotOwnerException("Only the booking teacher can set a meeting link")
            if booking.status in (BookingStatusEnum.CANCELLED, BookingStatusEnum.EXPIRED):
                raise InvalidStateException(f"Booking is {booking.status}", current_status=booking.status)

            booking.meeting_link = meeting_link
            await self.booking_repository.save(booking)

        await self._publish(booking, "booking.meeting_link.updated", meeting_link=meeting_link)
        return booking

    async def get_booking(self, booking_id: UUID, actor: User, now: datetime | None = None) -> Booking:
        """Return one booking visible to the actor."""
        booking = await self.booking_repository.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        self._validate_actor_access(booking, actor)
        return await self._expire_if_stale(booking, now or utc_now())

    async def list_bookings(
        self,
        actor: User,
        limit: int,
        offset: int,
        now: datetime | None = None,
    ) -> tuple[list[Booking], int]:
        """List bookings for actor according to role, earliest lesson first."""
        now = now or utc_now()
        items, total = await self.booking_repository.list_bookings(actor.id, actor.role.name, limit, offset)
        return [await self._expire_if_stale(booking, now) for booking in items], total

    async def expire_stale_bookings(self, actor: User, now: datetime | None = None) -> int:
        """Expire every overdue pending booking at once (operator action)."""
        if actor.role.name != RoleEnum.ADMIN:
            raise UnauthorizedException("Only admin can run booking expiration")

        now = now or utc_now()
        cutoff = now - timedelta(minutes=settings.booking_payment_window_minutes)
        stale = await self.booking_repository.find_stale_pending(cutoff)
        for booking in stale:
            await self._mark_expired(booking, now)
        if stale:
            logger.info("Expired %d overdue bookings", len(stale))
        return len(stale)


async def get_booking_service(session: AsyncSession = Depends(get_db_session)) -> BookingService:
    """Dependency provider for booking service."""
    return BookingService(
        booking_repository=BookingRepository(session),
        teachers_repository=TeachersRepository(session),
        audit_repository=AuditRepository(session),
    )
