"""Booking repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.enums import ACTIVE_BOOKING_STATUSES, BookingStatusEnum, RoleEnum
from tutorbook.modules.booking.models import Booking


class BookingRepository:
    """DB operations for the booking ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_booking(
        self,
        student_id: UUID,
        teacher_id: UUID,
        date: datetime,
        duration_minutes: int,
        price: int,
        created_at: datetime,
        subject_id: UUID | None = None,
        notes: str | None = None,
    ) -> Booking:
        """Insert a pending booking.

        Runs in a savepoint so a unique-index violation (another process
        took the slot) surfaces as IntegrityError without poisoning the
        request session.
        """
        booking = Booking(
            student_id=student_id,
            teacher_id=teacher_id,
            subject_id=subject_id,
            date=date,
            duration_minutes=duration_minutes,
            notes=notes,
            price=price,
            status=BookingStatusEnum.PENDING_PAYMENT,
            created_at=created_at,
            updated_at=created_at,
        )
        async with self.session.begin_nested():
            self.session.add(booking)
            await self.session.flush()
        return booking

    async def find_active_booking_at(self, teacher_id: UUID, date: datetime) -> Booking | None:
        stmt = select(Booking).where(
            Booking.teacher_id == teacher_id,
            Booking.date == date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        return await self.session.scalar(stmt.limit(1))

    async def list_active_bookings(
        self,
        teacher_id: UUID,
        starts_from: datetime,
        starts_until: datetime,
    ) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(
                Booking.teacher_id == teacher_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.date >= starts_from,
                Booking.date <= starts_until,
            )
            .order_by(Booking.date.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def get_booking_by_id(self, booking_id: UUID, *, for_update: bool = False) -> Booking | None:
        stmt = select(Booking).where(Booking.id == booking_id)
        if for_update:
            # Refresh an already-loaded instance with the locked row.
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def list_bookings(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        base_stmt: Select[tuple[Booking]] = select(Booking)

        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(Booking.student_id == user_id)
        elif role_name == RoleEnum.TEACHER:
            base_stmt = base_stmt.where(Booking.teacher_id == user_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Booking.date.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def find_stale_pending(self, created_before: datetime) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.status == BookingStatusEnum.PENDING_PAYMENT,
            Booking.created_at < created_before,
        )
        return list((await self.session.scalars(stmt.with_for_update(skip_locked=True))).all())

    async def save(self, booking: Booking) -> Booking:
        await self.session.flush()
        return booking
