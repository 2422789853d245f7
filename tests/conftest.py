from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from tutorbook.core.enums import ACTIVE_BOOKING_STATUSES, BookingStatusEnum, RoleEnum
from tutorbook.core.locks import KeyedLockRegistry
from tutorbook.modules.availability.service import AvailabilityService
from tutorbook.modules.booking.service import BookingService
from tutorbook.modules.scheduling.service import SchedulingService


@dataclass
class FakeTeacherProfile:
    user_id: UUID
    hourly_rate: int | None = None
    display_name: str = "Teacher"


@dataclass
class FakeBooking:
    id: UUID
    student_id: UUID
    teacher_id: UUID
    date: datetime
    duration_minutes: int
    price: int
    status: BookingStatusEnum
    created_at: datetime
    subject_id: UUID | None = None
    notes: str | None = None
    meeting_link: str | None = None
    confirmed_at: datetime | None = None
    canceled_at: datetime | None = None
    expired_at: datetime | None = None
    updated_at: datetime | None = None


class FakeBookingRepository:
    """In-memory ledger that yields to the event loop like a real DB round-trip."""

    def __init__(self, bookings: dict[UUID, FakeBooking] | None = None) -> None:
        self._bookings: dict[UUID, FakeBooking] = bookings or {}
        self.save_calls = 0

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
    ) -> FakeBooking:
        await asyncio.sleep(0)
        booking = FakeBooking(
            id=uuid4(),
            student_id=student_id,
            teacher_id=teacher_id,
            date=date,
            duration_minutes=duration_minutes,
            price=price,
            status=BookingStatusEnum.PENDING_PAYMENT,
            created_at=created_at,
            subject_id=subject_id,
            notes=notes,
            updated_at=created_at,
        )
        self._bookings[booking.id] = booking
        return booking

    async def find_active_booking_at(self, teacher_id: UUID, date: datetime) -> FakeBooking | None:
        await asyncio.sleep(0)
        for booking in self._bookings.values():
            if (
                booking.teacher_id == teacher_id
                and booking.date == date
                and booking.status in ACTIVE_BOOKING_STATUSES
            ):
                return booking
        return None

    async def list_active_bookings(
        self,
        teacher_id: UUID,
        starts_from: datetime,
        starts_until: datetime,
    ) -> list[FakeBooking]:
        return sorted(
            (
                booking
                for booking in self._bookings.values()
                if booking.teacher_id == teacher_id
                and booking.status in ACTIVE_BOOKING_STATUSES
                and starts_from <= booking.date <= starts_until
            ),
            key=lambda booking: booking.date,
        )

    async def get_booking_by_id(self, booking_id: UUID, *, for_update: bool = False) -> FakeBooking | None:
        return self._bookings.get(booking_id)

    async def list_bookings(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[FakeBooking], int]:
        items = list(self._bookings.values())
        if role_name == RoleEnum.STUDENT:
            items = [booking for booking in items if booking.student_id == user_id]
        elif role_name == RoleEnum.TEACHER:
            items = [booking for booking in items if booking.teacher_id == user_id]
        items.sort(key=lambda booking: booking.date)
        return items[offset : offset + limit], len(items)

    async def find_stale_pending(self, created_before: datetime) -> list[FakeBooking]:
        return [
            booking
            for booking in self._bookings.values()
            if booking.status == BookingStatusEnum.PENDING_PAYMENT and booking.created_at < created_before
        ]

    async def save(self, booking: FakeBooking) -> FakeBooking:
        self._bookings[booking.id] = booking
        self.save_calls += 1
        return booking

    def add(self, booking: FakeBooking) -> FakeBooking:
        self._bookings[booking.id] = booking
        return booking

    def all(self) -> list[FakeBooking]:
        return list(self._bookings.values())

    def stored(self, booking_id: UUID) -> FakeBooking:
        return self._bookings[booking_id]


class SnapshotBookingRepository(FakeBookingRepository):
    """Ledger where every read and write copies the row, like separate DB sessions."""

    async def get_booking_by_id(self, booking_id: UUID, *, for_update: bool = False) -> FakeBooking | None:
        await asyncio.sleep(0)
        booking = self._bookings.get(booking_id)
        return None if booking is None else replace(booking)

    async def save(self, booking: FakeBooking) -> FakeBooking:
        await asyncio.sleep(0)
        await super().save(replace(booking))
        return booking


class FakeTeachersRepository:
    def __init__(self, profiles: list[FakeTeacherProfile] | None = None) -> None:
        self._profiles = {profile.user_id: profile for profile in profiles or []}

    async def get_profile_by_user_id(self, user_id: UUID) -> FakeTeacherProfile | None:
        return self._profiles.get(user_id)


class FakeAuditRepository:
    def __init__(self) -> None:
        self.events: list[dict] = []

    async def create_outbox_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
    ) -> None:
        self.events.append(
            {
                "aggregate_type": aggregate_type,
                "aggregate_id": aggregate_id,
                "event_type": event_type,
                "payload": payload,
            },
        )

    def event_types(self) -> list[str]:
        return [event["event_type"] for event in self.events]


class FakeAvailabilityRepository:
    def __init__(self, templates: dict[UUID, dict] | None = None) -> None:
        self._templates: dict[UUID, dict] = templates or {}
        self.replace_calls = 0

    async def get_by_teacher_id(self, teacher_id: UUID) -> SimpleNamespace | None:
        weekly_slots = self._templates.get(teacher_id)
        if weekly_slots is None:
            return None
        return SimpleNamespace(teacher_id=teacher_id, weekly_slots=weekly_slots)

    async def replace(self, teacher_id: UUID, weekly_slots: dict) -> SimpleNamespace:
        self.replace_calls += 1
        self._templates[teacher_id] = weekly_slots
        return SimpleNamespace(teacher_id=teacher_id, weekly_slots=weekly_slots)


def make_actor(user_id: UUID, role: RoleEnum = RoleEnum.STUDENT) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, role=SimpleNamespace(name=role))


@dataclass
class BookingEnv:
    service: BookingService
    bookings: FakeBookingRepository
    teachers: FakeTeachersRepository
    audit: FakeAuditRepository
    teacher: FakeTeacherProfile
    student_id: UUID = field(default_factory=uuid4)

    @property
    def student(self) -> SimpleNamespace:
        return make_actor(self.student_id, RoleEnum.STUDENT)

    @property
    def teacher_actor(self) -> SimpleNamespace:
        return make_actor(self.teacher.user_id, RoleEnum.TEACHER)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 19, 12, 0, tzinfo=UTC)


def _make_booking_env(bookings: FakeBookingRepository) -> BookingEnv:
    teacher = FakeTeacherProfile(user_id=uuid4())
    teachers = FakeTeachersRepository([teacher])
    audit = FakeAuditRepository()
    service = BookingService(
        booking_repository=bookings,
        teachers_repository=teachers,
        audit_repository=audit,
        locks=KeyedLockRegistry(),
    )
    return BookingEnv(service=service, bookings=bookings, teachers=teachers, audit=audit, teacher=teacher)


@pytest.fixture
def booking_env() -> BookingEnv:
    return _make_booking_env(FakeBookingRepository())


@pytest.fixture
def snapshot_env() -> BookingEnv:
    return _make_booking_env(SnapshotBookingRepository())


@pytest.fixture
def scheduling_env(booking_env: BookingEnv) -> SimpleNamespace:
    availability_repo = FakeAvailabilityRepository()
    availability = AvailabilityService(
        repository=availability_repo,
        teachers_repository=booking_env.teachers,
        locks=KeyedLockRegistry(),
    )
    service = SchedulingService(
        availability_service=availability,
        booking_repository=booking_env.bookings,
        teachers_repository=booking_env.teachers,
    )
    return SimpleNamespace(
        service=service,
        availability=availability,
        availability_repo=availability_repo,
        bookings=booking_env.bookings,
        teacher=booking_env.teacher,
    )


@pytest.fixture
def actor_factory():
    return make_actor
