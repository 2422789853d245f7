from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from tutorbook.core.enums import BookingStatusEnum
from tutorbook.core.locks import KeyedLockRegistry
from tutorbook.shared.exceptions import SlotUnavailableException
from tests.conftest import BookingEnv


@pytest.mark.asyncio
async def test_simultaneous_creates_for_same_slot_admit_exactly_one(
    booking_env: BookingEnv,
    fixed_now: datetime,
) -> None:
    starts_at = fixed_now + timedelta(days=2)

    results = await asyncio.gather(
        *(
            booking_env.service.create_booking(
                student_id=uuid4(),
                teacher_id=booking_env.teacher.user_id,
                date=starts_at,
                duration_minutes=60,
                now=fixed_now,
            )
            for _ in range(5)
        ),
        return_exceptions=True,
    )

    created = [result for result in results if not isinstance(result, Exception)]
    rejected = [result for result in results if isinstance(result, SlotUnavailableException)]
    assert len(created) == 1
    assert len(rejected) == 4
    assert [booking.status for booking in booking_env.bookings.all()] == [BookingStatusEnum.PENDING_PAYMENT]


@pytest.mark.asyncio
async def test_simultaneous_creates_for_different_slots_all_succeed(
    booking_env: BookingEnv,
    fixed_now: datetime,
) -> None:
    results = await asyncio.gather(
        *(
            booking_env.service.create_booking(
                student_id=booking_env.student_id,
                teacher_id=booking_env.teacher.user_id,
                date=fixed_now + timedelta(days=2, hours=offset),
                duration_minutes=60,
                now=fixed_now,
            )
            for offset in range(3)
        ),
    )

    assert len({booking.id for booking in results}) == 3


@pytest.mark.asyncio
async def test_pay_and_cancel_race_leaves_one_terminal_state(snapshot_env: BookingEnv, fixed_now: datetime) -> None:
    booking = await snapshot_env.service.create_booking(
        student_id=snapshot_env.student_id,
        teacher_id=snapshot_env.teacher.user_id,
        date=fixed_now + timedelta(days=2),
        duration_minutes=60,
        now=fixed_now,
    )

    pay, cancel = await asyncio.gather(
        snapshot_env.service.pay_booking(booking.id, snapshot_env.student_id, now=fixed_now),
        snapshot_env.service.cancel_booking(booking.id, snapshot_env.teacher_actor, now=fixed_now),
        return_exceptions=True,
    )

    # pay holds the lock first, so the cancel sees a confirmed booking.
    assert pay.status == BookingStatusEnum.CONFIRMED
    assert cancel.status == BookingStatusEnum.CANCELLED
    stored = snapshot_env.bookings.stored(booking.id)
    assert stored.status == BookingStatusEnum.CANCELLED
    assert stored.confirmed_at == fixed_now
    assert snapshot_env.audit.event_types() == ["booking.created", "booking.confirmed", "booking.cancelled"]


@pytest.mark.asyncio
async def test_read_at_window_end_does_not_expire_concurrent_payment(
    snapshot_env: BookingEnv,
    fixed_now: datetime,
) -> None:
    booking = await snapshot_env.service.create_booking(
        student_id=snapshot_env.student_id,
        teacher_id=snapshot_env.teacher.user_id,
        date=fixed_now + timedelta(days=2),
        duration_minutes=60,
        now=fixed_now,
    )

    paid, seen = await asyncio.gather(
        snapshot_env.service.pay_booking(
            booking.id,
            snapshot_env.student_id,
            now=fixed_now + timedelta(minutes=14, seconds=59),
        ),
        snapshot_env.service.get_booking(
            booking.id,
            snapshot_env.student,
            now=fixed_now + timedelta(minutes=15, seconds=1),
        ),
    )

    assert paid.status == BookingStatusEnum.CONFIRMED
    assert seen.status == BookingStatusEnum.CONFIRMED
    assert snapshot_env.bookings.stored(booking.id).status == BookingStatusEnum.CONFIRMED
    assert "booking.expired" not in snapshot_env.audit.event_types()


@pytest.mark.asyncio
async def test_listing_does_not_expire_concurrently_cancelled_booking(
    snapshot_env: BookingEnv,
    fixed_now: datetime,
) -> None:
    booking = await snapshot_env.service.create_booking(
        student_id=snapshot_env.student_id,
        teacher_id=snapshot_env.teacher.user_id,
        date=fixed_now + timedelta(days=2),
        duration_minutes=60,
        now=fixed_now,
    )
    late = fixed_now + timedelta(minutes=20)

    cancelled, (items, total) = await asyncio.gather(
        snapshot_env.service.cancel_booking(booking.id, snapshot_env.teacher_actor, now=late),
        snapshot_env.service.list_bookings(snapshot_env.student, limit=20, offset=0, now=late),
    )

    assert cancelled.status == BookingStatusEnum.CANCELLED
    assert total == 1
    assert items[0].status == BookingStatusEnum.CANCELLED
    assert snapshot_env.bookings.stored(booking.id).status == BookingStatusEnum.CANCELLED
    assert snapshot_env.audit.event_types() == ["booking.created", "booking.cancelled"]


@pytest.mark.asyncio
async def test_read_after_window_still_expires_pending_booking(snapshot_env: BookingEnv, fixed_now: datetime) -> None:
    booking = await snapshot_env.service.create_booking(
        student_id=snapshot_env.student_id,
        teacher_id=snapshot_env.teacher.user_id,
        date=fixed_now + timedelta(days=2),
        duration_minutes=60,
        now=fixed_now,
    )

    seen = await snapshot_env.service.get_booking(booking.id, snapshot_env.student, now=fixed_now + timedelta(minutes=16))

    assert seen.status == BookingStatusEnum.EXPIRED
    assert snapshot_env.bookings.stored(booking.id).status == BookingStatusEnum.EXPIRED


@pytest.mark.asyncio
async def test_lock_registry_serializes_holders_and_forgets_released_keys() -> None:
    registry = KeyedLockRegistry()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with registry.hold("slot"):
            order.append(f"{name}:enter")
            await asyncio.sleep(0)
            order.append(f"{name}:exit")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a:enter", "a:exit", "b:enter", "b:exit"]
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_lock_registry_releases_key_when_block_raises() -> None:
    registry = KeyedLockRegistry()

    with pytest.raises(RuntimeError):
        async with registry.hold("slot"):
            raise RuntimeError("boom")

    assert len(registry) == 0
    async with registry.hold("slot"):
        assert len(registry) == 1
