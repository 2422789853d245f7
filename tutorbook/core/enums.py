"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class WeekdayEnum(StrEnum):
    """Days of the week, Monday first as in `date.weekday()`."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_index(cls, index: int) -> "WeekdayEnum":
        """Map `date.weekday()` (0 = Monday) to the enum member."""
        return list(cls)[index]


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


ACTIVE_BOOKING_STATUSES = (BookingStatusEnum.PENDING_PAYMENT, BookingStatusEnum.CONFIRMED)


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
