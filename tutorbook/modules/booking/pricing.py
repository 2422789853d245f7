"""Lesson price calculation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from tutorbook.core.config import get_settings

settings = get_settings()

_MINUTES_PER_HOUR = Decimal(60)


def calculate_price(duration_minutes: int, hourly_rate: int | None = None) -> int:
    """Return `duration/60 * rate` rounded half-up to a whole currency unit.

    An unset rate (`None`) falls back to `settings.default_hourly_rate`.
    """
    rate = settings.default_hourly_rate if hourly_rate is None else hourly_rate
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    if rate <= 0:
        raise ValueError("hourly_rate must be positive")

    amount = Decimal(duration_minutes * rate) / _MINUTES_PER_HOUR
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
