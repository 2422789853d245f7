from __future__ import annotations

import pytest

import tutorbook.modules.booking.pricing as pricing_module
from tutorbook.modules.booking.pricing import calculate_price


@pytest.mark.parametrize(
    ("duration_minutes", "hourly_rate", "expected"),
    [
        (90, 2000, 3000),
        (45, 2000, 1500),
        (60, 2500, 2500),
        (50, 1000, 833),
        (1, 90, 2),
        (20, 2000, 667),
    ],
)
def test_price_is_rounded_to_nearest_unit(duration_minutes: int, hourly_rate: int, expected: int) -> None:
    assert calculate_price(duration_minutes, hourly_rate) == expected


def test_half_unit_rounds_up() -> None:
    # 30 min at 3 per hour = 1.5
    assert calculate_price(30, 3) == 2
    # 10 min at 3 per hour = 0.5
    assert calculate_price(10, 3) == 1


def test_unset_rate_uses_default() -> None:
    assert pricing_module.settings.default_hourly_rate == 2000
    assert calculate_price(60) == 2000
    assert calculate_price(90, None) == 3000


@pytest.mark.parametrize(("duration_minutes", "hourly_rate"), [(0, 2000), (-30, 2000), (60, 0), (60, -5)])
def test_non_positive_inputs_are_rejected(duration_minutes: int, hourly_rate: int) -> None:
    with pytest.raises(ValueError):
        calculate_price(duration_minutes, hourly_rate)


def test_unset_rate_follows_configured_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pricing_module.settings, "default_hourly_rate", 1200)

    assert calculate_price(60) == 1200
    assert calculate_price(45, None) == 900
    assert calculate_price(45, 2000) == 1500
