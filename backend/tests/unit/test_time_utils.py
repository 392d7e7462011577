"""Unit tests for date and time helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from pension_notifier.utils.time_utils import add_months, local_today, parse_hhmm, to_utc_naive


class TestParseHHMM:
    @pytest.mark.parametrize(
        "value,expected",
        [("00:00", 0), ("08:00", 480), ("22:00", 1320), ("23:59", 1439), (" 9:05 ", 545)],
    )
    def test_valid(self, value: str, expected: int) -> None:
        assert parse_hhmm(value) == expected

    @pytest.mark.parametrize("value", ["", "24:00", "12:60", "noon", "1:2:3"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_hhmm(value)


class TestAddMonths:
    def test_simple(self) -> None:
        assert add_months(date(2024, 1, 15), 6) == date(2024, 7, 15)

    def test_year_rollover(self) -> None:
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_leap_day_clamped(self) -> None:
        assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)

    def test_two_years(self) -> None:
        assert add_months(date(2024, 5, 31), 24) == date(2026, 5, 31)


class TestToUtcNaive:
    def test_naive_unchanged(self) -> None:
        value = datetime(2024, 6, 1, 9, 0)
        assert to_utc_naive(value) == value

    def test_aware_converted(self) -> None:
        value = datetime(2024, 6, 1, 9, 0, tzinfo=timezone(timedelta(hours=-6)))
        assert to_utc_naive(value) == datetime(2024, 6, 1, 15, 0)


def test_local_today_follows_zone() -> None:
    # UTC+14 and UTC-11 are always one or two calendar days apart
    ahead = local_today("Pacific/Kiritimati")
    behind = local_today("Pacific/Pago_Pago")
    assert ahead - behind in (timedelta(days=1), timedelta(days=2))
