"""Tests for UTC calendar-day helpers."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from loadcal.dates import add_months, day_count, heatmap_window, iter_days, parse_date, to_utc_date
from loadcal.errors import ValidationError


class TestParseDate:
    def test_valid(self):
        assert parse_date("2026-01-20") == date(2026, 1, 20)

    @pytest.mark.parametrize(
        "bad",
        [
            "2026-13-01",
            "20-01-2026",
            "2026/01/20",
            "",
            "tomorrow",
            "2026-02-30",
            "2026-1-5",
            " 2026-01-05 ",
            "2026-01-05\n",
        ],
    )
    def test_invalid(self, bad):
        with pytest.raises(ValidationError):
            parse_date(bad)

    def test_non_string(self):
        with pytest.raises(ValidationError):
            parse_date(20260120)


class TestToUtcDate:
    def test_aware_datetime_converted_to_utc_first(self):
        # 23:30 on the 19th at UTC-5 is already the 20th in UTC
        dt = datetime(2026, 1, 19, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert to_utc_date(dt) == date(2026, 1, 20)

    def test_time_of_day_dropped(self):
        assert to_utc_date(datetime(2026, 1, 20, 23, 59, tzinfo=UTC)) == date(2026, 1, 20)

    def test_string_with_time_part(self):
        assert to_utc_date("2026-01-20T10:00:00Z") == date(2026, 1, 20)

    def test_date_passthrough(self):
        assert to_utc_date(date(2026, 1, 20)) == date(2026, 1, 20)


class TestIterDays:
    def test_inclusive_across_year_boundary(self):
        days = list(iter_days(date(2025, 12, 30), date(2026, 1, 2)))
        assert days == [date(2025, 12, 30), date(2025, 12, 31), date(2026, 1, 1), date(2026, 1, 2)]

    def test_leap_day(self):
        days = list(iter_days(date(2028, 2, 28), date(2028, 3, 1)))
        assert date(2028, 2, 29) in days
        assert len(days) == 3

    def test_empty_when_reversed(self):
        assert list(iter_days(date(2026, 1, 2), date(2026, 1, 1))) == []
        assert day_count(date(2026, 1, 2), date(2026, 1, 1)) == 0


class TestMonths:
    def test_clamps_to_month_end(self):
        assert add_months(date(2026, 3, 31), -1) == date(2026, 2, 28)
        assert add_months(date(2026, 8, 31), 1) == date(2026, 9, 30)

    def test_window(self):
        start, end = heatmap_window(date(2026, 1, 15))
        assert start == date(2025, 12, 15)
        assert end == date(2026, 7, 15)
