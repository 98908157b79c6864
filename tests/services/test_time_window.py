"""
Time Window Tests
=================

Local (+09:00) calendar helpers: instant -> date conversion, month and
week bounds, and the guards that keep dates and instants apart.
"""

from datetime import date, datetime, timezone

import pytest

from services.activity.time_window import (
    days_between,
    format_local_date,
    iter_local_dates,
    local_date_of_days_ago,
    local_day_start_utc,
    local_month_bounds,
    local_today,
    local_week_bounds,
    parse_local_date,
    to_local_date,
)


class TestToLocalDate:
    """Absolute instants map to the +09:00 calendar date."""

    def test_late_utc_evening_is_next_local_day(self):
        assert to_local_date(datetime(2024, 3, 1, 16, 30)) == date(2024, 3, 2)

    def test_before_local_midnight_stays_same_day(self):
        assert to_local_date(datetime(2024, 3, 1, 14, 59, 59)) == date(2024, 3, 1)

    def test_aware_instant(self):
        instant = datetime(2024, 3, 1, 16, 30, tzinfo=timezone.utc)
        assert to_local_date(instant) == date(2024, 3, 2)

    def test_rejects_plain_date(self):
        with pytest.raises(TypeError):
            to_local_date(date(2024, 3, 1))


class TestLocalClock:
    """Today and N-days-ago follow the local calendar, not the host clock."""

    def test_local_today_crosses_midnight(self):
        assert local_today(datetime(2024, 3, 1, 16, 30)) == date(2024, 3, 2)

    def test_local_date_of_days_ago(self):
        assert local_date_of_days_ago(1, datetime(2024, 3, 1, 16, 30)) == date(2024, 3, 1)
        assert local_date_of_days_ago(30, datetime(2024, 3, 15, 3, 0)) == date(2024, 2, 14)

    def test_local_day_start_utc(self):
        assert local_day_start_utc(date(2025, 1, 20)) == datetime(2025, 1, 19, 15, 0)

    def test_local_day_start_utc_rejects_instant(self):
        with pytest.raises(TypeError):
            local_day_start_utc(datetime(2025, 1, 20))


class TestMonthAndWeekBounds:
    """Calendar month and 7-day window boundaries."""

    def test_current_month(self):
        assert local_month_bounds(0, date(2024, 3, 15)) == (date(2024, 3, 1), date(2024, 4, 1))

    def test_month_across_year_boundary(self):
        assert local_month_bounds(3, date(2024, 2, 10)) == (date(2023, 11, 1), date(2023, 12, 1))

    def test_december_end_is_next_january(self):
        assert local_month_bounds(0, date(2023, 12, 31)) == (date(2023, 12, 1), date(2024, 1, 1))

    def test_week_bounds_follow_anchor_weekday(self):
        # 2024-01-03 is a Wednesday; windows are not calendar-week aligned
        assert local_week_bounds(0, date(2024, 1, 3)) == (date(2024, 1, 3), date(2024, 1, 10))
        assert local_week_bounds(2, date(2024, 1, 3)) == (date(2024, 1, 17), date(2024, 1, 24))

    def test_month_bounds_reject_instant_anchor(self):
        with pytest.raises(TypeError):
            local_month_bounds(0, datetime(2024, 3, 15))


class TestDateHelpers:
    """Iteration, spans and string formatting."""

    def test_iter_local_dates_inclusive(self):
        days = list(iter_local_dates(date(2024, 2, 27), date(2024, 3, 1)))
        assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

    def test_iter_local_dates_empty_when_reversed(self):
        assert list(iter_local_dates(date(2024, 3, 2), date(2024, 3, 1))) == []

    def test_days_between(self):
        assert days_between(date(2024, 1, 1), date(2024, 1, 31)) == 30
        assert days_between(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_parse_and_format(self):
        assert parse_local_date("2024-03-02") == date(2024, 3, 2)
        assert format_local_date(date(2024, 3, 2)) == "2024-03-02"

    def test_parse_rejects_malformed(self):
        with pytest.raises(ValueError):
            parse_local_date("2024/03/02")

    def test_format_rejects_instant(self):
        with pytest.raises(TypeError):
            format_local_date(datetime(2024, 3, 2, 10, 0))
