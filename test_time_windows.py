"""Tests for period window resolution and date-bound parsing."""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.core.exceptions import ValidationError
from app.services.time_windows import (
    PERIOD_MONTHLY,
    PERIOD_WEEKLY,
    current_week_window,
    first_day_of_month,
    monday_of,
    month_window,
    parse_date_bound,
    parse_timestamp,
    resolve_window,
    week_window,
)

UTC = timezone.utc
SAO_PAULO = ZoneInfo("America/Sao_Paulo")
LAST_MS = time(23, 59, 59, 999000)


class TestWeekWindow:
    @pytest.mark.parametrize("year", [2019, 2020, 2023, 2024, 2025])
    @pytest.mark.parametrize("week", [1, 2, 10, 26, 52, 53])
    def test_always_monday_to_sunday(self, year, week):
        window = week_window(year, week, UTC)
        assert window.start.isoweekday() == 1
        assert window.end.isoweekday() == 7
        assert window.start.time() == time.min
        assert window.end.time() == LAST_MS
        assert window.end - window.start == timedelta(days=7) - timedelta(milliseconds=1)

    def test_week_one_of_2024_starts_on_new_year(self):
        window = week_window(2024, 1, UTC)
        assert window.start == datetime(2024, 1, 1, tzinfo=UTC)
        assert window.end == datetime(2024, 1, 7, 23, 59, 59, 999000, tzinfo=UTC)

    def test_sunday_anchor_belongs_to_previous_monday(self):
        # 2023-01-01 is a Sunday
        window = week_window(2023, 1, UTC)
        assert window.start.date() == date(2022, 12, 26)
        assert window.end.date() == date(2023, 1, 1)

    def test_week_two_of_2023(self):
        window = week_window(2023, 2, UTC)
        assert window.start.date() == date(2023, 1, 2)

    def test_bounds_carry_requested_zone(self):
        window = week_window(2024, 10, SAO_PAULO)
        assert window.start.utcoffset() == timedelta(hours=-3)


class TestCurrentWeekWindow:
    def test_sunday_maps_to_preceding_monday(self):
        now = datetime(2024, 1, 7, 15, 0, tzinfo=UTC)
        window = current_week_window(now, UTC)
        assert window.start.date() == date(2024, 1, 1)
        assert window.contains(now)

    def test_monday_is_its_own_start(self):
        now = datetime(2024, 1, 8, 0, 0, tzinfo=UTC)
        assert current_week_window(now, UTC).start == now

    def test_monday_of(self):
        assert monday_of(date(2024, 3, 13)) == date(2024, 3, 11)
        assert monday_of(date(2024, 3, 17)) == date(2024, 3, 11)


class TestMonthWindow:
    def test_leap_february(self):
        window = month_window(2024, 1, UTC)
        assert window.start == datetime(2024, 2, 1, tzinfo=UTC)
        assert window.end.date() == date(2024, 2, 29)
        assert window.end.time() == LAST_MS

    def test_december(self):
        window = month_window(2023, 11, UTC)
        assert window.start.date() == date(2023, 12, 1)
        assert window.end.date() == date(2023, 12, 31)

    def test_overflow_rolls_into_next_year(self):
        window = month_window(2023, 12, UTC)
        assert window.start.date() == date(2024, 1, 1)

    def test_negative_rolls_into_previous_year(self):
        window = month_window(2024, -1, UTC)
        assert window.start.date() == date(2023, 12, 1)
        assert window.end.date() == date(2023, 12, 31)


class TestResolveWindow:
    NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)

    def test_monthly_defaults_to_current_month(self):
        window = resolve_window(PERIOD_MONTHLY, now=self.NOW, tz=UTC)
        assert window.start.date() == date(2024, 3, 1)
        assert window.end.date() == date(2024, 3, 31)

    def test_monthly_month_is_zero_based(self):
        window = resolve_window(PERIOD_MONTHLY, year=2023, month=0, now=self.NOW, tz=UTC)
        assert window.start.date() == date(2023, 1, 1)

    def test_weekly_with_explicit_week(self):
        window = resolve_window(PERIOD_WEEKLY, year=2024, week=1, now=self.NOW, tz=UTC)
        assert window.start.date() == date(2024, 1, 1)

    def test_weekly_without_week_is_current_week(self):
        window = resolve_window(PERIOD_WEEKLY, now=self.NOW, tz=UTC)
        assert window.start.date() == date(2024, 3, 11)

    @pytest.mark.parametrize("kind", [None, "", "daily", "yearly"])
    def test_unknown_period_falls_back_to_weekly(self, kind):
        assert resolve_window(kind, now=self.NOW, tz=UTC) == resolve_window(
            PERIOD_WEEKLY, now=self.NOW, tz=UTC)

    def test_week_zero_is_the_week_before_week_one(self):
        window = resolve_window(PERIOD_WEEKLY, year=2024, week=0, now=self.NOW, tz=UTC)
        assert window.start == datetime(2023, 12, 25, tzinfo=UTC)
        assert window.end.date() == date(2023, 12, 31)

    def test_negative_week(self):
        window = resolve_window(PERIOD_WEEKLY, year=2024, week=-1, now=self.NOW, tz=UTC)
        assert window.start.date() == date(2023, 12, 18)

    @pytest.mark.parametrize("kwargs", [
        {"year": 10000, "week": 1},
        {"year": 2024, "week": 10**9},
        {"year": 2024, "week": -(10**9)},
    ])
    def test_weekly_out_of_range_is_client_error(self, kwargs):
        with pytest.raises(ValidationError):
            resolve_window(PERIOD_WEEKLY, now=self.NOW, tz=UTC, **kwargs)

    @pytest.mark.parametrize("kwargs", [
        {"year": 9999, "month": 12},
        {"year": 2024, "month": 10**12},
        {"year": -5, "month": 0},
    ])
    def test_monthly_out_of_range_is_client_error(self, kwargs):
        with pytest.raises(ValidationError):
            resolve_window(PERIOD_MONTHLY, now=self.NOW, tz=UTC, **kwargs)

    def test_first_day_of_month(self):
        assert first_day_of_month(self.NOW, UTC) == datetime(2024, 3, 1, tzinfo=UTC)


class TestParsing:
    def test_bare_start_date_is_local_midnight(self):
        assert parse_date_bound("2024-01-02", tz=SAO_PAULO) == datetime(
            2024, 1, 2, tzinfo=SAO_PAULO)

    def test_end_bound_covers_whole_day(self):
        bound = parse_date_bound("2024-01-02", end=True, tz=UTC)
        assert bound == datetime(2024, 1, 2, 23, 59, 59, 999000, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_bound_is_none(self, value):
        assert parse_date_bound(value) is None

    def test_zulu_suffix_is_utc(self):
        assert parse_timestamp("2024-01-02T10:00:00Z") == datetime(2024, 1, 2, 10, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["not-a-date", "2024-13-01", "02/01/2024"])
    def test_unparseable_raises(self, value):
        with pytest.raises(ValidationError):
            parse_date_bound(value)
