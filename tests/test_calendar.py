"""
Tests for the exchange calendars.

Tests cover:
- Session queries (open, bounds, next open) with special days
- Generic bar stepping and counting in BaseExchangeHours
- Building calendars from configuration
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from adapters import (
    AlwaysOpenExchangeHours,
    BaseExchangeHours,
    SessionExchangeHours,
    exchange_hours_from_config,
)
from config import ExchangeConfig
from ports import ExchangeHours


# ============================================================================
# Protocol conformance
# ============================================================================


class TestProtocol:
    """Concrete calendars satisfy the ExchangeHours port."""

    def test_always_open(self, always_open):
        assert isinstance(always_open, ExchangeHours)
        assert isinstance(always_open, BaseExchangeHours)

    def test_session(self, us_equity):
        assert isinstance(us_equity, ExchangeHours)


# ============================================================================
# Always open
# ============================================================================


class TestAlwaysOpen:
    """A market that never closes."""

    def test_defaults_to_utc(self, always_open):
        assert always_open.time_zone == timezone.utc
        assert always_open.regular_market_duration == timedelta(days=1)

    def test_zone_name(self):
        assert AlwaysOpenExchangeHours("Europe/London").time_zone == ZoneInfo("Europe/London")

    def test_everything_open(self, always_open):
        saturday = datetime(2020, 1, 4, 3, 0)
        assert always_open.is_open(saturday)
        assert always_open.is_date_open(saturday.date())
        assert always_open.next_market_open(saturday) == saturday + timedelta(microseconds=1)

    def test_next_open_strictly_after(self, always_open):
        start = datetime(2020, 1, 4, 3, 0)
        following = always_open.next_market_open(start)

        assert following > start
        assert always_open.next_market_open(following) > following

    def test_end_of_bars_is_plain_addition(self, always_open):
        start = datetime(2020, 1, 4, 3, 0)
        assert always_open.end_of_bars(start, timedelta(minutes=1), 90) == start + timedelta(minutes=90)
        assert always_open.end_of_bars(start, timedelta(days=1), 2) == start + timedelta(days=2)

    def test_bars_between(self, always_open):
        start = datetime(2020, 1, 4, 3, 0)
        assert always_open.bars_between(start, start + timedelta(minutes=90, seconds=30), timedelta(minutes=1)) == 90


# ============================================================================
# Session calendar
# ============================================================================


class TestSessionQueries:
    """Session bounds and open checks."""

    def test_regular_market_duration(self, us_equity):
        assert us_equity.regular_market_duration == timedelta(hours=6, minutes=30)

    def test_session_is_half_open(self, us_equity):
        assert not us_equity.is_open(datetime(2020, 1, 6, 9, 29, 59))
        assert us_equity.is_open(datetime(2020, 1, 6, 9, 30))
        assert us_equity.is_open(datetime(2020, 1, 6, 15, 59, 59))
        assert not us_equity.is_open(datetime(2020, 1, 6, 16, 0))

    def test_weekend_closed(self, us_equity):
        assert not us_equity.is_date_open(date(2020, 1, 4))
        assert not us_equity.is_open(datetime(2020, 1, 5, 12, 0))
        assert us_equity.session_bounds(date(2020, 1, 4)) is None

    def test_special_days(self, us_equity_special_days):
        calendar = us_equity_special_days

        assert calendar.session_bounds(date(2020, 1, 6)) is None
        assert calendar.session_bounds(date(2020, 1, 3)) == (
            datetime(2020, 1, 3, 9, 30), datetime(2020, 1, 3, 13, 0)
        )
        assert calendar.session_bounds(date(2020, 1, 7)) == (
            datetime(2020, 1, 7, 11, 0), datetime(2020, 1, 7, 16, 0)
        )
        assert not calendar.is_open(datetime(2020, 1, 3, 14, 0))
        assert not calendar.is_open(datetime(2020, 1, 7, 10, 0))

    def test_is_open_between(self, us_equity):
        assert us_equity.is_open_between(datetime(2020, 1, 6, 9, 0), datetime(2020, 1, 6, 9, 31))
        assert not us_equity.is_open_between(datetime(2020, 1, 6, 9, 0), datetime(2020, 1, 6, 9, 30))
        assert not us_equity.is_open_between(datetime(2020, 1, 6, 16, 0), datetime(2020, 1, 7, 9, 30))

    def test_next_market_open_is_strictly_after(self, us_equity):
        assert us_equity.next_market_open(datetime(2020, 1, 6, 8, 0)) == datetime(2020, 1, 6, 9, 30)
        assert us_equity.next_market_open(datetime(2020, 1, 6, 9, 30)) == datetime(2020, 1, 7, 9, 30)
        assert us_equity.next_market_open(datetime(2020, 1, 3, 16, 0)) == datetime(2020, 1, 6, 9, 30)

    def test_next_market_open_skips_special_days(self, us_equity_special_days):
        after_early_close = datetime(2020, 1, 3, 13, 0)
        assert us_equity_special_days.next_market_open(after_early_close) == datetime(2020, 1, 7, 11, 0)

    def test_next_market_open_gives_up(self):
        mondays = [date(2020, 1, 6) + timedelta(weeks=n) for n in range(200)]
        calendar = SessionExchangeHours("UTC", trading_weekdays=[1], holidays=mondays)

        with pytest.raises(ValueError):
            calendar.next_market_open(datetime(2020, 1, 1))


class TestSessionValidation:
    """Rejected session definitions."""

    def test_open_after_close(self):
        with pytest.raises(ValueError):
            SessionExchangeHours("UTC", market_open=time(16, 0), market_close=time(9, 30))

    def test_no_weekdays(self):
        with pytest.raises(ValueError):
            SessionExchangeHours("UTC", trading_weekdays=[])

    def test_bad_weekday(self):
        with pytest.raises(ValueError):
            SessionExchangeHours("UTC", trading_weekdays=[0, 1])


# ============================================================================
# Bar stepping
# ============================================================================


class TestBarStepping:
    """end_of_bars / bars_between on a session calendar."""

    def test_partial_first_bar_counts(self, us_equity):
        """A bar straddling the open counts, so the close lands mid-minute."""
        start = datetime(2020, 1, 6, 9, 29, 30)
        assert us_equity.end_of_bars(start, timedelta(minutes=1), 1) == datetime(2020, 1, 6, 9, 30, 30)

    def test_bars_across_weekend(self, us_equity):
        start = datetime(2020, 1, 3, 15, 59)
        assert us_equity.end_of_bars(start, timedelta(minutes=1), 2) == datetime(2020, 1, 6, 9, 31)

    def test_daily_bars_count_trading_dates(self, us_equity):
        start = datetime(2020, 1, 3, 10, 0)
        assert us_equity.end_of_bars(start, timedelta(days=1), 1) == datetime(2020, 1, 6, 10, 0)
        assert us_equity.bars_between(start, datetime(2020, 1, 8, 10, 0), timedelta(days=1)) == 3

    def test_bars_between_across_weekend(self, us_equity):
        start = datetime(2020, 1, 3, 15, 59)
        assert us_equity.bars_between(start, datetime(2020, 1, 6, 9, 31), timedelta(minutes=1)) == 2

    def test_bars_between_ends_before_partial_bar(self, us_equity):
        start = datetime(2020, 1, 6, 10, 0)
        assert us_equity.bars_between(start, datetime(2020, 1, 6, 10, 4, 59), timedelta(minutes=1)) == 4

    def test_bars_between_closed_interval(self, us_equity):
        assert us_equity.bars_between(
            datetime(2020, 1, 4, 10, 0), datetime(2020, 1, 5, 10, 0), timedelta(minutes=1)
        ) == 0

    def test_zero_bar_size_rejected(self, us_equity):
        with pytest.raises(ValueError):
            us_equity.end_of_bars(datetime(2020, 1, 6, 10, 0), timedelta(0), 1)

    @pytest.mark.parametrize("bars", [1, 59, 390, 391, 1200])
    def test_counting_inverts_stepping(self, us_equity, bars):
        start = datetime(2020, 1, 6, 10, 0)
        end = us_equity.end_of_bars(start, timedelta(minutes=1), bars)
        assert us_equity.bars_between(start, end, timedelta(minutes=1)) == bars


# ============================================================================
# Configuration
# ============================================================================


class TestFromConfig:
    """Calendars built from ExchangeConfig."""

    def test_always_open(self):
        calendar = exchange_hours_from_config(ExchangeConfig(always_open=True, timezone="UTC"))

        assert isinstance(calendar, AlwaysOpenExchangeHours)
        assert calendar.time_zone == ZoneInfo("UTC")

    def test_session(self):
        config = ExchangeConfig(
            timezone="Europe/London",
            market_open=time(8, 0),
            market_close=time(16, 30),
            holidays=[date(2020, 1, 1)],
            early_closes={date(2019, 12, 31): time(12, 30)},
        )
        calendar = exchange_hours_from_config(config)

        assert isinstance(calendar, SessionExchangeHours)
        assert calendar.time_zone == ZoneInfo("Europe/London")
        assert calendar.regular_market_duration == timedelta(hours=8, minutes=30)
        assert not calendar.is_date_open(date(2020, 1, 1))
        assert calendar.session_bounds(date(2019, 12, 31))[1] == datetime(2019, 12, 31, 12, 30)

    def test_repr(self, us_equity):
        assert repr(us_equity).startswith("SessionExchangeHours(America/New_York, 09:30:00-16:00:00")
