"""
Exchange calendars.

Two concrete calendars for resolving insight periods:
1. AlwaysOpenExchangeHours - continuously open market (crypto, FX, tests)
2. SessionExchangeHours - one regular session per trading day, with
   holidays, early closes and late opens

Neither ships real holiday tables; holidays come from configuration.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from config.schema import ExchangeConfig

from .base import BaseExchangeHours

logger = logging.getLogger(__name__)

# Weekdays as ISO numbers (Monday = 1)
WEEKDAYS = frozenset({1, 2, 3, 4, 5})

# next_market_open gives up after this many days without a session
MAX_LOOKAHEAD_DAYS = 366 * 2


def _zone(time_zone: tzinfo | str) -> tzinfo:
    return ZoneInfo(time_zone) if isinstance(time_zone, str) else time_zone


class AlwaysOpenExchangeHours(BaseExchangeHours):
    """
    Calendar for a market that never closes.

    Every date is a trading date and a "session" lasts a whole day, so
    stepping any duration lands exactly that duration later.
    """

    def __init__(self, time_zone: tzinfo | str = timezone.utc):
        self._time_zone = _zone(time_zone)

    @property
    def time_zone(self) -> tzinfo:
        return self._time_zone

    @property
    def regular_market_duration(self) -> timedelta:
        return timedelta(days=1)

    def is_open(self, local_time: datetime) -> bool:
        return True

    def is_open_between(self, start: datetime, end: datetime) -> bool:
        return True

    def is_date_open(self, day: date) -> bool:
        return True

    def next_market_open(self, local_time: datetime) -> datetime:
        # every instant is open; the next one is a microsecond later
        return local_time + timedelta(microseconds=1)

    def __repr__(self) -> str:
        return f"AlwaysOpenExchangeHours({self._time_zone})"


class SessionExchangeHours(BaseExchangeHours):
    """
    Calendar with one regular session per trading day.

    Sessions are half-open intervals [open, close) in exchange-local time.
    Holidays close the whole day; early closes and late opens replace the
    regular close/open on the given dates.
    """

    def __init__(
        self,
        time_zone: tzinfo | str,
        market_open: time = time(9, 30),
        market_close: time = time(16, 0),
        trading_weekdays: Iterable[int] = WEEKDAYS,
        holidays: Iterable[date] = (),
        early_closes: Mapping[date, time] | None = None,
        late_opens: Mapping[date, time] | None = None,
    ):
        if market_open >= market_close:
            raise ValueError(f"market_open {market_open} must be before market_close {market_close}")

        weekdays = frozenset(trading_weekdays)
        if not weekdays:
            raise ValueError("at least one trading weekday is required")
        if not weekdays <= {1, 2, 3, 4, 5, 6, 7}:
            raise ValueError(f"trading weekdays must be ISO weekday numbers 1-7, got {sorted(weekdays)}")

        self._time_zone = _zone(time_zone)
        self.market_open = market_open
        self.market_close = market_close
        self.trading_weekdays = weekdays
        self.holidays = frozenset(holidays)
        self.early_closes = dict(early_closes or {})
        self.late_opens = dict(late_opens or {})

    @classmethod
    def from_config(cls, config: ExchangeConfig) -> "SessionExchangeHours":
        return cls(
            time_zone=config.timezone,
            market_open=config.market_open,
            market_close=config.market_close,
            trading_weekdays=config.trading_weekdays,
            holidays=config.holidays,
            early_closes=config.early_closes,
            late_opens=config.late_opens,
        )

    @classmethod
    def us_equity(cls, holidays: Iterable[date] = ()) -> "SessionExchangeHours":
        """New York regular hours, 09:30-16:00 Monday to Friday."""
        return cls("America/New_York", time(9, 30), time(16, 0), WEEKDAYS, holidays)

    @property
    def time_zone(self) -> tzinfo:
        return self._time_zone

    @property
    def regular_market_duration(self) -> timedelta:
        return datetime.combine(date.min, self.market_close) - datetime.combine(date.min, self.market_open)

    def session_bounds(self, day: date) -> tuple[datetime, datetime] | None:
        """(open, close) of the session on `day`, None when closed all day."""
        if not self.is_date_open(day):
            return None

        open_time = self.late_opens.get(day, self.market_open)
        close_time = self.early_closes.get(day, self.market_close)
        if open_time >= close_time:
            return None
        return datetime.combine(day, open_time), datetime.combine(day, close_time)

    def is_date_open(self, day: date) -> bool:
        return day.isoweekday() in self.trading_weekdays and day not in self.holidays

    def is_open(self, local_time: datetime) -> bool:
        bounds = self.session_bounds(local_time.date())
        return bounds is not None and bounds[0] <= local_time < bounds[1]

    def is_open_between(self, start: datetime, end: datetime) -> bool:
        day = start.date()
        while day <= end.date():
            bounds = self.session_bounds(day)
            if bounds and bounds[0] < end and bounds[1] > start:
                return True
            day += timedelta(days=1)
        return False

    def next_market_open(self, local_time: datetime) -> datetime:
        day = local_time.date()
        for _ in range(MAX_LOOKAHEAD_DAYS):
            bounds = self.session_bounds(day)
            if bounds and bounds[0] > local_time:
                return bounds[0]
            day += timedelta(days=1)
        raise ValueError(f"No market open within {MAX_LOOKAHEAD_DAYS} days after {local_time}")

    def __repr__(self) -> str:
        return (
            f"SessionExchangeHours({self._time_zone}, {self.market_open}-{self.market_close}, "
            f"weekdays={sorted(self.trading_weekdays)}, holidays={len(self.holidays)})"
        )


def exchange_hours_from_config(config: ExchangeConfig) -> BaseExchangeHours:
    """Build the calendar described by the exchange configuration."""
    if config.always_open:
        logger.debug(f"Using always-open calendar in {config.timezone}")
        return AlwaysOpenExchangeHours(config.timezone)
    logger.debug(f"Using session calendar in {config.timezone} with {len(config.holidays)} holiday(s)")
    return SessionExchangeHours.from_config(config)
