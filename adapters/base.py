"""
Base exchange calendar with generic bar stepping.

Subclasses describe *when* the market is open; BaseExchangeHours turns that
into the bar-stepping queries the insight algorithms need:
- end_of_bars: step N trading bars forward
- bars_between: count trading bars in an interval

Intraday bars count when any part of [previous, current) is open. Daily
bars advance one calendar day and count when they land on a trading date.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, tzinfo

from domain.timeutil import ONE_DAY


class BaseExchangeHours(ABC):
    """
    Base class for exchange calendars.

    Provides:
    - end_of_bars / bars_between built on the session queries below
    - Skipping of closed stretches in whole bars, so stepping minute bars
      across a weekend does not walk every closed minute
    """

    @property
    @abstractmethod
    def time_zone(self) -> tzinfo:
        """Exchange time zone."""
        ...

    @property
    @abstractmethod
    def regular_market_duration(self) -> timedelta:
        """Length of a regular trading session."""
        ...

    @abstractmethod
    def is_open(self, local_time: datetime) -> bool:
        """Whether the market is open at `local_time`."""
        ...

    @abstractmethod
    def is_open_between(self, start: datetime, end: datetime) -> bool:
        """Whether the market is open at any time in [start, end)."""
        ...

    @abstractmethod
    def is_date_open(self, day: date) -> bool:
        """Whether `day` is a trading date."""
        ...

    @abstractmethod
    def next_market_open(self, local_time: datetime) -> datetime:
        """First session open strictly after `local_time`."""
        ...

    def end_of_bars(self, start: datetime, bar_size: timedelta, bar_count: int) -> datetime:
        """End time after stepping `bar_count` trading bars of `bar_size` from `start`."""
        _check_bar_size(bar_size)

        current = start
        if bar_size >= ONE_DAY:
            stepped = 0
            while stepped < bar_count:
                current += ONE_DAY
                if self.is_date_open(current.date()):
                    stepped += 1
            return current

        stepped = 0
        while stepped < bar_count:
            current = self._skip_closed(current, bar_size)
            previous = current
            current = previous + bar_size
            if self.is_open_between(previous, current):
                stepped += 1
        return current

    def bars_between(self, start: datetime, end: datetime, bar_size: timedelta) -> int:
        """Number of trading bars of `bar_size` stepped from `start` without passing `end`."""
        _check_bar_size(bar_size)

        count = 0
        current = start
        if bar_size >= ONE_DAY:
            while current + ONE_DAY <= end:
                current += ONE_DAY
                if self.is_date_open(current.date()):
                    count += 1
            return count

        while True:
            current = self._skip_closed(current, bar_size, limit=end)
            if current + bar_size > end:
                return count
            previous = current
            current = previous + bar_size
            if self.is_open_between(previous, current):
                count += 1

    def _skip_closed(self, current: datetime, bar_size: timedelta, limit: datetime | None = None) -> datetime:
        """Advance over whole bars that end before the next open."""
        if self.is_open(current):
            return current

        target = self.next_market_open(current)
        if limit is not None and target > limit:
            target = limit
        steps = (target - current) // bar_size
        return current + bar_size * steps if steps > 0 else current


def _check_bar_size(bar_size: timedelta) -> None:
    if bar_size <= timedelta(0):
        raise ValueError(f"bar_size must be positive, got {bar_size}")
