"""
Trading calendar port.

The stepping algorithms only see this protocol, so they run against any
calendar: a real exchange schedule, an always-open synthetic one, or a test
double with a custom holiday set.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Protocol, runtime_checkable


@runtime_checkable
class ExchangeHours(Protocol):
    """
    Protocol for trading calendars.

    All datetimes are naive local wall-clock times in `time_zone`.
    Implementations must always terminate: stepping a finite number of bars
    has to reach an open session eventually.
    """

    @property
    def time_zone(self) -> tzinfo:
        """Exchange time zone, used for UTC <-> local conversion."""
        ...

    @property
    def regular_market_duration(self) -> timedelta:
        """Length of a regular trading session."""
        ...

    def is_open(self, local_time: datetime) -> bool:
        """Whether the market is open at `local_time`."""
        ...

    def next_market_open(self, local_time: datetime) -> datetime:
        """First session open strictly after `local_time`."""
        ...

    def end_of_bars(self, start: datetime, bar_size: timedelta, bar_count: int) -> datetime:
        """
        End time after stepping `bar_count` bars of `bar_size` from `start`,
        skipping non-trading time.
        """
        ...

    def bars_between(self, start: datetime, end: datetime, bar_size: timedelta) -> int:
        """Number of trading bars of `bar_size` that fit between `start` and `end`."""
        ...
