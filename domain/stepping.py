"""
Calendar-aware stepping between insight generation and close times.

Pure functions over an ExchangeHours calendar:
- compute_close_time_for_bars: generated time + N bars of a resolution
- compute_close_time: generated time + an arbitrary duration
- compute_period: best-effort inverse, two instants -> duration

Calendars only step in discrete bar sizes, so arbitrary durations are
approximated by a coarse pass followed by minute (and second) bars for the
remainder.
"""

import logging
from datetime import datetime, timedelta

from ports import ExchangeHours, InvalidArgumentError, ErrorCode

from .enums import Resolution
from .timeutil import (
    ONE_DAY,
    ONE_MINUTE,
    ONE_SECOND,
    convert_from_utc,
    convert_to_utc,
    higher_resolution_equivalent,
    normalize_resolution,
    resolution_to_timedelta,
)

logger = logging.getLogger(__name__)

# Hourly bars are left out: they misalign with non-round open/close times
_PERIOD_CANDIDATES = (ONE_DAY, ONE_MINUTE)


def compute_close_time_for_bars(
    exchange_hours: ExchangeHours,
    generated_time_utc: datetime,
    resolution: Resolution,
    bar_count: int,
) -> datetime:
    """
    Close time after `bar_count` trading bars of `resolution`.

    Args:
        exchange_hours: Calendar to step through
        generated_time_utc: Start instant (UTC)
        resolution: Bar granularity; ticks step as seconds, hours as 60 minutes
        bar_count: Number of bars, at least 1

    Returns:
        Close instant (UTC)

    Raises:
        InvalidArgumentError: If bar_count < 1
    """
    if bar_count < 1:
        raise InvalidArgumentError.bar_count(bar_count)

    resolution, bar_count = normalize_resolution(resolution, bar_count)
    bar_size = resolution_to_timedelta(resolution)

    time_zone = exchange_hours.time_zone
    start_local = convert_from_utc(generated_time_utc, time_zone)
    close_local = exchange_hours.end_of_bars(start_local, bar_size, bar_count)
    return convert_to_utc(close_local, time_zone)


def compute_close_time(
    exchange_hours: ExchangeHours,
    generated_time_utc: datetime,
    period: timedelta,
) -> datetime:
    """
    Close time for an arbitrary duration.

    Steps with the coarsest bar size that fits in `period`, then consumes
    the leftover as minute bars and finally as second bars. A daily
    leftover is read as a fraction of a trading day, so half a day means
    half a regular session rather than twelve wall-clock hours.

    Raises:
        InvalidArgumentError: If period < 1 second
    """
    if period < ONE_SECOND:
        raise InvalidArgumentError.period(period)

    resolution, _ = normalize_resolution(higher_resolution_equivalent(period), 1)
    bar_size = resolution_to_timedelta(resolution)
    bar_count = period // bar_size

    close_time_utc = compute_close_time_for_bars(
        exchange_hours, generated_time_utc, resolution, bar_count
    )
    if close_time_utc == generated_time_utc:
        logger.debug(
            f"No progress stepping {bar_count} x {resolution.value} from "
            f"{generated_time_utc}, falling back to one second"
        )
        return compute_close_time_for_bars(
            exchange_hours, generated_time_utc, Resolution.SECOND, 1
        )

    delta = period - bar_size * bar_count
    if not delta:
        return close_time_utc

    if resolution == Resolution.DAILY:
        delta = _fraction_of_session(delta, exchange_hours.regular_market_duration)

    minutes = delta // ONE_MINUTE
    if minutes > 0:
        logger.debug(f"Stepping {minutes} minute bar(s) for remainder {delta}")
        close_time_utc = compute_close_time_for_bars(
            exchange_hours, close_time_utc, Resolution.MINUTE, minutes
        )

    seconds = (delta - minutes * ONE_MINUTE) // ONE_SECOND
    if seconds > 0:
        close_time_utc = compute_close_time_for_bars(
            exchange_hours, close_time_utc, Resolution.SECOND, seconds
        )

    return close_time_utc


def compute_period(
    exchange_hours: ExchangeHours,
    generated_time_utc: datetime,
    close_time_utc: datetime,
) -> timedelta:
    """
    Estimate the nominal period between two instants.

    Same local date: the plain difference. Otherwise daily and minute bar
    counts are tried in turn; the first whose stepped end lands exactly on
    the close time wins, else the one with the smallest deviation (daily
    wins ties). Stepping is not exactly invertible, so this is best effort.

    Raises:
        InvalidArgumentError: If generated_time_utc > close_time_utc
    """
    if generated_time_utc > close_time_utc:
        raise InvalidArgumentError(
            "Insight close_time_utc must be greater than generated_time_utc.",
            code=ErrorCode.CLOSE_BEFORE_GENERATED,
            argument="close_time_utc",
            value=close_time_utc,
        )

    time_zone = exchange_hours.time_zone
    generated_local = convert_from_utc(generated_time_utc, time_zone)
    close_local = convert_from_utc(close_time_utc, time_zone)

    if generated_local.date() == close_local.date():
        return close_local - generated_local

    best: tuple[timedelta, timedelta, int] | None = None
    for bar_size in _PERIOD_CANDIDATES:
        count = exchange_hours.bars_between(generated_local, close_local, bar_size)
        stepped = exchange_hours.end_of_bars(generated_local, bar_size, count)
        deviation = abs(close_local - stepped)

        if not deviation:
            logger.debug(f"Exact period match: {count} bar(s) of {bar_size}")
            return bar_size * count

        if best is None or deviation < best[0]:
            best = (deviation, bar_size, count)

    deviation, bar_size, count = best
    logger.debug(f"Closest period: {count} bar(s) of {bar_size}, off by {deviation}")
    return bar_size * count


def _fraction_of_session(delta: timedelta, session: timedelta) -> timedelta:
    """Scale `delta` (a fraction of a calendar day) onto a trading session."""
    micros = delta // timedelta(microseconds=1)
    session_micros = session // timedelta(microseconds=1)
    day_micros = ONE_DAY // timedelta(microseconds=1)
    return timedelta(microseconds=micros * session_micros // day_micros)
