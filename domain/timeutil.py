"""
Time constants and conversions shared by the stepping algorithms.

Conventions:
- UTC instants are naive datetimes with UTC semantics.
- Local times are naive wall-clock datetimes in an exchange time zone.
"""

from datetime import datetime, timedelta, timezone, tzinfo

from .enums import Resolution


ONE_SECOND = timedelta(seconds=1)
ONE_MINUTE = timedelta(minutes=1)
ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(days=1)

# Sentinels for open-ended insights
END_OF_TIME = datetime(2050, 12, 31)
END_OF_TIME_PERIOD = END_OF_TIME - datetime.min

UNIX_EPOCH = datetime(1970, 1, 1)

_RESOLUTION_SPANS = {
    Resolution.TICK: timedelta(0),
    Resolution.SECOND: ONE_SECOND,
    Resolution.MINUTE: ONE_MINUTE,
    Resolution.HOUR: ONE_HOUR,
    Resolution.DAILY: ONE_DAY,
}


def resolution_to_timedelta(resolution: Resolution) -> timedelta:
    """Bar size for a resolution (zero for ticks)."""
    return _RESOLUTION_SPANS[resolution]


def higher_resolution_equivalent(span: timedelta) -> Resolution:
    """
    Coarsest standard resolution whose bar size does not exceed `span`.

    For example 90 seconds maps to MINUTE and 36 hours to DAILY.
    """
    if span < ONE_SECOND:
        return Resolution.TICK
    if span < ONE_MINUTE:
        return Resolution.SECOND
    if span < ONE_HOUR:
        return Resolution.MINUTE
    if span < ONE_DAY:
        return Resolution.HOUR
    return Resolution.DAILY


def normalize_resolution(resolution: Resolution, bar_count: int) -> tuple[Resolution, int]:
    """
    Map a (resolution, bar_count) pair onto the granularities used for stepping.

    Ticks become seconds. Hours become 60 minute bars each, since hourly
    steps misalign with sessions opening on the half hour (e.g. 09:30).
    """
    if resolution == Resolution.TICK:
        return Resolution.SECOND, bar_count
    if resolution == Resolution.HOUR:
        return Resolution.MINUTE, bar_count * 60
    return resolution, bar_count


def convert_from_utc(utc_time: datetime, time_zone: tzinfo) -> datetime:
    """UTC instant -> local wall-clock time in `time_zone`."""
    return utc_time.replace(tzinfo=timezone.utc).astimezone(time_zone).replace(tzinfo=None)


def convert_to_utc(local_time: datetime, time_zone: tzinfo) -> datetime:
    """Local wall-clock time in `time_zone` -> UTC instant."""
    return local_time.replace(tzinfo=time_zone).astimezone(timezone.utc).replace(tzinfo=None)


def to_unix_seconds(utc_time: datetime) -> float:
    return (utc_time - UNIX_EPOCH).total_seconds()


def from_unix_seconds(seconds: float) -> datetime:
    return UNIX_EPOCH + timedelta(seconds=seconds)
