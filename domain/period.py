"""
Period specifications: how a caller expressed an insight's validity.

Each variant is resolved against a calendar by `resolve_period` into the
canonical (period, close_time_utc) pair. Variants normalize their inputs on
construction so two specs that step identically compare equal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, NamedTuple, assert_never

from ports import ExchangeHours, InvalidArgumentError, InvalidStateError, ErrorCode

from .enums import Resolution
from .stepping import compute_close_time, compute_close_time_for_bars, compute_period
from .timeutil import (
    END_OF_TIME,
    END_OF_TIME_PERIOD,
    ONE_SECOND,
    convert_from_utc,
    convert_to_utc,
    normalize_resolution,
    resolution_to_timedelta,
)

logger = logging.getLogger(__name__)

ExpiryFunc = Callable[[datetime], datetime]


@dataclass(frozen=True)
class FixedDuration:
    """Valid for a fixed duration from generation."""
    period: timedelta

    def __post_init__(self) -> None:
        if self.period == timedelta(0):
            object.__setattr__(self, "period", ONE_SECOND)


@dataclass(frozen=True)
class BarCountAtResolution:
    """Valid for N bars of a resolution."""
    resolution: Resolution
    bar_count: int

    def __post_init__(self) -> None:
        resolution, bar_count = normalize_resolution(self.resolution, self.bar_count)
        object.__setattr__(self, "resolution", resolution)
        object.__setattr__(self, "bar_count", bar_count)


@dataclass(frozen=True)
class FixedLocalCloseTime:
    """Valid until an explicit exchange-local time."""
    close_time_local: datetime


@dataclass(frozen=True)
class ExpiryFunction:
    """Valid until whatever local time `expiry` maps the local generation time to."""
    expiry: ExpiryFunc


@dataclass(frozen=True)
class OpenEnded:
    """Never expires."""


PeriodSpec = FixedDuration | BarCountAtResolution | FixedLocalCloseTime | ExpiryFunction | OpenEnded


class ResolvedPeriod(NamedTuple):
    period: timedelta
    close_time_utc: datetime


def resolve_period(
    spec: PeriodSpec,
    generated_time_utc: datetime | None,
    exchange_hours: ExchangeHours,
) -> ResolvedPeriod:
    """
    Resolve a period specification against a calendar.

    Args:
        spec: How the validity was expressed
        generated_time_utc: Insight generation instant (UTC)
        exchange_hours: Calendar of the insight's instrument

    Returns:
        ResolvedPeriod with the canonical period and close time

    Raises:
        InvalidStateError: If generated_time_utc is unset
        InvalidArgumentError: If a fixed close time precedes generation
    """
    if generated_time_utc is None:
        raise InvalidStateError(
            "The insight's generated_time_utc must be set before resolving its period and close time."
        )

    match spec:
        case FixedDuration(period=period):
            close_time_utc = compute_close_time(exchange_hours, generated_time_utc, period)
            resolved = ResolvedPeriod(period, close_time_utc)

        case BarCountAtResolution(resolution=resolution, bar_count=bar_count):
            close_time_utc = compute_close_time_for_bars(
                exchange_hours, generated_time_utc, resolution, bar_count
            )
            resolved = ResolvedPeriod(resolution_to_timedelta(resolution) * bar_count, close_time_utc)

        case FixedLocalCloseTime(close_time_local=close_time_local):
            close_time_utc = convert_to_utc(close_time_local, exchange_hours.time_zone)
            if generated_time_utc > close_time_utc:
                raise InvalidArgumentError(
                    "Insight close_time_local must not be in the past.",
                    code=ErrorCode.CLOSE_TIME_IN_PAST,
                    argument="close_time_local",
                    value=close_time_local,
                )
            period = compute_period(exchange_hours, generated_time_utc, close_time_utc)
            resolved = ResolvedPeriod(period, close_time_utc)

        case ExpiryFunction(expiry=expiry):
            close_time_local = expiry(convert_from_utc(generated_time_utc, exchange_hours.time_zone))
            # a close inside a closed market moves to the next open
            if not exchange_hours.is_open(close_time_local):
                close_time_local = exchange_hours.next_market_open(close_time_local)
            close_time_utc = convert_to_utc(close_time_local, exchange_hours.time_zone)
            resolved = ResolvedPeriod(close_time_utc - generated_time_utc, close_time_utc)

        case OpenEnded():
            resolved = ResolvedPeriod(END_OF_TIME_PERIOD, END_OF_TIME)

        case _:
            assert_never(spec)

    logger.debug(f"Resolved {type(spec).__name__} from {generated_time_utc}: {resolved}")
    return resolved
