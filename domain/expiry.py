"""
Ready-made expiry functions for `Insight.price(..., expiry=...)`.

Each maps the exchange-local generation time to an exchange-local close time.
A result that falls outside trading hours is moved to the next market open
when the insight is resolved.
"""

import calendar
from datetime import datetime, time, timedelta


def end_of_day(local_time: datetime) -> datetime:
    """Midnight at the start of the next calendar day."""
    return datetime.combine(local_time.date() + timedelta(days=1), time.min)


def end_of_week(local_time: datetime) -> datetime:
    """Midnight at the start of the next Monday."""
    days_ahead = 7 - local_time.weekday()
    return datetime.combine(local_time.date() + timedelta(days=days_ahead), time.min)


def end_of_month(local_time: datetime) -> datetime:
    """Midnight at the start of the first day of the next month."""
    if local_time.month == 12:
        return datetime(local_time.year + 1, 1, 1)
    return datetime(local_time.year, local_time.month + 1, 1)


def one_month(local_time: datetime) -> datetime:
    """Same wall time one month later, clamped to the end of shorter months."""
    year, month = local_time.year, local_time.month + 1
    if month > 12:
        year, month = year + 1, 1
    day = min(local_time.day, calendar.monthrange(year, month)[1])
    return local_time.replace(year=year, month=month, day=day)


EXPIRY_FUNCTIONS = {
    "end-of-day": end_of_day,
    "end-of-week": end_of_week,
    "end-of-month": end_of_month,
    "one-month": one_month,
}
