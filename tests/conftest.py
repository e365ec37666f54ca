"""Shared fixtures: calendars, symbols and reference instants."""

from datetime import date, datetime, time

import pytest

from adapters import AlwaysOpenExchangeHours, SessionExchangeHours
from config.loader import ENV_OVERRIDES, ENV_PREFIX
from domain import Symbol


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ALPHAINSIGHT_* variables from the host out of the tests."""
    for suffix in ENV_OVERRIDES:
        monkeypatch.delenv(f"{ENV_PREFIX}{suffix}", raising=False)


@pytest.fixture
def always_open():
    """Continuously open market in UTC."""
    return AlwaysOpenExchangeHours()


@pytest.fixture
def us_equity():
    """New York 09:30-16:00, Monday to Friday, no holidays."""
    return SessionExchangeHours.us_equity()


@pytest.fixture
def us_equity_special_days():
    """
    New York hours with:
    - holiday on Monday 2020-01-06
    - early close at 13:00 on Friday 2020-01-03
    - late open at 11:00 on Tuesday 2020-01-07
    """
    return SessionExchangeHours(
        "America/New_York",
        market_open=time(9, 30),
        market_close=time(16, 0),
        holidays=[date(2020, 1, 6)],
        early_closes={date(2020, 1, 3): time(13, 0)},
        late_opens={date(2020, 1, 7): time(11, 0)},
    )


@pytest.fixture
def spy():
    return Symbol("SPY R735QTJ8XC9X", "SPY")


# Friday 2020-01-03 15:59 in New York (EST, UTC-5)
@pytest.fixture
def friday_before_close_utc():
    return datetime(2020, 1, 3, 20, 59)


# Monday 2020-01-06 10:00 in New York
@pytest.fixture
def monday_morning_utc():
    return datetime(2020, 1, 6, 15, 0)
