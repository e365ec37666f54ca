from .base import BaseExchangeHours
from .calendar import AlwaysOpenExchangeHours, SessionExchangeHours, exchange_hours_from_config

__all__ = [
    "BaseExchangeHours",
    "AlwaysOpenExchangeHours",
    "SessionExchangeHours",
    "exchange_hours_from_config",
]
