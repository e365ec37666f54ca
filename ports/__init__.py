from .errors import (
    InsightError,
    InvalidArgumentError,
    InvalidStateError,
    AlreadyGroupedError,
    ErrorCode,
    ErrorKind,
)
from .calendar import ExchangeHours

__all__ = [
    "InsightError",
    "InvalidArgumentError",
    "InvalidStateError",
    "AlreadyGroupedError",
    "ErrorCode",
    "ErrorKind",
    "ExchangeHours",
]
