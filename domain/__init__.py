from .enums import Resolution, InsightType, InsightDirection, InsightSource, InsightScoreType
from .primitives import Symbol, InsightScore
from .timeutil import (
    END_OF_TIME,
    END_OF_TIME_PERIOD,
    ONE_SECOND,
    ONE_MINUTE,
    ONE_HOUR,
    ONE_DAY,
)
from .stepping import compute_close_time, compute_close_time_for_bars, compute_period
from .period import (
    PeriodSpec,
    FixedDuration,
    BarCountAtResolution,
    FixedLocalCloseTime,
    ExpiryFunction,
    OpenEnded,
    ResolvedPeriod,
    resolve_period,
)
from .models import SerializedInsight, to_json_dict, from_json_dict
from .insight import Insight

__all__ = [
    # Enums
    "Resolution",
    "InsightType",
    "InsightDirection",
    "InsightSource",
    "InsightScoreType",
    # Primitives
    "Symbol",
    "InsightScore",
    # Time constants
    "END_OF_TIME",
    "END_OF_TIME_PERIOD",
    "ONE_SECOND",
    "ONE_MINUTE",
    "ONE_HOUR",
    "ONE_DAY",
    # Calendar stepping
    "compute_close_time",
    "compute_close_time_for_bars",
    "compute_period",
    # Period specifications
    "PeriodSpec",
    "FixedDuration",
    "BarCountAtResolution",
    "FixedLocalCloseTime",
    "ExpiryFunction",
    "OpenEnded",
    "ResolvedPeriod",
    "resolve_period",
    # Entity and record
    "Insight",
    "SerializedInsight",
    "to_json_dict",
    "from_json_dict",
]
