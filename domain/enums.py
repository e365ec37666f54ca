from enum import Enum, IntEnum


class Resolution(str, Enum):
    """Standard bar granularities, finest first."""
    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"


class InsightType(str, Enum):
    """What the insight predicts."""
    PRICE = "price"
    VOLATILITY = "volatility"


class InsightDirection(IntEnum):
    """Predicted movement of the subject."""
    DOWN = -1
    FLAT = 0
    UP = 1


class InsightSource(str, Enum):
    """Where the insight was created."""
    NONE = "none"
    LIVE_TRADING = "live_trading"
    BACKTESTING = "backtesting"


class InsightScoreType(str, Enum):
    """Sub-scores tracked on an insight."""
    DIRECTION = "direction"
    MAGNITUDE = "magnitude"
