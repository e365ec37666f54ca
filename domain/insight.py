"""
Insight entity: a trading prediction for one symbol with a validity window.

An insight is created holding a period specification. Its period and close
time are resolved later, once the generation time is known and a calendar is
available, by `set_period_and_close_time`. That call is the only place those
two fields change after construction.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable

from ports import (
    AlreadyGroupedError,
    ErrorCode,
    ExchangeHours,
    InvalidArgumentError,
    InvalidStateError,
)

from .enums import InsightDirection, InsightScoreType, InsightSource, InsightType, Resolution
from .models import SerializedInsight
from .period import (
    BarCountAtResolution,
    ExpiryFunc,
    ExpiryFunction,
    FixedDuration,
    FixedLocalCloseTime,
    OpenEnded,
    PeriodSpec,
    resolve_period,
)
from .primitives import InsightScore, Symbol
from .timeutil import END_OF_TIME, END_OF_TIME_PERIOD, ONE_SECOND, from_unix_seconds

logger = logging.getLogger(__name__)


class Insight:
    """
    A prediction for a single symbol.

    Identity (`id`, `group_id`), subject and prediction payload are read-only.
    `generated_time_utc` is set by the caller before resolution. Valuation
    fields and `score` are updated by external evaluators.
    """

    def __init__(
        self,
        symbol: Symbol | str,
        period: timedelta,
        type: InsightType,
        direction: InsightDirection,
        magnitude: float | None = None,
        confidence: float | None = None,
        source_model: str | None = None,
        weight: float | None = None,
        *,
        generated_time_utc: datetime | None = None,
        close_time_utc: datetime | None = None,
    ):
        """
        Create an insight valid for a fixed duration.

        `period` is kept as given. A zero period resolves as one second once
        `set_period_and_close_time` runs. When `generated_time_utc` is given
        the close time defaults to `generated_time_utc + period`.

        Raises:
            InvalidArgumentError: If period is negative or between zero and one second
        """
        if period < timedelta(0) or timedelta(0) < period < ONE_SECOND:
            raise InvalidArgumentError.period(period)

        spec: PeriodSpec = OpenEnded() if period == END_OF_TIME_PERIOD else FixedDuration(period)
        self._initialize(symbol, spec, type, direction, magnitude, confidence, source_model, weight)
        self._period = period

        if generated_time_utc is not None:
            self.generated_time_utc = generated_time_utc
            if close_time_utc is None:
                close_time_utc = END_OF_TIME if isinstance(spec, OpenEnded) else generated_time_utc + period
        self._close_time_utc = close_time_utc

    def _initialize(
        self,
        symbol: Symbol | str,
        spec: PeriodSpec,
        type: InsightType,
        direction: InsightDirection,
        magnitude: float | None,
        confidence: float | None,
        source_model: str | None,
        weight: float | None,
    ) -> None:
        self._id = uuid.uuid4()
        self._group_id: uuid.UUID | None = None
        self._period_spec = spec
        self._symbol = symbol if isinstance(symbol, Symbol) else Symbol.create(symbol)
        self._type = InsightType(type)
        self._direction = InsightDirection(direction)
        self._magnitude = magnitude
        self._confidence = confidence
        self._weight = weight
        self._score = InsightScore()

        # fixed durations are known before any calendar is
        self._period: timedelta | None = None
        if isinstance(spec, FixedDuration):
            self._period = spec.period
        elif isinstance(spec, OpenEnded):
            self._period = END_OF_TIME_PERIOD
        self._close_time_utc: datetime | None = None

        self.generated_time_utc: datetime | None = None
        self.source_model = source_model
        self.source = InsightSource.NONE
        self.reference_value = 0.0
        self.reference_value_final = 0.0
        self.estimated_value = 0.0

    @classmethod
    def _create(
        cls,
        symbol: Symbol | str,
        spec: PeriodSpec,
        type: InsightType,
        direction: InsightDirection,
        magnitude: float | None = None,
        confidence: float | None = None,
        source_model: str | None = None,
        weight: float | None = None,
    ) -> "Insight":
        insight = cls.__new__(cls)
        insight._initialize(symbol, spec, type, direction, magnitude, confidence, source_model, weight)
        return insight

    # ========================================================================
    # Read-only state
    # ========================================================================

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def group_id(self) -> uuid.UUID | None:
        """Group this insight belongs to, None if not grouped."""
        return self._group_id

    @property
    def symbol(self) -> Symbol:
        return self._symbol

    @property
    def type(self) -> InsightType:
        return self._type

    @property
    def direction(self) -> InsightDirection:
        return self._direction

    @property
    def magnitude(self) -> float | None:
        """Predicted percentage change."""
        return self._magnitude

    @property
    def confidence(self) -> float | None:
        """Confidence in the prediction, 0-1."""
        return self._confidence

    @property
    def weight(self) -> float | None:
        """Suggested portfolio weight."""
        return self._weight

    @property
    def period(self) -> timedelta | None:
        """Validity duration, None until resolved unless given as a fixed duration."""
        return self._period

    @property
    def close_time_utc(self) -> datetime | None:
        return self._close_time_utc

    @property
    def score(self) -> InsightScore:
        return self._score

    @property
    def period_spec(self) -> PeriodSpec:
        """How the validity window was specified."""
        return self._period_spec

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def is_expired(self, utc_time: datetime) -> bool:
        """
        Whether the insight closed before `utc_time`.

        Raises:
            InvalidStateError: If the close time has not been resolved
        """
        if self._close_time_utc is None:
            raise InvalidStateError(
                "The insight's close time is not resolved yet.",
                code=ErrorCode.CLOSE_TIME_UNSET,
                insight_id=self._id,
            )
        return self._close_time_utc < utc_time

    def is_active(self, utc_time: datetime) -> bool:
        return not self.is_expired(utc_time)

    def set_period_and_close_time(self, exchange_hours: ExchangeHours) -> None:
        """
        Resolve period and close time against the symbol's calendar.

        Raises:
            InvalidStateError: If generated_time_utc is not set
            InvalidArgumentError: If an explicit close time precedes generation
        """
        if self.generated_time_utc is None:
            raise InvalidStateError(
                "The insight's generated_time_utc must be set before calling set_period_and_close_time.",
                insight_id=self._id,
            )

        resolved = resolve_period(self._period_spec, self.generated_time_utc, exchange_hours)
        self._period = resolved.period
        self._close_time_utc = resolved.close_time_utc

    def clone(self) -> "Insight":
        """
        Copy with the same identity and field values.

        The score object is shared with the original, so a scorer updating
        either copy updates both.
        """
        clone = self._create(
            self._symbol,
            self._period_spec,
            self._type,
            self._direction,
            self._magnitude,
            self._confidence,
            self.source_model,
            self._weight,
        )
        clone._id = self._id
        clone._group_id = self._group_id
        clone._period = self._period
        clone._close_time_utc = self._close_time_utc
        clone._score = self._score
        clone.generated_time_utc = self.generated_time_utc
        clone.source = self.source
        clone.reference_value = self.reference_value
        clone.reference_value_final = self.reference_value_final
        clone.estimated_value = self.estimated_value
        return clone

    @staticmethod
    def group(*insights: "Insight | Iterable[Insight]") -> list["Insight"]:
        """
        Put insights into one new group.

        Accepts insights as arguments or a single iterable of insights. No
        insight is modified unless all of them are ungrouped and none is
        passed twice.

        Raises:
            AlreadyGroupedError: If any insight already belongs to a group or
                appears more than once
        """
        if len(insights) == 1 and not isinstance(insights[0], Insight):
            insights = tuple(insights[0])

        group_id = uuid.uuid4()
        seen: set[int] = set()
        for insight in insights:
            if insight.group_id is not None:
                raise AlreadyGroupedError(insight.id, insight.group_id)
            # a repeated member would be assigned this group twice
            if id(insight) in seen:
                raise AlreadyGroupedError(insight.id, group_id)
            seen.add(id(insight))

        for insight in insights:
            insight._group_id = group_id

        logger.info(f"Grouped {len(insights)} insight(s) under {group_id}")
        return list(insights)

    # ========================================================================
    # Factories
    # ========================================================================

    @classmethod
    def from_expiry(
        cls,
        symbol: Symbol | str,
        expiry: ExpiryFunc,
        type: InsightType,
        direction: InsightDirection,
        magnitude: float | None = None,
        confidence: float | None = None,
        source_model: str | None = None,
        weight: float | None = None,
    ) -> "Insight":
        """Create an insight closing at `expiry(local generation time)`."""
        return cls._create(
            symbol, ExpiryFunction(expiry), type, direction, magnitude, confidence, source_model, weight
        )

    @classmethod
    def price(
        cls,
        symbol: Symbol | str,
        direction: InsightDirection,
        *,
        period: timedelta | None = None,
        resolution: Resolution | None = None,
        bar_count: int | None = None,
        close_time_local: datetime | None = None,
        expiry: ExpiryFunc | None = None,
        magnitude: float | None = None,
        confidence: float | None = None,
        source_model: str | None = None,
        weight: float | None = None,
    ) -> "Insight":
        """
        Create a price insight.

        Validity is given by exactly one of:
            period: a duration, at least one second
            resolution + bar_count: a number of bars, at least one
            close_time_local: an exchange-local close time
            expiry: a function of the exchange-local generation time

        Raises:
            InvalidArgumentError: If the validity is missing, ambiguous or out of range
        """
        spec = _validity_spec(period, resolution, bar_count, close_time_local, expiry)
        return cls._create(symbol, spec, InsightType.PRICE, direction, magnitude, confidence, source_model, weight)

    @classmethod
    def volatility(
        cls,
        symbol: Symbol | str,
        direction: InsightDirection,
        *,
        period: timedelta | None = None,
        resolution: Resolution | None = None,
        bar_count: int | None = None,
        close_time_local: datetime | None = None,
        expiry: ExpiryFunc | None = None,
        magnitude: float | None = None,
        confidence: float | None = None,
        source_model: str | None = None,
        weight: float | None = None,
    ) -> "Insight":
        """Create a volatility insight. Validity rules match `price`."""
        spec = _validity_spec(period, resolution, bar_count, close_time_local, expiry)
        return cls._create(
            symbol, spec, InsightType.VOLATILITY, direction, magnitude, confidence, source_model, weight
        )

    # ========================================================================
    # Serialization mapping
    # ========================================================================

    @classmethod
    def from_serialized(cls, record: SerializedInsight) -> "Insight":
        """
        Rebuild an insight from its flat record.

        Every scalar is restored as recorded, including resolved periods
        below one second. Final scores are restored in full and finalized at
        the close time; otherwise only non-zero sub-scores are restored.
        """
        period = timedelta(seconds=record.period)
        insight = cls._create(
            Symbol(record.symbol, record.ticker),
            OpenEnded() if period == END_OF_TIME_PERIOD else FixedDuration(period),
            record.type,
            record.direction,
            record.magnitude,
            record.confidence,
            record.source_model,
            record.weight,
        )
        insight._period = period
        insight.generated_time_utc = from_unix_seconds(record.created_time)
        insight._close_time_utc = from_unix_seconds(record.close_time)
        insight._id = uuid.UUID(record.id)
        insight._group_id = uuid.UUID(record.group_id) if record.group_id else None
        insight.estimated_value = record.estimated_value
        insight.reference_value = record.reference_value
        insight.reference_value_final = record.reference_value_final
        insight.source = record.source

        close_time_utc = insight.close_time_utc
        if record.score_is_final:
            insight.score.set_score(InsightScoreType.MAGNITUDE, record.score_magnitude, close_time_utc)
            insight.score.set_score(InsightScoreType.DIRECTION, record.score_direction, close_time_utc)
            insight.score.finalize(close_time_utc)
        else:
            if record.score_magnitude != 0:
                insight.score.set_score(InsightScoreType.MAGNITUDE, record.score_magnitude, close_time_utc)
            if record.score_direction != 0:
                insight.score.set_score(InsightScoreType.DIRECTION, record.score_direction, close_time_utc)

        return insight

    def to_serialized(self) -> SerializedInsight:
        return SerializedInsight.from_insight(self)

    # ========================================================================
    # Rendering
    # ========================================================================

    def __str__(self) -> str:
        text = (
            f"{self._id.hex}: {self._symbol} {self._type.name.title()} "
            f"{self._direction.name.title()} within {self._period}"
        )
        if self._magnitude is not None:
            text += f" by {self._magnitude}%"
        if self._confidence is not None:
            text += f" with {round(100 * self._confidence, 1)}% confidence"
        if self._weight is not None:
            text += f" and {round(100 * self._weight, 1)}% weight"
        return text

    def __repr__(self) -> str:
        return f"Insight({self})"


def _validity_spec(
    period: timedelta | None,
    resolution: Resolution | None,
    bar_count: int | None,
    close_time_local: datetime | None,
    expiry: ExpiryFunc | None,
) -> PeriodSpec:
    """Pick and validate the period specification for the factory arguments."""
    bars_given = resolution is not None or bar_count is not None
    given = sum(arg is not None for arg in (period, close_time_local, expiry)) + bars_given
    if given != 1:
        raise InvalidArgumentError(
            "Exactly one of period, resolution/bar_count, close_time_local or expiry must be given.",
            code=ErrorCode.VALIDITY_AMBIGUOUS,
            argument="validity",
        )

    if period is not None:
        if period == END_OF_TIME_PERIOD:
            return OpenEnded()
        if period < ONE_SECOND:
            raise InvalidArgumentError.period(period)
        return FixedDuration(period)

    if bars_given:
        if resolution is None or bar_count is None:
            raise InvalidArgumentError(
                "resolution and bar_count must be given together.",
                code=ErrorCode.VALIDITY_AMBIGUOUS,
                argument="bar_count" if bar_count is None else "resolution",
            )
        if bar_count < 1:
            raise InvalidArgumentError.bar_count(bar_count)
        return BarCountAtResolution(Resolution(resolution), bar_count)

    if close_time_local is not None:
        if close_time_local == END_OF_TIME:
            return OpenEnded()
        return FixedLocalCloseTime(close_time_local)

    return ExpiryFunction(expiry)
