"""
Flat serialization record for insights.

Times are unix seconds and the period is in seconds, so the record is
JSON-serializable as is.
"""

import uuid
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, Field, field_validator

from .enums import InsightDirection, InsightSource, InsightType
from .timeutil import to_unix_seconds

if TYPE_CHECKING:
    from .insight import Insight


def _validate_uuid(v: str) -> str:
    return uuid.UUID(v).hex


class SerializedInsight(BaseModel):
    """
    Flat record of an insight.

    Mirrors every scalar field of Insight one-to-one.
    """
    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(description="Insight id (hex)")
    group_id: str | None = Field(default=None, description="Group id (hex), None if not grouped")
    source_model: str | None = Field(default=None, description="Model that generated the insight")
    created_time: float = Field(description="Generation time, unix seconds")
    close_time: float = Field(description="Close time, unix seconds")
    symbol: str = Field(min_length=1, description="Instrument identifier")
    ticker: str = Field(default="", description="Display ticker")
    type: InsightType
    direction: InsightDirection
    period: float = Field(ge=0, description="Period in seconds")
    magnitude: float | None = None
    confidence: float | None = None
    weight: float | None = None
    reference_value: float = 0.0
    reference_value_final: float = 0.0
    estimated_value: float = 0.0
    score_magnitude: float = 0.0
    score_direction: float = 0.0
    score_is_final: bool = False
    source: InsightSource = InsightSource.NONE

    @field_validator("id")
    @classmethod
    def _validate_id(cls, v: str) -> str:
        return _validate_uuid(v)

    @field_validator("group_id")
    @classmethod
    def _validate_group_id(cls, v: str | None) -> str | None:
        """Empty strings mean "not grouped"."""
        if not v:
            return None
        return _validate_uuid(v)

    @classmethod
    def from_insight(cls, insight: "Insight") -> "SerializedInsight":
        """
        Flatten a resolved insight.

        Raises:
            ValueError: If the insight's times are not resolved
        """
        if insight.generated_time_utc is None or insight.close_time_utc is None or insight.period is None:
            raise ValueError(f"insight {insight.id} must be resolved before serialization")

        return cls(
            id=insight.id.hex,
            group_id=insight.group_id.hex if insight.group_id else None,
            source_model=insight.source_model,
            created_time=to_unix_seconds(insight.generated_time_utc),
            close_time=to_unix_seconds(insight.close_time_utc),
            symbol=insight.symbol.id,
            ticker=insight.symbol.value,
            type=insight.type,
            direction=insight.direction,
            period=insight.period.total_seconds(),
            magnitude=insight.magnitude,
            confidence=insight.confidence,
            weight=insight.weight,
            reference_value=insight.reference_value,
            reference_value_final=insight.reference_value_final,
            estimated_value=insight.estimated_value,
            score_magnitude=insight.score.magnitude,
            score_direction=insight.score.direction,
            score_is_final=insight.score.is_final_score,
            source=insight.source,
        )


# ============================================================================
# Serialization helpers
# ============================================================================

def to_json_dict(model: BaseModel) -> dict:
    """Convert model to JSON-serializable dict."""
    return model.model_dump(mode="json")


T = TypeVar("T", bound=BaseModel)


def from_json_dict(model_class: type[T], data: dict) -> T:
    """Create model instance from JSON dict."""
    return model_class.model_validate(data)
