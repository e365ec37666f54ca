"""
JSON API response types.

Structured responses for web API or CLI consumption.
"""

from datetime import datetime
from typing import Any, Iterable

from pydantic import BaseModel

from domain import Insight


# ============================================================================
# Response Models
# ============================================================================

class InsightResponse(BaseModel):
    """API response for an insight."""
    id: str
    group_id: str | None = None
    symbol: str
    ticker: str
    type: str
    direction: str
    generated_time_utc: datetime | None = None
    close_time_utc: datetime | None = None
    period_seconds: float | None = None
    magnitude: float | None = None
    confidence: float | None = None
    weight: float | None = None
    source_model: str | None = None
    summary: str


class InsightListResponse(BaseModel):
    """API response for a batch of insights."""
    count: int
    insights: list[InsightResponse]


# ============================================================================
# Conversion
# ============================================================================

def _insight_to_response(insight: Insight) -> InsightResponse:
    return InsightResponse(
        id=insight.id.hex,
        group_id=insight.group_id.hex if insight.group_id else None,
        symbol=insight.symbol.id,
        ticker=insight.symbol.value,
        type=insight.type.value,
        direction=insight.direction.name.lower(),
        generated_time_utc=insight.generated_time_utc,
        close_time_utc=insight.close_time_utc,
        period_seconds=insight.period.total_seconds() if insight.period is not None else None,
        magnitude=insight.magnitude,
        confidence=insight.confidence,
        weight=insight.weight,
        source_model=insight.source_model,
        summary=str(insight),
    )


def to_api_response(insights: Iterable[Insight]) -> InsightListResponse:
    responses = [_insight_to_response(insight) for insight in insights]
    return InsightListResponse(count=len(responses), insights=responses)


def to_json(insights: Iterable[Insight]) -> dict[str, Any]:
    """
    Convert insights to a JSON-serializable dict.

    Args:
        insights: Insights, resolved or not

    Returns:
        JSON-serializable dictionary
    """
    return to_api_response(insights).model_dump(mode="json")
