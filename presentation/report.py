"""
Plain-text and markdown rendering of insights.
"""

from datetime import datetime, timedelta
from typing import Iterable

from domain import END_OF_TIME, END_OF_TIME_PERIOD, Insight, InsightDirection


def _format_datetime(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    if dt == END_OF_TIME:
        return "end of time"
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _format_period(period: timedelta | None) -> str:
    if period is None:
        return "unresolved"
    if period == END_OF_TIME_PERIOD:
        return "open-ended"
    return str(period)


def _direction_arrow(direction: InsightDirection) -> str:
    return {
        InsightDirection.UP: "↑",
        InsightDirection.DOWN: "↓",
        InsightDirection.FLAT: "→",
    }[direction]


def format_insight(insight: Insight) -> str:
    """Multi-line plain-text description of one insight."""
    lines = [
        str(insight),
        f"  generated: {_format_datetime(insight.generated_time_utc)} UTC",
        f"  closes:    {_format_datetime(insight.close_time_utc)} UTC",
        f"  period:    {_format_period(insight.period)}",
    ]
    if insight.group_id:
        lines.append(f"  group:     {insight.group_id.hex}")
    return "\n".join(lines)


def generate_markdown_table(insights: Iterable[Insight]) -> str:
    """
    Markdown table of insights.

    Args:
        insights: Insights to render, in order

    Returns:
        Formatted markdown string
    """
    rows = [
        "| Symbol | Type | Direction | Generated (UTC) | Close (UTC) | Period | Confidence |",
        "|--------|------|-----------|-----------------|-------------|--------|------------|",
    ]
    for insight in insights:
        confidence = f"{insight.confidence:.0%}" if insight.confidence is not None else "-"
        rows.append(
            f"| {insight.symbol} | {insight.type.value} "
            f"| {_direction_arrow(insight.direction)} {insight.direction.name.lower()} "
            f"| {_format_datetime(insight.generated_time_utc)} "
            f"| {_format_datetime(insight.close_time_utc)} "
            f"| {_format_period(insight.period)} | {confidence} |"
        )
    return "\n".join(rows)
