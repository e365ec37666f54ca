from dataclasses import dataclass
from datetime import datetime

from .enums import InsightScoreType


@dataclass(frozen=True)
class Symbol:
    """
    Opaque instrument reference.

    `id` is the stable instrument identifier, `value` the display ticker.
    """
    id: str
    value: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("symbol id cannot be empty")

    def __str__(self) -> str:
        return self.value or self.id

    @classmethod
    def create(cls, ticker: str) -> "Symbol":
        """Build a symbol whose identifier is the upper-cased ticker."""
        ticker = ticker.upper().strip()
        return cls(id=ticker, value=ticker)


@dataclass
class InsightScore:
    """
    Evaluation of an insight against realized outcomes.

    Written by an external scorer over the insight's lifetime. Scores are
    clamped to [0, 1]; once finalized the score no longer changes.
    """
    direction: float = 0.0
    magnitude: float = 0.0
    is_final_score: bool = False
    updated_time_utc: datetime | None = None

    def set_score(self, score_type: InsightScoreType, value: float, time_utc: datetime) -> None:
        if self.is_final_score:
            return

        self.updated_time_utc = time_utc
        value = min(1.0, max(0.0, value))
        if score_type == InsightScoreType.DIRECTION:
            self.direction = value
        elif score_type == InsightScoreType.MAGNITUDE:
            self.magnitude = value
        else:
            raise ValueError(f"unknown score type: {score_type}")

    def get_score(self, score_type: InsightScoreType) -> float:
        if score_type == InsightScoreType.DIRECTION:
            return self.direction
        if score_type == InsightScoreType.MAGNITUDE:
            return self.magnitude
        raise ValueError(f"unknown score type: {score_type}")

    def finalize(self, time_utc: datetime) -> None:
        self.is_final_score = True
        self.updated_time_utc = time_utc

    def __str__(self) -> str:
        return f"Direction: {self.direction:.2f} Magnitude: {self.magnitude:.2f}"
