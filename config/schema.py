"""
Configuration schema with validation.

All configuration is validated at load time using Pydantic.
"""

from datetime import date, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from domain.enums import InsightSource


class ExchangeConfig(BaseModel):
    """Trading calendar used to resolve insight periods."""

    timezone: str = Field(default="America/New_York", description="IANA time zone name")
    always_open: bool = Field(default=False, description="Ignore sessions, market never closes")
    market_open: time = Field(default=time(9, 30))
    market_close: time = Field(default=time(16, 0))
    trading_weekdays: list[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        min_length=1,
        description="ISO weekday numbers (Monday = 1)",
    )
    holidays: list[date] = Field(default_factory=list)
    early_closes: dict[date, time] = Field(default_factory=dict)
    late_opens: dict[date, time] = Field(default_factory=dict)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @field_validator("trading_weekdays")
    @classmethod
    def validate_weekdays(cls, v: list[int]) -> list[int]:
        for day in v:
            if not 1 <= day <= 7:
                raise ValueError(f"Invalid ISO weekday: {day}")
        return sorted(set(v))

    @model_validator(mode="after")
    def _validate_session(self) -> "ExchangeConfig":
        """Sessions must open before they close, including special days."""
        if self.market_open >= self.market_close:
            raise ValueError("market_open must be before market_close")
        for day, close in self.early_closes.items():
            if close <= self.late_opens.get(day, self.market_open):
                raise ValueError(f"early close on {day} must be after the open")
        for day, open_ in self.late_opens.items():
            if open_ >= self.early_closes.get(day, self.market_close):
                raise ValueError(f"late open on {day} must be before the close")
        return self


class InsightDefaultsConfig(BaseModel):
    """Defaults applied to insights created by the CLI."""

    source_model: str | None = Field(default=None, max_length=100)
    source: InsightSource = Field(default=InsightSource.NONE)


class LoggingConfig(BaseModel):
    """Logging setup for the CLI."""

    level: str = Field(default="WARNING")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper().strip()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return v


class AlphaInsightConfig(BaseModel):
    """
    Root configuration model.

    All settings are validated on load.
    """

    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    defaults: InsightDefaultsConfig = Field(default_factory=InsightDefaultsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
