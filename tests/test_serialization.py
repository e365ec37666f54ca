"""
Tests for the flat SerializedInsight record.

Tests cover:
- Insight -> record field mapping
- Record -> Insight restoration, including score rules
- Record validation and JSON helpers
"""

import uuid
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from domain import (
    END_OF_TIME,
    END_OF_TIME_PERIOD,
    Insight,
    InsightDirection,
    InsightScoreType,
    InsightSource,
    InsightType,
    OpenEnded,
    SerializedInsight,
    from_json_dict,
    to_json_dict,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def resolved_insight(spy, always_open):
    insight = Insight.price(
        spy, InsightDirection.UP, period=timedelta(minutes=5),
        magnitude=0.5, confidence=0.75, source_model="momentum", weight=0.1,
    )
    insight.generated_time_utc = datetime(2020, 1, 2, 14, 30)
    insight.set_period_and_close_time(always_open)
    insight.reference_value = 324.87
    insight.estimated_value = 1.25
    insight.source = InsightSource.BACKTESTING
    return insight


@pytest.fixture
def record_data():
    return {
        "id": uuid.UUID(int=1).hex,
        "created_time": 1577975400.0,
        "close_time": 1577975700.0,
        "symbol": "SPY R735QTJ8XC9X",
        "ticker": "SPY",
        "type": "price",
        "direction": 1,
        "period": 300.0,
    }


# ============================================================================
# Insight -> record
# ============================================================================


class TestToSerialized:
    """Flattening a resolved insight."""

    def test_fields(self, resolved_insight):
        record = resolved_insight.to_serialized()

        assert record.id == resolved_insight.id.hex
        assert record.group_id is None
        assert record.source_model == "momentum"
        assert record.created_time == 1577975400.0
        assert record.close_time == 1577975700.0
        assert record.symbol == "SPY R735QTJ8XC9X"
        assert record.ticker == "SPY"
        assert record.type == InsightType.PRICE
        assert record.direction == InsightDirection.UP
        assert record.period == 300.0
        assert (record.magnitude, record.confidence, record.weight) == (0.5, 0.75, 0.1)
        assert record.reference_value == 324.87
        assert record.estimated_value == 1.25
        assert record.source == InsightSource.BACKTESTING
        assert record.score_is_final is False

    def test_group_id(self, resolved_insight):
        Insight.group(resolved_insight)
        assert resolved_insight.to_serialized().group_id == resolved_insight.group_id.hex

    def test_unresolved_rejected(self, spy):
        insight = Insight.price(spy, InsightDirection.UP, period=timedelta(minutes=5))
        with pytest.raises(ValueError):
            insight.to_serialized()

    def test_record_is_frozen(self, resolved_insight):
        record = resolved_insight.to_serialized()
        with pytest.raises(ValidationError):
            record.period = 1.0


# ============================================================================
# Record -> Insight
# ============================================================================


class TestFromSerialized:
    """Restoring an insight from its record."""

    def test_round_trip_preserves_fields(self, resolved_insight):
        Insight.group(resolved_insight)
        resolved_insight.score.set_score(InsightScoreType.DIRECTION, 0.8, datetime(2020, 1, 2, 14, 35))

        restored = Insight.from_serialized(resolved_insight.to_serialized())

        assert restored.id == resolved_insight.id
        assert restored.group_id == resolved_insight.group_id
        assert restored.symbol == resolved_insight.symbol
        assert restored.type == resolved_insight.type
        assert restored.direction == resolved_insight.direction
        assert restored.period == resolved_insight.period
        assert restored.generated_time_utc == resolved_insight.generated_time_utc
        assert restored.close_time_utc == resolved_insight.close_time_utc
        assert restored.magnitude == resolved_insight.magnitude
        assert restored.confidence == resolved_insight.confidence
        assert restored.weight == resolved_insight.weight
        assert restored.source_model == resolved_insight.source_model
        assert restored.source == resolved_insight.source
        assert restored.reference_value == resolved_insight.reference_value
        assert restored.estimated_value == resolved_insight.estimated_value
        assert restored.score.direction == 0.8
        assert restored.to_serialized() == resolved_insight.to_serialized()

    def test_open_ended_round_trip(self, spy, us_equity):
        insight = Insight.price(spy, InsightDirection.UP, period=END_OF_TIME_PERIOD)
        insight.generated_time_utc = datetime(2020, 1, 2, 14, 30)
        insight.set_period_and_close_time(us_equity)

        restored = Insight.from_serialized(insight.to_serialized())

        assert restored.period_spec == OpenEnded()
        assert restored.period == END_OF_TIME_PERIOD
        assert restored.close_time_utc == END_OF_TIME

    def test_zero_period_round_trip(self, spy, always_open):
        """A close time equal to the generation time resolves to a zero period."""
        generated = datetime(2020, 1, 2, 14, 30)
        insight = Insight.price(spy, InsightDirection.UP, close_time_local=generated)
        insight.generated_time_utc = generated
        insight.set_period_and_close_time(always_open)

        restored = Insight.from_serialized(insight.to_serialized())

        assert insight.period == timedelta(0)
        assert restored.period == timedelta(0)
        assert restored.close_time_utc == restored.generated_time_utc
        assert restored.to_serialized() == insight.to_serialized()

    def test_sub_second_period_restored(self, record_data):
        record_data["period"] = 0.5
        record_data["close_time"] = record_data["created_time"] + 0.5

        insight = Insight.from_serialized(SerializedInsight(**record_data))

        assert insight.period == timedelta(milliseconds=500)
        assert insight.close_time_utc == datetime(2020, 1, 2, 14, 30, 0, 500000)

    def test_final_scores_restored_at_close(self, record_data):
        record = SerializedInsight(
            **record_data, score_is_final=True, score_direction=0.0, score_magnitude=0.3
        )
        insight = Insight.from_serialized(record)

        assert insight.score.is_final_score
        assert insight.score.direction == 0.0
        assert insight.score.magnitude == 0.3
        assert insight.score.updated_time_utc == datetime(2020, 1, 2, 14, 35)

    def test_non_final_restores_nonzero_scores_only(self, record_data):
        insight = Insight.from_serialized(SerializedInsight(**record_data, score_direction=0.6))

        assert not insight.score.is_final_score
        assert insight.score.direction == 0.6
        assert insight.score.magnitude == 0.0
        assert insight.score.updated_time_utc == datetime(2020, 1, 2, 14, 35)

    def test_zero_scores_leave_score_untouched(self, record_data):
        insight = Insight.from_serialized(SerializedInsight(**record_data))
        assert insight.score.updated_time_utc is None

    def test_restored_times(self, record_data):
        insight = Insight.from_serialized(SerializedInsight(**record_data))

        assert insight.generated_time_utc == datetime(2020, 1, 2, 14, 30)
        assert insight.close_time_utc == datetime(2020, 1, 2, 14, 35)
        assert insight.period == timedelta(minutes=5)


# ============================================================================
# Record validation
# ============================================================================


class TestSerializedInsightValidation:
    """Pydantic validation of the record."""

    def test_id_normalized_to_hex(self, record_data):
        record_data["id"] = str(uuid.UUID(int=1))
        assert SerializedInsight(**record_data).id == uuid.UUID(int=1).hex

    def test_empty_group_id_means_ungrouped(self, record_data):
        assert SerializedInsight(**record_data, group_id="").group_id is None

    def test_invalid_id(self, record_data):
        record_data["id"] = "not-a-uuid"
        with pytest.raises(ValidationError):
            SerializedInsight(**record_data)

    def test_negative_period(self, record_data):
        record_data["period"] = -1.0
        with pytest.raises(ValidationError):
            SerializedInsight(**record_data)

    def test_unknown_field(self, record_data):
        with pytest.raises(ValidationError):
            SerializedInsight(**record_data, horizon="1d")

    def test_empty_symbol(self, record_data):
        record_data["symbol"] = ""
        with pytest.raises(ValidationError):
            SerializedInsight(**record_data)


class TestJsonHelpers:
    """to_json_dict / from_json_dict."""

    def test_json_values(self, resolved_insight):
        data = to_json_dict(resolved_insight.to_serialized())

        assert data["type"] == "price"
        assert data["direction"] == 1
        assert data["source"] == "backtesting"
        assert data["group_id"] is None

    def test_json_round_trip(self, resolved_insight):
        record = resolved_insight.to_serialized()
        assert from_json_dict(SerializedInsight, to_json_dict(record)) == record
