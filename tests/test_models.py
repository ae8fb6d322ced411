"""Tests for Pydantic models."""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from jsi.models import (
    DEFAULT_DIMENSION_WEIGHTS,
    DEFAULT_SCORING_CONFIG,
    DEFAULT_TOPICS,
    AlertThresholds,
    CustomTopicCreate,
    Dimension,
    DimensionSet,
    MessagingTopic,
    ScoreRecord,
    baseline_key,
    default_messaging_config,
    merge_scoring_config,
    messaging_config_key,
)


class TestDimensionSet:
    """Tests for DimensionSet."""

    def test_valid(self, sample_dimensions):
        dims = DimensionSet(**sample_dimensions)
        assert dims.get(Dimension.WORK_ENGAGEMENT) == 20
        assert dims.as_dict()["job_mobility"] == 80

    @pytest.mark.parametrize("value", [-1, 100.5])
    def test_out_of_range(self, sample_dimensions, value):
        sample_dimensions["manager_relationship"] = value
        with pytest.raises(ValidationError):
            DimensionSet(**sample_dimensions)

    def test_immutable(self, sample_dimensions):
        dims = DimensionSet(**sample_dimensions)
        with pytest.raises(ValidationError):
            dims.work_engagement = 90


class TestScoringConfig:
    """Tests for weights, thresholds and override merging."""

    def test_default_weights_sum_to_one(self):
        assert sum(DEFAULT_DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)
        weights = DEFAULT_SCORING_CONFIG.weights
        assert weights.get(Dimension.WORK_ENGAGEMENT) == 0.3
        assert weights.get(Dimension.JOB_MOBILITY) == 0.1

    def test_default_thresholds(self):
        thresholds = DEFAULT_SCORING_CONFIG.thresholds
        assert thresholds.low_score_threshold == 50
        assert thresholds.rapid_drop_threshold == 20
        assert thresholds.rapid_drop_days == 30
        assert thresholds.risk_flag_threshold == 30

    def test_risk_threshold_above_low_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            AlertThresholds(low_score_threshold=40, risk_flag_threshold=45)
        assert "risk_flag_threshold" in str(exc_info.value)

    def test_equal_thresholds_allowed(self):
        thresholds = AlertThresholds(low_score_threshold=40, risk_flag_threshold=40)
        assert thresholds.risk_flag_threshold == 40

    def test_merge_partial_override(self):
        merged = merge_scoring_config(
            DEFAULT_SCORING_CONFIG,
            {"thresholds": {"low_score_threshold": 60}, "weights": {"job_mobility": 0.5}},
        )
        assert merged.thresholds.low_score_threshold == 60
        assert merged.thresholds.risk_flag_threshold == 30
        assert merged.weights.job_mobility == 0.5
        assert merged.weights.work_engagement == 0.3

    def test_merge_ignores_none(self):
        merged = merge_scoring_config(DEFAULT_SCORING_CONFIG, {"enabled": None})
        assert merged.enabled is True

    def test_merge_does_not_mutate_defaults(self):
        merge_scoring_config(DEFAULT_SCORING_CONFIG, {"enabled": False})
        assert DEFAULT_SCORING_CONFIG.enabled is True

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            merge_scoring_config(DEFAULT_SCORING_CONFIG, {"weights": {"job_mobility": -0.1}})


class TestScoreRecord:
    """Tests for ScoreRecord."""

    def test_naive_timestamp_becomes_utc(self, sample_dimensions):
        record = ScoreRecord(
            worker_id="w1",
            customer_id="c1",
            dimensions=sample_dimensions,
            overall_score=62,
            timestamp=datetime(2026, 3, 1, 9, 30),
        )
        assert record.timestamp.tzinfo == timezone.utc
        assert record.timestamp.hour == 9

    def test_offset_timestamp_normalised(self, sample_dimensions):
        eastern = timezone(timedelta(hours=-5))
        record = ScoreRecord(
            worker_id="w1",
            customer_id="c1",
            dimensions=sample_dimensions,
            overall_score=62,
            timestamp=datetime(2026, 3, 1, 21, 0, tzinfo=eastern),
        )
        assert record.timestamp == datetime(2026, 3, 2, 2, 0, tzinfo=timezone.utc)

    def test_ids_are_unique(self, make_record):
        assert make_record().id != make_record().id

    @pytest.mark.parametrize("overall", [-1, 101])
    def test_overall_bounds(self, sample_dimensions, overall):
        with pytest.raises(ValidationError):
            ScoreRecord(
                worker_id="w1", customer_id="c1",
                dimensions=sample_dimensions, overall_score=overall,
            )

    def test_frozen(self, make_record):
        record = make_record()
        with pytest.raises(ValidationError):
            record.overall_score = 10


class TestKeys:

    def test_baseline_key(self):
        assert baseline_key("c1") == "c1_all_all"
        assert baseline_key("c1", "Ops", None) == "c1_Ops_all"
        assert baseline_key("c1", "Ops", "Reno") == "c1_Ops_Reno"

    def test_messaging_config_key(self):
        assert messaging_config_key("c1") == "c1_default"
        assert messaging_config_key("c1", "a9") == "c1_a9"


class TestMessagingModels:
    """Tests for messaging topics and configuration."""

    def test_default_catalogue(self):
        assert len(DEFAULT_TOPICS) == 10
        assert len({t.id for t in DEFAULT_TOPICS}) == 10
        assert all(t.sample_prompts for t in DEFAULT_TOPICS)

    def test_default_config_is_a_copy(self):
        config = default_messaging_config("c1")
        config.topics[0].is_enabled = False
        assert DEFAULT_TOPICS[0].is_enabled is True
        assert default_messaging_config("c1").topics[0].is_enabled is True

    def test_default_settings(self):
        settings = default_messaging_config("c1", "a1").global_settings
        assert settings.max_topics_per_prompt == 3
        assert settings.topic_rotation_strategy.value == "priority"
        assert settings.enable_custom_topics is True

    def test_topic_requires_prompts(self):
        with pytest.raises(ValidationError):
            MessagingTopic(id="t", name="T", description="d", sample_prompts=[])

    def test_custom_topic_defaults(self):
        topic = CustomTopicCreate(name="Commute", description="Travel time", sample_prompts=["How far?"])
        assert topic.priority.value == "medium"
        assert topic.frequency.value == "monthly"
        assert topic.is_enabled is True
