"""Tests for ScoreCalculator."""
from datetime import timedelta

import pytest

from jsi.errors import ConfigDisabled, ValidationError
from jsi.models import (
    AlertThresholds,
    DimensionSet,
    RiskLevel,
    ScoreRequest,
    ScoringConfig,
    ScoringWeights,
    Trend,
)
from jsi.scoring.score_calculator import LOW_OVERALL_FLAG, ScoreCalculator


def _uniform(value):
    return DimensionSet(
        work_engagement=value,
        career_alignment=value,
        manager_relationship=value,
        personal_wellbeing=value,
        job_mobility=value,
    )


class TestOverallScore:
    """Weighted-sum combination of the five dimensions."""

    calc = ScoreCalculator()

    def test_reference_scenario(self, sample_dimensions):
        """20/80/80/80/80 with default weights scores 62, low risk, one flag."""
        record = self.calc.calculate("w1", "c1", sample_dimensions)
        assert record.overall_score == 62
        assert record.flags == ["low_engagement"]
        assert record.risk_level == RiskLevel.LOW
        assert record.trend == Trend.STABLE

    def test_half_rounds_up(self):
        """A weighted sum of exactly 62.5 reports as 63."""
        assert self.calc.calculate_overall(_uniform(62.5)) == 63

    def test_weights_are_not_normalised(self):
        """Weights summing above 1 scale the score; stored value is clamped at 100."""
        weights = ScoringWeights(
            work_engagement=1,
            career_alignment=1,
            manager_relationship=1,
            personal_wellbeing=1,
            job_mobility=1,
        )
        calc = ScoreCalculator(ScoringConfig(weights=weights))
        assert calc.calculate_overall(_uniform(10)) == 50
        assert calc.calculate_overall(_uniform(50)) == 100

    def test_zero_weights_score_zero(self):
        weights = ScoringWeights(
            work_engagement=0,
            career_alignment=0,
            manager_relationship=0,
            personal_wellbeing=0,
            job_mobility=0,
        )
        calc = ScoreCalculator(ScoringConfig(weights=weights))
        assert calc.calculate_overall(_uniform(90)) == 0


class TestClassification:
    """Trend, risk level and flags."""

    calc = ScoreCalculator()

    def test_first_record_is_stable(self):
        assert ScoreCalculator.classify_trend(95, None) == Trend.STABLE

    @pytest.mark.parametrize(
        "overall,expected",
        [(66, Trend.UP), (65, Trend.STABLE), (55, Trend.STABLE), (54, Trend.DOWN)],
    )
    def test_trend_deadband(self, make_record, overall, expected):
        """Only a move of more than five points changes the trend."""
        prior = make_record(overall=60)
        assert ScoreCalculator.classify_trend(overall, prior) == expected

    @pytest.mark.parametrize(
        "overall,expected",
        [
            (0, RiskLevel.HIGH),
            (30, RiskLevel.HIGH),
            (31, RiskLevel.MEDIUM),
            (50, RiskLevel.MEDIUM),
            (51, RiskLevel.LOW),
            (100, RiskLevel.LOW),
        ],
    )
    def test_risk_boundaries(self, overall, expected):
        assert self.calc.classify_risk(overall) == expected

    def test_custom_thresholds(self):
        config = ScoringConfig(
            thresholds=AlertThresholds(low_score_threshold=70, risk_flag_threshold=40)
        )
        calc = ScoreCalculator(config)
        assert calc.classify_risk(40) == RiskLevel.HIGH
        assert calc.classify_risk(70) == RiskLevel.MEDIUM
        assert calc.classify_risk(71) == RiskLevel.LOW

    def test_all_flags_in_order(self):
        flags = self.calc.generate_flags(_uniform(0), 0)
        assert flags == [
            LOW_OVERALL_FLAG,
            "low_engagement",
            "career_misalignment",
            "manager_issues",
            "mobility_risk",
            "wellbeing_concern",
        ]

    def test_mobility_cutoff_is_thirty(self):
        dims = DimensionSet(
            work_engagement=90,
            career_alignment=90,
            manager_relationship=90,
            personal_wellbeing=90,
            job_mobility=31,
        )
        assert "mobility_risk" not in self.calc.generate_flags(dims, 80)
        dims = dims.model_copy(update={"job_mobility": 30})
        assert "mobility_risk" in self.calc.generate_flags(dims, 80)

    def test_dimension_cutoffs_inclusive(self):
        assert self.calc.generate_flags(_uniform(40), 80) == [
            "low_engagement",
            "career_misalignment",
            "manager_issues",
            "wellbeing_concern",
        ]
        assert self.calc.generate_flags(_uniform(41), 80) == []

    def test_low_overall_flag_at_threshold(self):
        assert self.calc.generate_flags(_uniform(90), 50) == [LOW_OVERALL_FLAG]
        assert self.calc.generate_flags(_uniform(90), 51) == []


class TestCalculate:
    """End-to-end record creation and rejection paths."""

    calc = ScoreCalculator()

    def test_context_fields_pass_through(self, sample_dimensions, now):
        record = self.calc.calculate(
            "w1", "c1", sample_dimensions,
            agency_id="a1", timestamp=now, department="Ops", location="Austin",
        )
        assert record.agency_id == "a1"
        assert record.department == "Ops"
        assert record.location == "Austin"
        assert record.timestamp == now

    def test_trend_uses_prior(self, make_record, now):
        prior = make_record(overall=40, days_ago=1)
        record = self.calc.calculate("w1", "c1", _uniform(70), prior, timestamp=now)
        assert record.trend == Trend.UP

    def test_requires_alert(self, sample_dimensions):
        assert self.calc.calculate("w1", "c1", sample_dimensions).requires_alert
        assert not self.calc.calculate("w1", "c1", _uniform(90)).requires_alert

    def test_disabled_config(self, sample_dimensions):
        calc = ScoreCalculator(ScoringConfig(customer_id="c1", enabled=False))
        with pytest.raises(ConfigDisabled):
            calc.calculate("w1", "c1", sample_dimensions)

    @pytest.mark.parametrize("worker_id,customer_id", [("", "c1"), ("w1", "")])
    def test_missing_identifiers(self, sample_dimensions, worker_id, customer_id):
        with pytest.raises(ValidationError):
            self.calc.calculate(worker_id, customer_id, sample_dimensions)

    def test_out_of_range_dimension_rejected(self, sample_dimensions):
        sample_dimensions["job_mobility"] = 101
        with pytest.raises(ValidationError) as exc_info:
            self.calc.calculate("w1", "c1", sample_dimensions)
        assert exc_info.value.field == "job_mobility"

    def test_missing_dimension_rejected(self, sample_dimensions):
        del sample_dimensions["career_alignment"]
        with pytest.raises(ValidationError):
            self.calc.calculate("w1", "c1", sample_dimensions)

    def test_prior_of_other_worker_rejected(self, make_record, sample_dimensions):
        prior = make_record(worker_id="w2")
        with pytest.raises(ValidationError):
            self.calc.calculate("w1", "c1", sample_dimensions, prior)

    def test_prior_later_than_measurement_rejected(self, make_record, sample_dimensions, now):
        prior = make_record(timestamp=now + timedelta(hours=1))
        with pytest.raises(ValidationError):
            self.calc.calculate("w1", "c1", sample_dimensions, prior, timestamp=now)

    def test_equal_timestamps_allowed(self, make_record, sample_dimensions, now):
        prior = make_record(overall=62, timestamp=now)
        record = self.calc.calculate("w1", "c1", sample_dimensions, prior, timestamp=now)
        assert record.trend == Trend.STABLE

    def test_calculate_from_request(self, sample_dimensions):
        request = ScoreRequest(
            worker_id="w1",
            customer_id="c1",
            dimensions=sample_dimensions,
            team="Night shift",
        )
        record = self.calc.calculate_from_request(request)
        assert record.overall_score == 62
        assert record.team == "Night shift"
