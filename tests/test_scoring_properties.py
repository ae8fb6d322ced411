"""Property-based tests for the JSI calculators.

Uses Hypothesis to verify:
  Score tests:
    1. test_overall_is_rounded_weighted_sum – within half a point of Σ w·d
    2. test_overall_monotonic_in_each_dimension
    3. test_first_record_always_stable
    4. test_risk_ladder                    – high ≤ risk cutoff < medium ≤ low cutoff < low

  Analytics tests:
    5. test_percentile_extremes            – p0 = min, p100 = max
    6. test_odd_median_is_middle_element
    7. test_equal_scores_zero_volatility
    8. test_rapid_drop_iff_drop_exceeds_threshold
    9. test_priority_selection_size
"""
import math
from datetime import datetime, timedelta, timezone

from hypothesis import HealthCheck, given, settings as h_settings
from hypothesis import strategies as st

from jsi.models import (
    AlertThresholds,
    AnomalyType,
    Dimension,
    DimensionSet,
    MessagingConfig,
    MessagingSettings,
    MessagingTopic,
    RiskLevel,
    ScoreRecord,
    ScoringConfig,
    ScoringWeights,
    TopicPriority,
    Trend,
)
from jsi.scoring.anomaly_detector import AnomalyDetector
from jsi.scoring.score_calculator import ScoreCalculator
from jsi.scoring.topic_selector import TopicSelector
from jsi.scoring.trend_analyzer import TrendAnalyzer
from jsi.scoring.utils import percentile

# ── Hypothesis configuration ──────────────────────────────────────────────────
h_settings.register_profile(
    "ci",
    max_examples=500,
    suppress_health_check=[HealthCheck.too_slow],
)
h_settings.load_profile("ci")


# ── Strategy helpers ──────────────────────────────────────────────────────────

_dim_score = st.floats(min_value=0.0, max_value=100.0, allow_nan=False, allow_infinity=False)
_weight = st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False)
_dim_scores = st.fixed_dictionaries({d.value: _dim_score for d in Dimension})
_weights = st.fixed_dictionaries({d.value: _weight for d in Dimension})
_int_score = st.integers(min_value=0, max_value=100)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(overall, worker_id="w1", offset_days=0):
    return ScoreRecord(
        worker_id=worker_id,
        customer_id="c1",
        dimensions=DimensionSet(**{d.value: overall for d in Dimension}),
        overall_score=overall,
        timestamp=T0 + timedelta(days=offset_days),
    )


# ── Score properties ──────────────────────────────────────────────────────────

class TestScoreProperties:
    """Property-based tests for ScoreCalculator."""

    @given(dims=_dim_scores, weights=_weights)
    def test_overall_is_rounded_weighted_sum(self, dims, weights):
        """Overall is the (clamped) weighted sum rounded to the nearest integer."""
        calc = ScoreCalculator(ScoringConfig(weights=ScoringWeights(**weights)))
        overall = calc.calculate_overall(DimensionSet(**dims))
        raw = sum(weights[k] * dims[k] for k in dims)
        expected = min(100.0, max(0.0, raw))
        # 4-place quantisation of inputs can shift the sum by a few thousandths
        assert abs(overall - expected) <= 0.55, f"overall={overall} raw={raw}"
        assert 0 <= overall <= 100

    @given(
        dims=_dim_scores,
        weights=_weights,
        dimension=st.sampled_from(list(Dimension)),
        delta=st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
    )
    @h_settings(max_examples=300)
    def test_overall_monotonic_in_each_dimension(self, dims, weights, dimension, delta):
        """Raising one dimension never lowers the overall score."""
        calc = ScoreCalculator(ScoringConfig(weights=ScoringWeights(**weights)))
        raised = dict(dims)
        raised[dimension.value] = min(100.0, dims[dimension.value] + delta)
        before = calc.calculate_overall(DimensionSet(**dims))
        after = calc.calculate_overall(DimensionSet(**raised))
        assert after >= before

    @given(dims=_dim_scores, weights=_weights)
    @h_settings(max_examples=200)
    def test_first_record_always_stable(self, dims, weights):
        calc = ScoreCalculator(ScoringConfig(weights=ScoringWeights(**weights)))
        assert calc.calculate("w1", "c1", dims).trend == Trend.STABLE

    @given(
        low=st.integers(min_value=0, max_value=100),
        data=st.data(),
        overall=_int_score,
    )
    def test_risk_ladder(self, low, data, overall):
        risk = data.draw(st.integers(min_value=0, max_value=low))
        config = ScoringConfig(
            thresholds=AlertThresholds(low_score_threshold=low, risk_flag_threshold=risk)
        )
        level = ScoreCalculator(config).classify_risk(overall)
        if overall <= risk:
            assert level == RiskLevel.HIGH
        elif overall <= low:
            assert level == RiskLevel.MEDIUM
        else:
            assert level == RiskLevel.LOW


# ── Analytics properties ──────────────────────────────────────────────────────

class TestAnalyticsProperties:
    """Property-based tests for percentiles, volatility, anomalies, topics."""

    @given(values=st.lists(_dim_score, min_size=1, max_size=50))
    def test_percentile_extremes(self, values):
        ordered = sorted(values)
        assert percentile(ordered, 0) == ordered[0]
        assert percentile(ordered, 100) == ordered[-1]

    @given(values=st.lists(_dim_score, min_size=1, max_size=49).filter(lambda v: len(v) % 2 == 1))
    def test_odd_median_is_middle_element(self, values):
        ordered = sorted(values)
        assert percentile(ordered, 50) == ordered[len(ordered) // 2]

    @given(score=_int_score, count=st.integers(min_value=1, max_value=20))
    @h_settings(max_examples=200)
    def test_equal_scores_zero_volatility(self, score, count):
        records = [_record(score, worker_id=f"w{i}") for i in range(count)]
        period = TrendAnalyzer.aggregate_period("2026-03-01", records)
        assert period.volatility == 0
        assert period.overall_score == score

    @given(previous=_int_score, latest=_int_score)
    def test_rapid_drop_iff_drop_exceeds_threshold(self, previous, latest):
        records = [_record(previous, offset_days=0), _record(latest, offset_days=1)]
        types = [a.type for a in AnomalyDetector().detect(records).anomalies]
        assert (AnomalyType.RAPID_DROP in types) == (previous - latest > 20)
        assert (AnomalyType.SUSTAINED_LOW_SCORE in types) == (previous < 50 and latest < 50)

    @given(
        high=st.integers(min_value=0, max_value=4),
        medium=st.integers(min_value=0, max_value=4),
        low=st.integers(min_value=0, max_value=4),
        max_topics=st.integers(min_value=1, max_value=6),
    )
    @h_settings(max_examples=300)
    def test_priority_selection_size(self, high, medium, low, max_topics):
        if high + medium + low == 0:
            return
        topics = []
        for tier, count in ((TopicPriority.HIGH, high), (TopicPriority.MEDIUM, medium), (TopicPriority.LOW, low)):
            topics += [
                MessagingTopic(
                    id=f"{tier.value}{i}", name=f"{tier.value} {i}", description="d",
                    priority=tier, sample_prompts=["?"],
                )
                for i in range(count)
            ]
        config = MessagingConfig(
            customer_id="c1",
            topics=topics,
            global_settings=MessagingSettings(max_topics_per_prompt=max_topics),
        )
        selected = TopicSelector().select(config).topics
        expected = min(
            max_topics,
            min(high, math.ceil(max_topics / 2))
            + min(medium, math.ceil(max_topics / 3))
            + min(low, math.ceil(max_topics / 6)),
        )
        assert len(selected) == expected
        if high:
            assert selected[0].priority == TopicPriority.HIGH
