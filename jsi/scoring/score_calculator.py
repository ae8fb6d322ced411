"""JSI score calculator.

Overall score
-------------
  overall = round( Σ weight[d] × dimension[d] )   over the five dimensions

The combination is a literal weighted sum, not a weighted average; the
default weights (0.3 / 0.2 / 0.2 / 0.2 / 0.1) sum to 1.0, so the scale of
custom weights is the configurer's responsibility. The stored score is
clamped to [0, 100].

Classification
--------------
  trend : Δ vs. the worker's previous record, ±5 deadband (fixed)
  risk  : ≤ risk_flag_threshold → high, ≤ low_score_threshold → medium, else low
  flags : low_overall_score plus fixed per-dimension cutoffs (40/40/40/30/40)
"""
from datetime import datetime
from typing import Mapping, Optional, Union

import pydantic
import structlog

from jsi.errors import ConfigDisabled, ValidationError
from jsi.models.enums import DIMENSION_FLAGS, Dimension, RiskLevel, Trend
from jsi.models.score import (
    DEFAULT_SCORING_CONFIG,
    DimensionSet,
    ScoreRecord,
    ScoreRequest,
    ScoringConfig,
)
from jsi.scoring.utils import clamp, round_half_up, weighted_sum

logger = structlog.get_logger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────────
TREND_DEADBAND: int = 5
LOW_OVERALL_FLAG = "low_overall_score"


def _coerce_dimensions(dimensions: Union[DimensionSet, Mapping[str, float]]) -> DimensionSet:
    if isinstance(dimensions, DimensionSet):
        return dimensions
    try:
        return DimensionSet.model_validate(dict(dimensions))
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid dimension scores: {first.get('msg', 'invalid value')}",
            field=field,
        ) from exc


class ScoreCalculator:
    """Compute a ScoreRecord from five dimension scores.

    Parameters
    ----------
    config:
        Scoring configuration (weights, thresholds, enabled flag). Defaults
        to ``DEFAULT_SCORING_CONFIG``.
    """

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or DEFAULT_SCORING_CONFIG
        logger.debug(
            "score_calculator_initialized",
            customer_id=self.config.customer_id,
            enabled=self.config.enabled,
            weights=self.config.weights.model_dump(),
        )

    # ── building blocks ──────────────────────────────────────────────────────

    def calculate_overall(self, dimensions: DimensionSet) -> int:
        """Weighted sum of the five dimensions, rounded half-up and clamped."""
        values = [dimensions.get(d) for d in Dimension]
        weights = [self.config.weights.get(d) for d in Dimension]
        raw = weighted_sum(values, weights)
        return round_half_up(clamp(raw))

    @staticmethod
    def classify_trend(overall_score: int, prior: Optional[ScoreRecord]) -> Trend:
        if prior is None:
            return Trend.STABLE
        delta = overall_score - prior.overall_score
        if delta > TREND_DEADBAND:
            return Trend.UP
        if delta < -TREND_DEADBAND:
            return Trend.DOWN
        return Trend.STABLE

    def classify_risk(self, overall_score: int) -> RiskLevel:
        thresholds = self.config.thresholds
        if overall_score <= thresholds.risk_flag_threshold:
            return RiskLevel.HIGH
        if overall_score <= thresholds.low_score_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def generate_flags(self, dimensions: DimensionSet, overall_score: int) -> list[str]:
        flags: list[str] = []
        if overall_score <= self.config.thresholds.low_score_threshold:
            flags.append(LOW_OVERALL_FLAG)
        for dimension, (flag, cutoff) in DIMENSION_FLAGS.items():
            if dimensions.get(dimension) <= cutoff:
                flags.append(flag)
        return flags

    # ── public API ───────────────────────────────────────────────────────────

    def calculate(
        self,
        worker_id: str,
        customer_id: str,
        dimensions: Union[DimensionSet, Mapping[str, float]],
        prior: Optional[ScoreRecord] = None,
        *,
        agency_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        **context: Optional[str],
    ) -> ScoreRecord:
        """Score one measurement event.

        Args:
            worker_id: Worker the measurement belongs to.
            customer_id: Tenant the worker is placed with.
            dimensions: DimensionSet, or a mapping of dimension name → score.
            prior: The worker's most recent earlier record, if any.
            agency_id: Optional agency identifier.
            timestamp: Measurement time; defaults to now (UTC).
            **context: ``department``, ``location``, ``supervisor``, ``team``,
                ``worker_name`` classification fields.

        Returns:
            A new, immutable ScoreRecord.

        Raises:
            ConfigDisabled: If scoring is disabled for the customer.
            ValidationError: On missing identifiers, out-of-range dimensions,
                or a ``prior`` that is not an earlier record of this worker.
        """
        if not self.config.enabled:
            raise ConfigDisabled(f"JSI is not enabled for customer {customer_id}")
        if not worker_id or not customer_id:
            raise ValidationError("Missing required parameters: worker_id, customer_id")

        dims = _coerce_dimensions(dimensions)

        if prior is not None:
            if prior.worker_id != worker_id:
                raise ValidationError(
                    f"Prior record belongs to worker {prior.worker_id}, not {worker_id}",
                    field="prior",
                )

        overall = self.calculate_overall(dims)
        trend = self.classify_trend(overall, prior)
        risk_level = self.classify_risk(overall)
        flags = self.generate_flags(dims, overall)

        fields = {
            "worker_id": worker_id,
            "customer_id": customer_id,
            "agency_id": agency_id,
            "dimensions": dims,
            "overall_score": overall,
            "trend": trend,
            "risk_level": risk_level,
            "flags": flags,
            **{k: v for k, v in context.items() if v is not None},
        }
        if timestamp is not None:
            fields["timestamp"] = timestamp
        try:
            record = ScoreRecord(**fields)
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid score record: {exc.errors()[0]['msg']}") from exc

        if prior is not None and prior.timestamp > record.timestamp:
            raise ValidationError(
                "Prior record is later than the new measurement",
                field="prior",
            )

        logger.info(
            "score_calculated",
            worker_id=worker_id,
            customer_id=customer_id,
            overall_score=overall,
            trend=trend.value,
            risk_level=risk_level.value,
            flags=flags,
        )
        return record

    def calculate_from_request(
        self,
        request: ScoreRequest,
        prior: Optional[ScoreRecord] = None,
    ) -> ScoreRecord:
        """Convenience wrapper taking a validated ScoreRequest."""
        return self.calculate(
            request.worker_id,
            request.customer_id,
            request.dimensions,
            prior,
            agency_id=request.agency_id,
            timestamp=request.timestamp,
            department=request.department,
            location=request.location,
            supervisor=request.supervisor,
            team=request.team,
            worker_name=request.worker_name,
        )
