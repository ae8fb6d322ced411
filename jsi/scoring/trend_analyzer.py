"""Time-series trend analysis over a slice of score history.

Records are grouped into periods keyed by their UTC calendar date:

  day   → ``YYYY-MM-DD``
  week  → ``YYYY-MM-DD`` of the Sunday that starts the week
  month → ``YYYY-MM``

Each period reports rounded dimension averages, volatility (population
standard deviation of overall score), risk / trend distributions and the
number of records. Momentum is the average per-period change across the
last three periods:

  momentum   = (overall[-1] − overall[-3]) / 2
  confidence = max(0, 100 − 2 × mean volatility of those periods)
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Union

import structlog

from jsi.models.enums import Dimension, Granularity, MomentumDirection, RiskLevel, Trend
from jsi.models.score import ScoreRecord
from jsi.scoring.filters import sort_by_time
from jsi.scoring.utils import mean, population_std_dev, round_half_up, round_to

logger = structlog.get_logger(__name__)

MOMENTUM_WINDOW: int = 3
STRONG_MOMENTUM: float = 2.0


@dataclass
class PeriodAggregate:
    """Aggregated scores for one period."""

    period: str
    overall_score: int
    work_engagement: int
    career_alignment: int
    manager_relationship: int
    personal_wellbeing: int
    job_mobility: int
    worker_count: int
    volatility: int
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    trend_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "date": self.period,
            "overall_score": self.overall_score,
            "work_engagement": self.work_engagement,
            "career_alignment": self.career_alignment,
            "manager_relationship": self.manager_relationship,
            "personal_wellbeing": self.personal_wellbeing,
            "job_mobility": self.job_mobility,
            "worker_count": self.worker_count,
            "volatility": self.volatility,
            "risk_distribution": dict(self.risk_distribution),
            "trend_distribution": dict(self.trend_distribution),
        }


@dataclass
class MomentumAnalysis:
    """Direction and strength of the most recent movement."""

    direction: MomentumDirection
    momentum: float
    confidence: int
    volatility: int = 0

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "momentum": self.momentum,
            "confidence": self.confidence,
            "volatility": self.volatility,
        }


@dataclass
class TrendReport:
    """Per-period aggregates plus momentum analysis."""

    granularity: Granularity
    periods: List[PeriodAggregate]
    analysis: MomentumAnalysis

    def to_dict(self) -> dict:
        return {
            "granularity": self.granularity.value,
            "trend_data": [p.to_dict() for p in self.periods],
            "analysis": self.analysis.to_dict(),
        }


def period_key(day: date, granularity: Granularity) -> str:
    """Key of the period containing ``day``."""
    if granularity == Granularity.WEEK:
        # date.weekday(): Monday=0 … Sunday=6; shift so Sunday starts the week
        days_since_sunday = (day.weekday() + 1) % 7
        return (day - timedelta(days=days_since_sunday)).isoformat()
    if granularity == Granularity.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    return day.isoformat()


def risk_counts(records: Iterable[ScoreRecord]) -> Dict[str, int]:
    counts = {level.value: 0 for level in RiskLevel}
    for r in records:
        counts[r.risk_level.value] += 1
    return counts


def trend_counts(records: Iterable[ScoreRecord]) -> Dict[str, int]:
    counts = {"improving": 0, "declining": 0, "stable": 0}
    for r in records:
        if r.trend == Trend.UP:
            counts["improving"] += 1
        elif r.trend == Trend.DOWN:
            counts["declining"] += 1
        else:
            counts["stable"] += 1
    return counts


class TrendAnalyzer:
    """Group a score history into periods and classify its momentum."""

    @staticmethod
    def resolve_granularity(granularity: Union[Granularity, str, None]) -> Granularity:
        """Parse a granularity.

        ``None`` means ``week``; unknown strings fall back to ``day``. The
        report carries the resolved value, not the caller's raw string.
        """
        if granularity is None:
            return Granularity.WEEK
        if isinstance(granularity, Granularity):
            return granularity
        try:
            return Granularity(granularity)
        except ValueError:
            logger.warning("unknown_granularity", granularity=granularity, fallback="day")
            return Granularity.DAY

    def group_by_period(
        self,
        records: Iterable[ScoreRecord],
        granularity: Granularity,
    ) -> Dict[str, List[ScoreRecord]]:
        groups: Dict[str, List[ScoreRecord]] = defaultdict(list)
        for record in sort_by_time(records):
            groups[period_key(record.timestamp.date(), granularity)].append(record)
        return dict(sorted(groups.items()))

    @staticmethod
    def aggregate_period(period: str, records: List[ScoreRecord]) -> PeriodAggregate:
        overall = [r.overall_score for r in records]
        averages = {
            d.value: round_half_up(mean(r.dimensions.get(d) for r in records))
            for d in Dimension
        }
        return PeriodAggregate(
            period=period,
            overall_score=round_half_up(mean(overall)),
            worker_count=len(records),
            volatility=round_half_up(population_std_dev(overall)),
            risk_distribution=risk_counts(records),
            trend_distribution=trend_counts(records),
            **averages,
        )

    @staticmethod
    def analyze_momentum(periods: List[PeriodAggregate]) -> MomentumAnalysis:
        """Classify the movement across the last three periods."""
        if len(periods) < MOMENTUM_WINDOW:
            return MomentumAnalysis(
                direction=MomentumDirection.INSUFFICIENT_DATA,
                momentum=0.0,
                confidence=0,
            )

        recent = periods[-MOMENTUM_WINDOW:]
        momentum = (recent[-1].overall_score - recent[0].overall_score) / 2

        if momentum > STRONG_MOMENTUM:
            direction = MomentumDirection.STRONGLY_IMPROVING
        elif momentum > 0:
            direction = MomentumDirection.IMPROVING
        elif momentum < -STRONG_MOMENTUM:
            direction = MomentumDirection.STRONGLY_DECLINING
        elif momentum < 0:
            direction = MomentumDirection.DECLINING
        else:
            direction = MomentumDirection.STABLE

        volatility = sum(p.volatility for p in recent) / len(recent)
        confidence = max(0.0, 100 - 2 * volatility)

        return MomentumAnalysis(
            direction=direction,
            momentum=round_to(momentum, 1),
            confidence=round_half_up(confidence),
            volatility=round_half_up(volatility),
        )

    def analyze(
        self,
        records: Iterable[ScoreRecord],
        granularity: Union[Granularity, str, None] = Granularity.WEEK,
    ) -> TrendReport:
        """Group ``records`` (any order) and analyse momentum.

        Args:
            records: Score history slice; sorted internally.
            granularity: ``day``, ``week`` or ``month``.

        Returns:
            TrendReport with periods ordered by key ascending.
        """
        resolved = self.resolve_granularity(granularity)
        groups = self.group_by_period(records, resolved)
        periods = [self.aggregate_period(key, group) for key, group in groups.items()]
        analysis = self.analyze_momentum(periods)

        logger.info(
            "trend_analyzed",
            granularity=resolved.value,
            periods=len(periods),
            direction=analysis.direction.value,
            momentum=analysis.momentum,
            confidence=analysis.confidence,
        )
        return TrendReport(granularity=resolved, periods=periods, analysis=analysis)
