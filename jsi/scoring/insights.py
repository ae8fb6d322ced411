"""Aggregate statistics, report data and automated narrative insights.

Score bands
-----------
  stats  : low < 50 ≤ medium < 70 ≤ high
  report : poor < 40 ≤ fair < 60 ≤ good < 80 ≤ excellent

Insight rules
-------------
  average < 50 → below optimal; < 70 → moderate; else strong
  high-risk share   > 10 % → alert
  declining share   > 20 % → alert
  org slice needs attention when its average < 60 or high-risk share > 15 %
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from jsi.errors import EmptyPopulation
from jsi.models.analytics import Baseline
from jsi.models.enums import RiskLevel
from jsi.models.score import ScoreRecord
from jsi.scoring.trend_analyzer import risk_counts, trend_counts
from jsi.scoring.utils import mean, round_half_ceiling, round_half_up

logger = structlog.get_logger(__name__)

UNKNOWN = "Unknown"
HIGHLIGHT_COUNT: int = 5
HIGH_RISK_ALERT_SHARE: float = 0.10
DECLINING_ALERT_SHARE: float = 0.20
ATTENTION_AVERAGE: float = 60
ATTENTION_HIGH_RISK_SHARE: float = 0.15


@dataclass
class AggregateBucket:
    """Running totals for one department / location label."""

    count: int = 0
    total_score: int = 0
    risk_levels: Dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in RiskLevel}
    )

    def add(self, record: ScoreRecord) -> None:
        self.count += 1
        self.total_score += record.overall_score
        self.risk_levels[record.risk_level.value] += 1

    @property
    def average_score(self) -> int:
        if self.count == 0:
            return 0
        return round_half_up(self.total_score / self.count)

    @property
    def raw_average(self) -> float:
        return self.total_score / self.count if self.count else 0.0

    @property
    def needs_attention(self) -> bool:
        return (
            self.raw_average < ATTENTION_AVERAGE
            or self.risk_levels[RiskLevel.HIGH.value] > self.count * ATTENTION_HIGH_RISK_SHARE
        )

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total_score": self.total_score,
            "average_score": self.average_score,
            "risk_levels": dict(self.risk_levels),
        }


def bucket_by(
    records: Iterable[ScoreRecord],
    label: Callable[[ScoreRecord], Optional[str]],
) -> Dict[str, AggregateBucket]:
    buckets: Dict[str, AggregateBucket] = {}
    for record in records:
        key = label(record) or UNKNOWN
        buckets.setdefault(key, AggregateBucket()).add(record)
    return buckets


def percentage_change(current: float, baseline: float) -> Optional[int]:
    """Rounded % change vs. baseline; ``None`` when the baseline is zero.

    Halves round toward +infinity, so -2.5 reports as -2.
    """
    if baseline == 0:
        return None
    return round_half_ceiling((current - baseline) / baseline * 100)


@dataclass
class AggregateStats:
    total_workers: int = 0
    average_score: int = 0
    score_distribution: Dict[str, int] = field(
        default_factory=lambda: {"low": 0, "medium": 0, "high": 0}
    )
    risk_distribution: Dict[str, int] = field(
        default_factory=lambda: {"low": 0, "medium": 0, "high": 0}
    )
    trends: Dict[str, int] = field(
        default_factory=lambda: {"improving": 0, "declining": 0, "stable": 0}
    )

    def to_dict(self) -> dict:
        return {
            "total_workers": self.total_workers,
            "average_score": self.average_score,
            "score_distribution": dict(self.score_distribution),
            "risk_distribution": dict(self.risk_distribution),
            "trends": dict(self.trends),
        }


@dataclass
class BaselineComparison:
    current_average: int
    baseline_average: int
    percentage_change: Optional[int]
    trend: str

    def to_dict(self) -> dict:
        return {
            "current_average": self.current_average,
            "baseline_average": self.baseline_average,
            "percentage_change": self.percentage_change,
            "trend": self.trend,
        }


@dataclass
class ReportData:
    total_workers: int
    average_score: int
    baseline_comparison: Optional[BaselineComparison]
    score_distribution: Dict[str, int]
    risk_distribution: Dict[str, int]
    trend_distribution: Dict[str, int]
    departments: Dict[str, AggregateBucket]
    locations: Dict[str, AggregateBucket]
    top_performers: List[ScoreRecord]
    top_concerns: List[ScoreRecord]
    baseline: Optional[Baseline] = None

    def to_dict(self) -> dict:
        return {
            "summary": {
                "total_workers": self.total_workers,
                "average_score": self.average_score,
                "baseline_comparison": (
                    self.baseline_comparison.to_dict() if self.baseline_comparison else None
                ),
            },
            "distributions": {
                "score": dict(self.score_distribution),
                "risk": dict(self.risk_distribution),
                "trend": dict(self.trend_distribution),
            },
            "breakdowns": {
                "departments": {k: v.to_dict() for k, v in self.departments.items()},
                "locations": {k: v.to_dict() for k, v in self.locations.items()},
            },
            "highlights": {
                "top_performers": [r.model_dump(mode="json") for r in self.top_performers],
                "top_concerns": [r.model_dump(mode="json") for r in self.top_concerns],
            },
            "baseline": self.baseline.model_dump(mode="json") if self.baseline else None,
        }


@dataclass
class Insights:
    stats: AggregateStats
    key_findings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    alerts: List[str] = field(default_factory=list)
    organizational: Optional[Dict[str, Dict[str, dict]]] = None

    def to_dict(self) -> dict:
        return {
            "summary": {
                "total_workers": self.stats.total_workers,
                "average_score": self.stats.average_score,
                "risk_levels": dict(self.stats.risk_distribution),
                "trends": dict(self.stats.trends),
            },
            "key_findings": list(self.key_findings),
            "recommendations": list(self.recommendations),
            "alerts": list(self.alerts),
            "organizational": self.organizational,
        }


class InsightsGenerator:
    """Summarise a record slice into statistics, reports and insights."""

    def aggregate_stats(self, records: Iterable[ScoreRecord]) -> AggregateStats:
        population = list(records)
        if not population:
            return AggregateStats()
        scores = [r.overall_score for r in population]
        return AggregateStats(
            total_workers=len(population),
            average_score=round_half_up(mean(scores)),
            score_distribution={
                "low": sum(1 for s in scores if s < 50),
                "medium": sum(1 for s in scores if 50 <= s < 70),
                "high": sum(1 for s in scores if s >= 70),
            },
            risk_distribution=risk_counts(population),
            trends=trend_counts(population),
        )

    @staticmethod
    def compare_to_baseline(average: float, baseline: Optional[Baseline]) -> Optional[BaselineComparison]:
        if baseline is None:
            return None
        if average > baseline.overall_score:
            trend = "improving"
        elif average < baseline.overall_score:
            trend = "declining"
        else:
            trend = "stable"
        return BaselineComparison(
            current_average=round_half_up(average),
            baseline_average=baseline.overall_score,
            percentage_change=percentage_change(average, baseline.overall_score),
            trend=trend,
        )

    def report_data(
        self,
        records: Iterable[ScoreRecord],
        baseline: Optional[Baseline] = None,
    ) -> ReportData:
        """Distributions, breakdowns and highlights for a record slice."""
        population = list(records)
        scores = [r.overall_score for r in population]
        average = mean(scores)
        ranked = sorted(population, key=lambda r: r.overall_score, reverse=True)

        report = ReportData(
            total_workers=len(population),
            average_score=round_half_up(average),
            baseline_comparison=self.compare_to_baseline(average, baseline),
            score_distribution={
                "excellent": sum(1 for s in scores if s >= 80),
                "good": sum(1 for s in scores if 60 <= s < 80),
                "fair": sum(1 for s in scores if 40 <= s < 60),
                "poor": sum(1 for s in scores if s < 40),
            },
            risk_distribution=risk_counts(population),
            trend_distribution=trend_counts(population),
            departments=bucket_by(population, lambda r: r.department),
            locations=bucket_by(population, lambda r: r.location),
            top_performers=ranked[:HIGHLIGHT_COUNT],
            top_concerns=list(reversed(ranked[-HIGHLIGHT_COUNT:])),
            baseline=baseline,
        )
        logger.info(
            "report_data_generated",
            total_workers=report.total_workers,
            average_score=report.average_score,
            departments=len(report.departments),
            locations=len(report.locations),
        )
        return report

    @staticmethod
    def organizational_insights(records: List[ScoreRecord]) -> Dict[str, Dict[str, dict]]:
        """Per-department and per-location health summaries."""

        def summarise(buckets: Dict[str, AggregateBucket]) -> Dict[str, dict]:
            return {
                label: {
                    "worker_count": b.count,
                    "average_score": b.average_score,
                    "risk_levels": dict(b.risk_levels),
                    "needs_attention": b.needs_attention,
                }
                for label, b in buckets.items()
            }

        return {
            "departments": summarise(bucket_by(records, lambda r: r.department)),
            "locations": summarise(bucket_by(records, lambda r: r.location)),
        }

    def generate_insights(
        self,
        records: Iterable[ScoreRecord],
        include_organizational: bool = False,
    ) -> Insights:
        """Key findings, recommendations and alerts for a record slice.

        Raises:
            EmptyPopulation: If ``records`` is empty.
        """
        population = list(records)
        if not population:
            raise EmptyPopulation("No JSI scores found for insights generation")

        stats = self.aggregate_stats(population)
        insights = Insights(stats=stats)
        total = stats.total_workers

        if stats.average_score < 50:
            insights.key_findings.append("Overall job satisfaction is below optimal levels")
            insights.recommendations.append(
                "Implement immediate intervention programs for low-scoring workers"
            )
        elif stats.average_score < 70:
            insights.key_findings.append(
                "Job satisfaction is moderate with room for improvement"
            )
            insights.recommendations.append(
                "Focus on targeted improvements in specific satisfaction dimensions"
            )
        else:
            insights.key_findings.append("Job satisfaction is strong across the organization")
            insights.recommendations.append(
                "Maintain current positive practices and monitor for sustained performance"
            )

        high_risk = stats.risk_distribution[RiskLevel.HIGH.value]
        if high_risk > total * HIGH_RISK_ALERT_SHARE:
            insights.alerts.append(
                f"High risk workers represent {round_half_up(high_risk / total * 100)}% of workforce"
            )
            insights.recommendations.append(
                "Prioritize high-risk worker interventions and support programs"
            )

        declining = stats.trends["declining"]
        if declining > total * DECLINING_ALERT_SHARE:
            insights.alerts.append(
                f"Declining satisfaction trends detected in "
                f"{round_half_up(declining / total * 100)}% of workers"
            )
            insights.recommendations.append(
                "Investigate root causes of declining satisfaction and implement corrective measures"
            )

        if include_organizational:
            insights.organizational = self.organizational_insights(population)

        logger.info(
            "insights_generated",
            total_workers=total,
            average_score=stats.average_score,
            alerts=len(insights.alerts),
        )
        return insights
