"""Peer benchmarks over a population of score records.

Global benchmark: every record (optionally date-filtered).
Industry benchmark: records of customers tagged with the industry code.

Means are unrounded; percentiles of overall score use linear interpolation
between closest ranks (see ``jsi.scoring.utils.percentile``). Empty
populations yield an all-zero benchmark rather than an error.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

import structlog

from jsi.errors import NotFound
from jsi.models.analytics import (
    Benchmark,
    CustomerBenchmarks,
    CustomerProfile,
    DateRange,
    Percentiles,
)
from jsi.models.enums import BenchmarkType, Dimension
from jsi.models.score import ScoreRecord
from jsi.scoring.filters import RecordFilter
from jsi.scoring.utils import mean, percentile

logger = structlog.get_logger(__name__)

UNKNOWN_INDUSTRY = "Unknown Industry"
PERCENTILE_POINTS = (25, 50, 75, 90)


def calculate_percentiles(scores: Sequence[float]) -> Percentiles:
    """p25 / p50 / p75 / p90 of ``scores``; all zero for an empty input."""
    if not scores:
        return Percentiles()
    ordered = sorted(scores)
    p25, p50, p75, p90 = (percentile(ordered, p) for p in PERCENTILE_POINTS)
    return Percentiles(p25=p25, p50=p50, p75=p75, p90=p90)


class BenchmarkCalculator:
    """Compute global and industry benchmarks from materialised records."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self._now = now

    def _timestamp(self) -> datetime:
        return self._now or datetime.now(timezone.utc)

    def _aggregate(
        self,
        records: List[ScoreRecord],
        benchmark_type: BenchmarkType,
        date_range: Optional[DateRange],
        **identity,
    ) -> Benchmark:
        overall = [r.overall_score for r in records]
        means = {
            d.value: mean(r.dimensions.get(d) for r in records) for d in Dimension
        }
        return Benchmark(
            type=benchmark_type,
            overall_score=mean(overall),
            worker_count=len(records),
            customer_count=len({r.customer_id for r in records}),
            percentiles=calculate_percentiles(overall),
            date_range=date_range or DateRange(),
            calculated_at=self._timestamp(),
            **means,
            **identity,
        )

    def calculate_global(
        self,
        records: Iterable[ScoreRecord],
        date_range: Optional[DateRange] = None,
    ) -> Benchmark:
        """Benchmark across every customer in ``records``."""
        population = RecordFilter.from_date_range(date_range).apply(records)
        if not population:
            logger.info("global_benchmark_empty")
            return Benchmark(
                type=BenchmarkType.GLOBAL,
                date_range=date_range or DateRange(),
                calculated_at=self._timestamp(),
            )

        benchmark = self._aggregate(population, BenchmarkType.GLOBAL, date_range)
        logger.info(
            "global_benchmark_calculated",
            worker_count=benchmark.worker_count,
            customer_count=benchmark.customer_count,
            overall_score=benchmark.overall_score,
        )
        return benchmark

    def calculate_industry(
        self,
        industry_code: str,
        records: Iterable[ScoreRecord],
        customers: Iterable[CustomerProfile],
        date_range: Optional[DateRange] = None,
    ) -> Benchmark:
        """Benchmark across customers whose industry code matches.

        Args:
            industry_code: Industry to benchmark.
            records: Candidate population (any customers).
            customers: Industry membership of known customers.
            date_range: Optional inclusive window.
        """
        members = [c for c in customers if c.industry_code == industry_code]
        if not members:
            logger.info("industry_benchmark_no_customers", industry_code=industry_code)
            return Benchmark(
                type=BenchmarkType.INDUSTRY,
                industry_code=industry_code,
                industry_name=UNKNOWN_INDUSTRY,
                customer_count=0,
                date_range=date_range or DateRange(),
                calculated_at=self._timestamp(),
            )

        member_ids = {c.customer_id for c in members}
        population = [
            r for r in RecordFilter.from_date_range(date_range).apply(records)
            if r.customer_id in member_ids
        ]
        if not population:
            return Benchmark(
                type=BenchmarkType.INDUSTRY,
                industry_code=industry_code,
                industry_name=UNKNOWN_INDUSTRY,
                customer_count=len(member_ids),
                date_range=date_range or DateRange(),
                calculated_at=self._timestamp(),
            )

        benchmark = self._aggregate(
            population,
            BenchmarkType.INDUSTRY,
            date_range,
            industry_code=industry_code,
            industry_name=members[0].industry_name or UNKNOWN_INDUSTRY,
        )
        logger.info(
            "industry_benchmark_calculated",
            industry_code=industry_code,
            worker_count=benchmark.worker_count,
            customer_count=benchmark.customer_count,
        )
        return benchmark

    def customer_benchmarks(
        self,
        customer_id: str,
        records: Iterable[ScoreRecord],
        customers: Iterable[CustomerProfile],
        date_range: Optional[DateRange] = None,
    ) -> CustomerBenchmarks:
        """Global benchmark, plus industry benchmark when the customer has one.

        Raises:
            NotFound: If ``customer_id`` is not among ``customers``.
        """
        profiles = list(customers)
        population = list(records)
        profile = next((c for c in profiles if c.customer_id == customer_id), None)
        if profile is None:
            raise NotFound(f"Customer {customer_id} not found", field="customer_id")

        global_benchmark = self.calculate_global(population, date_range)
        industry = None
        if profile.industry_code:
            industry = self.calculate_industry(
                profile.industry_code, population, profiles, date_range
            )
        return CustomerBenchmarks(global_benchmark=global_benchmark, industry=industry)
