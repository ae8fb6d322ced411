"""Trailing-window baseline for a customer / department / location slice.

Always a full recompute over the window (default 14 days ending now); the
baseline is used as the reference for percentage-change comparisons.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog

from jsi.errors import EmptyPopulation
from jsi.models.analytics import Baseline, DateRange
from jsi.models.enums import Dimension
from jsi.models.score import ScoreRecord
from jsi.scoring.filters import RecordFilter, normalise_slice
from jsi.scoring.utils import mean, round_half_up

logger = structlog.get_logger(__name__)

DEFAULT_WINDOW_DAYS: int = 14


class BaselineCalculator:
    """Compute rounded reference averages over a trailing window."""

    def __init__(self, window_days: int = DEFAULT_WINDOW_DAYS) -> None:
        self.window_days = window_days

    def calculate(
        self,
        customer_id: str,
        records: Iterable[ScoreRecord],
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Baseline:
        """Baseline for one slice.

        Args:
            customer_id: Customer to baseline.
            records: Candidate records; filtered here by customer, slice and window.
            department: Department filter; ``"all"`` / ``None`` means every department.
            location: Location filter; ``"all"`` / ``None`` means every location.
            window_days: Override the calculator's window length.
            now: End of the window (defaults to current UTC time).

        Raises:
            EmptyPopulation: If no record falls in the slice.
        """
        end = now or datetime.now(timezone.utc)
        days = window_days or self.window_days
        department = normalise_slice(department)
        location = normalise_slice(location)

        window = RecordFilter.trailing(
            days,
            now=end,
            customer_id=customer_id,
            department=department,
            location=location,
        )
        population = window.apply(records)
        if not population:
            raise EmptyPopulation(
                f"No JSI scores found for baseline calculation "
                f"({customer_id}, {department or 'all'}, {location or 'all'})"
            )

        averages = {
            d.value: round_half_up(mean(r.dimensions.get(d) for r in population))
            for d in Dimension
        }
        baseline = Baseline(
            customer_id=customer_id,
            department=department,
            location=location,
            overall_score=round_half_up(mean(r.overall_score for r in population)),
            date_range=DateRange(
                start=window.start.date().isoformat(),
                end=end.date().isoformat(),
            ),
            worker_count=len(population),
            calculated_at=end,
            **averages,
        )
        logger.info(
            "baseline_calculated",
            baseline_id=baseline.baseline_id,
            worker_count=baseline.worker_count,
            overall_score=baseline.overall_score,
        )
        return baseline
