"""Baseline and benchmark models."""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .enums import BenchmarkType


class DateRange(BaseModel):
    """Inclusive date range as ISO strings; empty strings mean unbounded."""
    start: str = ""
    end: str = ""


class Percentiles(BaseModel):
    """Percentiles of overall score across a population."""
    p25: float = 0
    p50: float = 0
    p75: float = 0
    p90: float = 0


class Baseline(BaseModel):
    """Trailing-window reference averages for a customer slice."""
    customer_id: str
    department: Optional[str] = None
    location: Optional[str] = None
    overall_score: int
    work_engagement: int
    career_alignment: int
    manager_relationship: int
    personal_wellbeing: int
    job_mobility: int
    date_range: DateRange
    worker_count: int = Field(..., ge=0)
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def baseline_id(self) -> str:
        return baseline_key(self.customer_id, self.department, self.location)


def baseline_key(
    customer_id: str,
    department: Optional[str] = None,
    location: Optional[str] = None,
) -> str:
    """Identity key ``customer_department-or-all_location-or-all``."""
    return f"{customer_id}_{department or 'all'}_{location or 'all'}"


class Benchmark(BaseModel):
    """Aggregate statistics over a global or industry population."""
    type: BenchmarkType
    industry_code: Optional[str] = None
    industry_name: Optional[str] = None
    overall_score: float = 0
    work_engagement: float = 0
    career_alignment: float = 0
    manager_relationship: float = 0
    personal_wellbeing: float = 0
    job_mobility: float = 0
    worker_count: int = 0
    customer_count: int = 0
    percentiles: Percentiles = Field(default_factory=Percentiles)
    date_range: DateRange = Field(default_factory=DateRange)
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CustomerProfile(BaseModel):
    """Industry membership of a customer, used to resolve industry benchmarks."""
    customer_id: str
    industry_code: Optional[str] = None
    industry_name: Optional[str] = None


class CustomerBenchmarks(BaseModel):
    """Global benchmark plus the customer's industry benchmark, if any."""
    global_benchmark: Benchmark = Field(..., alias="global")
    industry: Optional[Benchmark] = None

    model_config = {"populate_by_name": True}
