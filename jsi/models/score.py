"""Score record and scoring configuration models."""
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import DEFAULT_DIMENSION_WEIGHTS, Dimension, RiskLevel, Trend


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DimensionSet(BaseModel):
    """Five dimension scores for one measurement event."""
    model_config = ConfigDict(frozen=True)

    work_engagement: float = Field(..., ge=0, le=100)
    career_alignment: float = Field(..., ge=0, le=100)
    manager_relationship: float = Field(..., ge=0, le=100)
    personal_wellbeing: float = Field(..., ge=0, le=100)
    job_mobility: float = Field(..., ge=0, le=100)

    def get(self, dimension: Dimension) -> float:
        return getattr(self, dimension.value)

    def as_dict(self) -> dict[str, float]:
        return {d.value: self.get(d) for d in Dimension}


class ScoringWeights(BaseModel):
    """Per-dimension weights. Combined as a literal weighted sum."""
    model_config = ConfigDict(frozen=True)

    work_engagement: float = Field(
        default=DEFAULT_DIMENSION_WEIGHTS[Dimension.WORK_ENGAGEMENT], ge=0
    )
    career_alignment: float = Field(
        default=DEFAULT_DIMENSION_WEIGHTS[Dimension.CAREER_ALIGNMENT], ge=0
    )
    manager_relationship: float = Field(
        default=DEFAULT_DIMENSION_WEIGHTS[Dimension.MANAGER_RELATIONSHIP], ge=0
    )
    personal_wellbeing: float = Field(
        default=DEFAULT_DIMENSION_WEIGHTS[Dimension.PERSONAL_WELLBEING], ge=0
    )
    job_mobility: float = Field(
        default=DEFAULT_DIMENSION_WEIGHTS[Dimension.JOB_MOBILITY], ge=0
    )

    def get(self, dimension: Dimension) -> float:
        return getattr(self, dimension.value)


class AlertThresholds(BaseModel):
    """Score thresholds driving risk level, flags and anomaly detection."""
    model_config = ConfigDict(frozen=True)

    low_score_threshold: float = 50
    rapid_drop_threshold: float = 20
    rapid_drop_days: int = Field(default=30, ge=1)
    risk_flag_threshold: float = 30

    @model_validator(mode="after")
    def check_ladder(self) -> "AlertThresholds":
        """Keep the risk ladder monotonic: high-risk cutoff <= low-score cutoff."""
        if self.risk_flag_threshold > self.low_score_threshold:
            raise ValueError(
                "risk_flag_threshold must be <= low_score_threshold"
            )
        return self


class ScoringConfig(BaseModel):
    """Scoring configuration for a customer (optionally per agency)."""
    model_config = ConfigDict(frozen=True)

    customer_id: str = ""
    agency_id: Optional[str] = None
    enabled: bool = True
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    thresholds: AlertThresholds = Field(default_factory=AlertThresholds)


DEFAULT_SCORING_CONFIG = ScoringConfig()


def merge_scoring_config(
    defaults: ScoringConfig,
    override: Optional[dict[str, Any]] = None,
) -> ScoringConfig:
    """Merge a stored (possibly partial) override onto the defaults.

    Nested ``weights`` and ``thresholds`` are merged key by key, so an
    override that only sets ``thresholds.low_score_threshold`` keeps every
    other default.
    """
    merged = defaults.model_dump()
    for key, value in (override or {}).items():
        if key in ("weights", "thresholds") and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        elif value is not None:
            merged[key] = value
    return ScoringConfig.model_validate(merged)


class ScoreRecord(BaseModel):
    """One measurement event for one worker at one point in time."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    worker_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    agency_id: Optional[str] = None
    worker_name: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    supervisor: Optional[str] = None
    team: Optional[str] = None
    dimensions: DimensionSet
    overall_score: int = Field(..., ge=0, le=100)
    trend: Trend = Trend.STABLE
    risk_level: RiskLevel = RiskLevel.LOW
    flags: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ai_summary: Optional[str] = None
    last_survey_response: Optional[str] = None
    recommended_action: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def normalise_timestamp(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def requires_alert(self) -> bool:
        """High risk or any flag means an alert should be raised downstream."""
        return self.risk_level == RiskLevel.HIGH or bool(self.flags)


class ScoreRequest(BaseModel):
    """Input for generating a new score record."""
    worker_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    agency_id: Optional[str] = None
    worker_name: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    supervisor: Optional[str] = None
    team: Optional[str] = None
    dimensions: DimensionSet
    timestamp: Optional[datetime] = None
