"""Enumeration types for the JSI engine."""
from enum import Enum


class Dimension(str, Enum):
    """The five dimensions of job satisfaction."""
    WORK_ENGAGEMENT = "work_engagement"
    CAREER_ALIGNMENT = "career_alignment"
    MANAGER_RELATIONSHIP = "manager_relationship"
    PERSONAL_WELLBEING = "personal_wellbeing"
    JOB_MOBILITY = "job_mobility"


class Trend(str, Enum):
    """Direction of a worker's score relative to their previous record."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Granularity(str, Enum):
    """Period size used when grouping a score history."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class MomentumDirection(str, Enum):
    STRONGLY_IMPROVING = "strongly_improving"
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    STRONGLY_DECLINING = "strongly_declining"
    INSUFFICIENT_DATA = "insufficient_data"


class AnomalyType(str, Enum):
    RAPID_DROP = "rapid_drop"
    SUSTAINED_LOW_SCORE = "sustained_low_score"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BenchmarkType(str, Enum):
    GLOBAL = "global"
    INDUSTRY = "industry"


class TopicPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TopicFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class TopicCategory(str, Enum):
    WELLBEING = "wellbeing"
    ENGAGEMENT = "engagement"
    CAREER = "career"
    RELATIONSHIPS = "relationships"
    CUSTOM = "custom"


class RotationStrategy(str, Enum):
    """How topics are chosen for a prompt."""
    RANDOM = "random"
    PRIORITY = "priority"
    FREQUENCY = "frequency"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ExportType(str, Enum):
    DETAILED = "detailed"
    SUMMARY = "summary"


# Default weights per dimension (sum to 1.0; the engine does not require it)
DEFAULT_DIMENSION_WEIGHTS: dict[Dimension, float] = {
    Dimension.WORK_ENGAGEMENT: 0.3,
    Dimension.CAREER_ALIGNMENT: 0.2,
    Dimension.MANAGER_RELATIONSHIP: 0.2,
    Dimension.PERSONAL_WELLBEING: 0.2,
    Dimension.JOB_MOBILITY: 0.1,
}


# Per-dimension flag cutoffs (inclusive); independent of ScoringConfig
DIMENSION_FLAGS: dict[Dimension, tuple[str, float]] = {
    Dimension.WORK_ENGAGEMENT: ("low_engagement", 40),
    Dimension.CAREER_ALIGNMENT: ("career_misalignment", 40),
    Dimension.MANAGER_RELATIONSHIP: ("manager_issues", 40),
    Dimension.JOB_MOBILITY: ("mobility_risk", 30),
    Dimension.PERSONAL_WELLBEING: ("wellbeing_concern", 40),
}
