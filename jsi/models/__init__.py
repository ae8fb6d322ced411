"""Pydantic models for the JSI engine."""

# Common Models
from jsi.models.common import (
    HealthResponse,
    ErrorResponse,
)

# Enums
from jsi.models.enums import (
    AnomalyType,
    BenchmarkType,
    DEFAULT_DIMENSION_WEIGHTS,
    DIMENSION_FLAGS,
    Dimension,
    ExportFormat,
    ExportType,
    Granularity,
    MomentumDirection,
    RiskLevel,
    RotationStrategy,
    Severity,
    TopicCategory,
    TopicFrequency,
    TopicPriority,
    Trend,
)

# Scores
from jsi.models.score import (
    AlertThresholds,
    DEFAULT_SCORING_CONFIG,
    DimensionSet,
    ScoreRecord,
    ScoreRequest,
    ScoringConfig,
    ScoringWeights,
    merge_scoring_config,
)

# Baselines / Benchmarks
from jsi.models.analytics import (
    Baseline,
    Benchmark,
    CustomerBenchmarks,
    CustomerProfile,
    DateRange,
    Percentiles,
    baseline_key,
)

# Messaging
from jsi.models.messaging import (
    CustomTopicCreate,
    DEFAULT_TOPICS,
    MessagingConfig,
    MessagingConfigUpdate,
    MessagingSettings,
    MessagingTopic,
    default_messaging_config,
    messaging_config_key,
)

__all__ = [
    # Common
    "HealthResponse",
    "ErrorResponse",
    # Enums
    "AnomalyType",
    "BenchmarkType",
    "DEFAULT_DIMENSION_WEIGHTS",
    "DIMENSION_FLAGS",
    "Dimension",
    "ExportFormat",
    "ExportType",
    "Granularity",
    "MomentumDirection",
    "RiskLevel",
    "RotationStrategy",
    "Severity",
    "TopicCategory",
    "TopicFrequency",
    "TopicPriority",
    "Trend",
    # Scores
    "AlertThresholds",
    "DEFAULT_SCORING_CONFIG",
    "DimensionSet",
    "ScoreRecord",
    "ScoreRequest",
    "ScoringConfig",
    "ScoringWeights",
    "merge_scoring_config",
    # Baselines / Benchmarks
    "Baseline",
    "Benchmark",
    "CustomerBenchmarks",
    "CustomerProfile",
    "DateRange",
    "Percentiles",
    "baseline_key",
    # Messaging
    "CustomTopicCreate",
    "DEFAULT_TOPICS",
    "MessagingConfig",
    "MessagingConfigUpdate",
    "MessagingSettings",
    "MessagingTopic",
    "default_messaging_config",
    "messaging_config_key",
]
