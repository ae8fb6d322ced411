"""Scoring engine: per-record scores and population analytics."""
from .anomaly_detector import Anomaly, AnomalyDetector, AnomalyReport
from .baseline_calculator import BaselineCalculator
from .benchmark_calculator import BenchmarkCalculator, calculate_percentiles
from .export import ExportResult, ReportExporter
from .insights import AggregateBucket, Insights, InsightsGenerator, ReportData
from .score_calculator import ScoreCalculator
from .topic_selector import TopicSelection, TopicSelector
from .trend_analyzer import TrendAnalyzer, TrendReport

__all__ = [
    # Per-record
    "ScoreCalculator",
    # Population analytics
    "TrendAnalyzer",
    "TrendReport",
    "AnomalyDetector",
    "AnomalyReport",
    "Anomaly",
    "BenchmarkCalculator",
    "calculate_percentiles",
    "BaselineCalculator",
    "InsightsGenerator",
    "Insights",
    "ReportData",
    "AggregateBucket",
    # Messaging / reporting
    "TopicSelector",
    "TopicSelection",
    "ReportExporter",
    "ExportResult",
]
