"""JSI pipeline: calculators composed over a record store.

Each operation fetches the relevant slice from the store, runs one
calculator, and (for scores, baselines and messaging configs) persists the
result. Calculators stay pure; everything stateful lives here.
"""
import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, Union

import pydantic

from jsi.config import Settings, get_settings
from jsi.errors import ConfigDisabled, NotFound, ValidationError
from jsi.models.analytics import Baseline, CustomerBenchmarks, CustomerProfile, DateRange
from jsi.models.enums import ExportFormat, ExportType, Granularity, RotationStrategy, TopicCategory
from jsi.models.messaging import (
    CustomTopicCreate,
    MessagingConfig,
    MessagingConfigUpdate,
    MessagingTopic,
    default_messaging_config,
)
from jsi.models.score import DEFAULT_SCORING_CONFIG, ScoreRecord, ScoreRequest, ScoringConfig, merge_scoring_config
from jsi.scoring.anomaly_detector import AnomalyDetector, AnomalyReport
from jsi.scoring.baseline_calculator import BaselineCalculator
from jsi.scoring.benchmark_calculator import BenchmarkCalculator
from jsi.scoring.export import ExportResult, ReportExporter
from jsi.scoring.filters import RecordFilter, normalise_slice, sort_by_time
from jsi.scoring.insights import AggregateStats, Insights, InsightsGenerator, ReportData
from jsi.scoring.score_calculator import ScoreCalculator
from jsi.scoring.topic_selector import TopicSelection, TopicSelector
from jsi.scoring.trend_analyzer import TrendAnalyzer, TrendReport
from jsi.services.store import JSIStore

logger = logging.getLogger(__name__)


def _merge_config(
    customer_id: str, agency_id: Optional[str], override: dict[str, Any]
) -> ScoringConfig:
    try:
        return merge_scoring_config(
            DEFAULT_SCORING_CONFIG,
            {**override, "customer_id": customer_id, "agency_id": agency_id},
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid scoring config: {exc.errors()[0]['msg']}") from exc


class AlertSink(Protocol):
    """Downstream receiver for records that need attention."""

    def send(self, record: ScoreRecord) -> None: ...


class JSIPipeline:
    """Run JSI operations for one store.

    Parameters
    ----------
    store:
        Record store holding scores, baselines and configuration.
    alert_sink:
        Receives every new record that is high risk or flagged. Optional.
    rng:
        Random source for topic rotation; seeded from ``settings.topic_seed``
        when not given.
    settings:
        Window lengths and defaults; ``get_settings()`` when not given.
    clock:
        Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        store: JSIStore,
        alert_sink: Optional[AlertSink] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.alert_sink = alert_sink
        self.settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._trend_analyzer = TrendAnalyzer()
        self._insights = InsightsGenerator()
        self._topic_selector = TopicSelector(rng or random.Random(self.settings.topic_seed))

    def now(self) -> datetime:
        return self._clock()

    # ── helpers ──────────────────────────────────────────────────────────────

    def _window(
        self,
        customer_id: str,
        days: int,
        department: Optional[str] = None,
        location: Optional[str] = None,
    ) -> tuple[list[ScoreRecord], DateRange]:
        now = self.now()
        window = RecordFilter.trailing(
            days,
            now=now,
            customer_id=customer_id,
            department=normalise_slice(department),
            location=normalise_slice(location),
        )
        records = window.apply(self.store.list_scores(customer_id))
        return records, DateRange(start=window.start.isoformat(), end=now.isoformat())

    def _dispatch_alert(self, record: ScoreRecord) -> None:
        if self.alert_sink is None or not record.requires_alert:
            return
        try:
            self.alert_sink.send(record)
        except Exception as e:
            logger.error(f"Alert dispatch failed for worker {record.worker_id}: {e}", exc_info=True)

    # ── scoring configuration ────────────────────────────────────────────────

    def get_scoring_config(self, customer_id: str, agency_id: Optional[str] = None) -> ScoringConfig:
        """Defaults merged with the customer's stored override."""
        override = self.store.get_scoring_override(customer_id, agency_id) or {}
        return _merge_config(customer_id, agency_id, override)

    def update_scoring_config(
        self,
        customer_id: str,
        override: dict[str, Any],
        agency_id: Optional[str] = None,
    ) -> ScoringConfig:
        """Store a partial override after checking it merges cleanly."""
        stored = self.store.get_scoring_override(customer_id, agency_id) or {}
        combined = {**stored}
        for key, value in override.items():
            if key in ("weights", "thresholds") and isinstance(value, dict):
                combined[key] = {**stored.get(key, {}), **value}
            else:
                combined[key] = value
        config = _merge_config(customer_id, agency_id, combined)
        self.store.save_scoring_override(customer_id, combined, agency_id)
        logger.info(f"Updated scoring config for customer {customer_id}")
        return config

    def register_customer(self, profile: CustomerProfile) -> CustomerProfile:
        self.store.save_customer(profile)
        return profile

    # ── scores ───────────────────────────────────────────────────────────────

    def generate_score(self, request: ScoreRequest) -> ScoreRecord:
        """Score, persist, and alert on one measurement event.

        Raises:
            ConfigDisabled: If scoring is disabled for the customer.
            ValidationError: On invalid identifiers or dimensions.
        """
        config = self.get_scoring_config(request.customer_id, request.agency_id)
        prior = self.store.latest_score(request.worker_id, request.customer_id)
        if request.timestamp is None:
            request = request.model_copy(update={"timestamp": self.now()})
        record = ScoreCalculator(config).calculate_from_request(request, prior)
        self.store.add_score(record)
        logger.info(
            f"Generated JSI score {record.overall_score} for worker {record.worker_id} "
            f"(risk={record.risk_level.value})"
        )
        self._dispatch_alert(record)
        return record

    def get_trend(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        granularity: Union[Granularity, str, None] = None,
        window_days: Optional[int] = None,
    ) -> TrendReport:
        records, _ = self._window(
            customer_id, window_days or self.settings.trend_window_days, department, location
        )
        return self._trend_analyzer.analyze(
            records, granularity or self.settings.default_granularity
        )

    def detect_anomalies(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> AnomalyReport:
        """Rapid drops and sustained low scores within the lookback window.

        The drop limit and the default window (``rapid_drop_days``) come from
        the customer's thresholds; the sustained-low cutoff is fixed at 50.
        """
        thresholds = self.get_scoring_config(customer_id).thresholds
        records, time_range = self._window(
            customer_id, window_days or thresholds.rapid_drop_days, department, location
        )
        detector = AnomalyDetector(rapid_drop_threshold=thresholds.rapid_drop_threshold)
        return detector.detect(records, now=self.now(), time_range=time_range)

    # ── baselines / benchmarks ───────────────────────────────────────────────

    def establish_baseline(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> Baseline:
        """Recompute and persist the baseline for a slice.

        Raises:
            EmptyPopulation: If the slice has no records in the window.
        """
        calculator = BaselineCalculator(self.settings.baseline_window_days)
        baseline = calculator.calculate(
            customer_id,
            self.store.list_scores(customer_id),
            department=department,
            location=location,
            window_days=window_days,
            now=self.now(),
        )
        self.store.save_baseline(baseline)
        return baseline

    def get_baseline(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Baseline:
        """Stored baseline for the slice, establishing one if none exists."""
        stored = self.store.get_baseline(
            customer_id, normalise_slice(department), normalise_slice(location)
        )
        if stored is not None:
            return stored
        return self.establish_baseline(customer_id, department, location)

    def get_benchmarks(
        self,
        customer_id: str,
        date_range: Optional[DateRange] = None,
    ) -> CustomerBenchmarks:
        """Global and industry benchmarks for a registered customer.

        Raises:
            NotFound: If the customer has not been registered.
        """
        calculator = BenchmarkCalculator(now=self.now())
        return calculator.customer_benchmarks(
            customer_id,
            self.store.list_scores(),
            self.store.list_customers(),
            date_range,
        )

    # ── reporting ────────────────────────────────────────────────────────────

    def aggregate_stats(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> AggregateStats:
        records, _ = self._window(
            customer_id, window_days or self.settings.insights_window_days, department, location
        )
        return self._insights.aggregate_stats(records)

    def report_data(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> ReportData:
        records, _ = self._window(
            customer_id, window_days or self.settings.export_window_days, department, location
        )
        baseline = self.store.get_baseline(
            customer_id, normalise_slice(department), normalise_slice(location)
        )
        return self._insights.report_data(records, baseline)

    def generate_insights(
        self,
        customer_id: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
        include_organizational: bool = False,
    ) -> Insights:
        records, _ = self._window(
            customer_id, window_days or self.settings.insights_window_days, department, location
        )
        return self._insights.generate_insights(records, include_organizational)

    def export_report(
        self,
        customer_id: str,
        export_format: Union[ExportFormat, str],
        export_type: Union[ExportType, str] = ExportType.DETAILED,
        department: Optional[str] = None,
        location: Optional[str] = None,
        window_days: Optional[int] = None,
        include_personal_wellbeing: bool = False,
    ) -> ExportResult:
        """Export the window's records, newest first.

        Raises:
            UnsupportedFormat: If the format or export type is unknown.
        """
        records, date_range = self._window(
            customer_id, window_days or self.settings.export_window_days, department, location
        )
        baseline = self.store.get_baseline(
            customer_id, normalise_slice(department), normalise_slice(location)
        )
        exporter = ReportExporter(include_personal_wellbeing=include_personal_wellbeing)
        result = exporter.export(
            sort_by_time(records, descending=True),
            export_format,
            export_type,
            baseline=baseline,
            date_range=date_range,
            now=self.now(),
        )
        logger.info(f"Exported JSI data for customer {customer_id} in {result.format.value} format")
        return result

    # ── messaging ────────────────────────────────────────────────────────────

    def get_messaging_config(self, customer_id: str, agency_id: Optional[str] = None) -> MessagingConfig:
        """Stored config, created from the default catalogue on first access."""
        config = self.store.get_messaging_config(customer_id, agency_id)
        if config is None:
            config = default_messaging_config(customer_id, agency_id)
            self.store.save_messaging_config(config)
            logger.info(f"Created default messaging config {config.config_id}")
        return config

    def _require_messaging_config(self, customer_id: str, agency_id: Optional[str]) -> MessagingConfig:
        config = self.store.get_messaging_config(customer_id, agency_id)
        if config is None:
            raise NotFound(
                "Messaging configuration not found. Please initialize first.",
                field="customer_id",
            )
        return config

    def update_messaging_config(
        self,
        customer_id: str,
        update: MessagingConfigUpdate,
        agency_id: Optional[str] = None,
    ) -> MessagingConfig:
        """Replace topics and/or global settings wholesale.

        Raises:
            NotFound: If the config has not been initialised.
        """
        config = self._require_messaging_config(customer_id, agency_id)
        changes: dict[str, Any] = {"updated_at": self.now()}
        if update.topics is not None:
            changes["topics"] = update.topics
        if update.global_settings is not None:
            changes["global_settings"] = update.global_settings
        updated = config.model_copy(update=changes)
        self.store.save_messaging_config(updated)
        logger.info(f"Updated messaging config {updated.config_id}")
        return updated

    def add_custom_topic(
        self,
        customer_id: str,
        topic: CustomTopicCreate,
        agency_id: Optional[str] = None,
    ) -> MessagingTopic:
        """Append a custom topic to an existing config.

        Raises:
            NotFound: If the config has not been initialised.
            ConfigDisabled: If custom topics are turned off for the config.
        """
        config = self._require_messaging_config(customer_id, agency_id)
        if not config.global_settings.enable_custom_topics:
            raise ConfigDisabled(f"Custom topics are disabled for {config.config_id}")

        now = self.now()
        existing = {t.id for t in config.topics}
        stamp = int(now.timestamp() * 1000)
        while f"custom_{stamp}" in existing:
            stamp += 1

        new_topic = MessagingTopic(
            id=f"custom_{stamp}",
            category=TopicCategory.CUSTOM,
            created_at=now,
            updated_at=now,
            **topic.model_dump(),
        )
        updated = config.model_copy(
            update={"topics": [*config.topics, new_topic], "updated_at": now}
        )
        self.store.save_messaging_config(updated)
        logger.info(f"Added custom topic {new_topic.id} to {config.config_id}")
        return new_topic

    def select_topics(
        self,
        customer_id: str,
        agency_id: Optional[str] = None,
        strategy: Union[RotationStrategy, str, None] = None,
    ) -> list[MessagingTopic]:
        return self.generate_prompt(customer_id, agency_id, strategy).topics

    def generate_prompt(
        self,
        customer_id: str,
        agency_id: Optional[str] = None,
        strategy: Union[RotationStrategy, str, None] = None,
    ) -> TopicSelection:
        """Select topics and render a check-in prompt.

        Raises:
            NoEligibleTopics: If every topic is disabled.
        """
        config = self.get_messaging_config(customer_id, agency_id)
        return self._topic_selector.select(config, strategy)

