"""Record store for score history, baselines and per-customer configuration."""
import logging
import threading
from functools import lru_cache
from typing import Any, Optional, Protocol

from jsi.models.analytics import Baseline, CustomerProfile, baseline_key
from jsi.models.messaging import MessagingConfig, messaging_config_key
from jsi.models.score import ScoreRecord

logger = logging.getLogger(__name__)


class JSIStore(Protocol):
    """Persistence operations the pipeline relies on."""

    def add_score(self, record: ScoreRecord) -> None: ...

    def list_scores(self, customer_id: Optional[str] = None) -> list[ScoreRecord]: ...

    def latest_score(self, worker_id: str, customer_id: str) -> Optional[ScoreRecord]: ...

    def get_baseline(
        self, customer_id: str, department: Optional[str] = None, location: Optional[str] = None
    ) -> Optional[Baseline]: ...

    def save_baseline(self, baseline: Baseline) -> None: ...

    def get_scoring_override(
        self, customer_id: str, agency_id: Optional[str] = None
    ) -> Optional[dict[str, Any]]: ...

    def save_scoring_override(
        self, customer_id: str, override: dict[str, Any], agency_id: Optional[str] = None
    ) -> None: ...

    def get_customer(self, customer_id: str) -> Optional[CustomerProfile]: ...

    def list_customers(self) -> list[CustomerProfile]: ...

    def save_customer(self, profile: CustomerProfile) -> None: ...

    def get_messaging_config(
        self, customer_id: str, agency_id: Optional[str] = None
    ) -> Optional[MessagingConfig]: ...

    def save_messaging_config(self, config: MessagingConfig) -> None: ...


class InMemoryJSIStore:
    """Thread-safe dictionary-backed JSIStore.

    Records are immutable models, so reads hand out the stored objects;
    messaging configs are mutable and are copied in and out.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scores: list[ScoreRecord] = []
        self._baselines: dict[str, Baseline] = {}
        self._scoring_overrides: dict[str, dict[str, Any]] = {}
        self._customers: dict[str, CustomerProfile] = {}
        self._messaging: dict[str, MessagingConfig] = {}

    # ── scores ───────────────────────────────────────────────────────────────

    def add_score(self, record: ScoreRecord) -> None:
        with self._lock:
            self._scores.append(record)
        logger.debug(f"Stored score {record.id} for worker {record.worker_id}")

    def list_scores(self, customer_id: Optional[str] = None) -> list[ScoreRecord]:
        with self._lock:
            if customer_id is None:
                return list(self._scores)
            return [r for r in self._scores if r.customer_id == customer_id]

    def latest_score(self, worker_id: str, customer_id: str) -> Optional[ScoreRecord]:
        """Most recent record for the worker; later insertion wins a timestamp tie."""
        latest: Optional[ScoreRecord] = None
        with self._lock:
            for record in self._scores:
                if record.worker_id != worker_id or record.customer_id != customer_id:
                    continue
                if latest is None or record.timestamp >= latest.timestamp:
                    latest = record
        return latest

    # ── baselines ────────────────────────────────────────────────────────────

    def get_baseline(
        self, customer_id: str, department: Optional[str] = None, location: Optional[str] = None
    ) -> Optional[Baseline]:
        with self._lock:
            return self._baselines.get(baseline_key(customer_id, department, location))

    def save_baseline(self, baseline: Baseline) -> None:
        with self._lock:
            self._baselines[baseline.baseline_id] = baseline

    # ── configuration ────────────────────────────────────────────────────────

    def get_scoring_override(
        self, customer_id: str, agency_id: Optional[str] = None
    ) -> Optional[dict[str, Any]]:
        with self._lock:
            override = self._scoring_overrides.get(messaging_config_key(customer_id, agency_id))
            return dict(override) if override is not None else None

    def save_scoring_override(
        self, customer_id: str, override: dict[str, Any], agency_id: Optional[str] = None
    ) -> None:
        with self._lock:
            self._scoring_overrides[messaging_config_key(customer_id, agency_id)] = dict(override)

    def get_customer(self, customer_id: str) -> Optional[CustomerProfile]:
        with self._lock:
            return self._customers.get(customer_id)

    def list_customers(self) -> list[CustomerProfile]:
        with self._lock:
            return list(self._customers.values())

    def save_customer(self, profile: CustomerProfile) -> None:
        with self._lock:
            self._customers[profile.customer_id] = profile

    def get_messaging_config(
        self, customer_id: str, agency_id: Optional[str] = None
    ) -> Optional[MessagingConfig]:
        with self._lock:
            config = self._messaging.get(messaging_config_key(customer_id, agency_id))
            return config.model_copy(deep=True) if config is not None else None

    def save_messaging_config(self, config: MessagingConfig) -> None:
        with self._lock:
            self._messaging[config.config_id] = config.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._scores.clear()
            self._baselines.clear()
            self._scoring_overrides.clear()
            self._customers.clear()
            self._messaging.clear()


@lru_cache
def get_store() -> InMemoryJSIStore:
    """Process-wide store used by the HTTP layer."""
    return InMemoryJSIStore()
