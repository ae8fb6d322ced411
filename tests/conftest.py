"""Pytest fixtures and configuration."""
import random
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from jsi.config import Settings
from jsi.models import DimensionSet, RiskLevel, ScoreRecord, Trend
from jsi.pipelines import JSIPipeline
from jsi.services import InMemoryJSIStore

# Sunday; 2026-03-01 starts a Sunday-aligned week.
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _risk_for(overall: int) -> RiskLevel:
    if overall <= 30:
        return RiskLevel.HIGH
    if overall <= 50:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_record(
    overall: int = 70,
    worker_id: str = "w1",
    customer_id: str = "c1",
    days_ago: float = 0,
    timestamp: Optional[datetime] = None,
    dimensions: Optional[dict] = None,
    risk_level: Optional[RiskLevel] = None,
    trend: Trend = Trend.STABLE,
    flags: Optional[list] = None,
    **context,
) -> ScoreRecord:
    """ScoreRecord with every dimension equal to ``overall`` unless given."""
    dims = dimensions or {
        "work_engagement": overall,
        "career_alignment": overall,
        "manager_relationship": overall,
        "personal_wellbeing": overall,
        "job_mobility": overall,
    }
    return ScoreRecord(
        worker_id=worker_id,
        customer_id=customer_id,
        dimensions=DimensionSet(**dims),
        overall_score=overall,
        trend=trend,
        risk_level=risk_level or _risk_for(overall),
        flags=flags or [],
        timestamp=timestamp or NOW - timedelta(days=days_ago),
        **context,
    )


@pytest.fixture
def now():
    """Fixed reference time used by time-windowed operations."""
    return NOW


@pytest.fixture
def make_record():
    """Factory for ScoreRecords."""
    return build_record


@pytest.fixture
def sample_dimensions():
    """Dimension set with low engagement only (scores 62 with default weights)."""
    return {
        "work_engagement": 20,
        "career_alignment": 80,
        "manager_relationship": 80,
        "personal_wellbeing": 80,
        "job_mobility": 80,
    }


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryJSIStore()


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


class RecordingSink:
    """AlertSink that remembers what it was sent."""

    def __init__(self):
        self.sent = []

    def send(self, record):
        self.sent.append(record)


@pytest.fixture
def alert_sink():
    return RecordingSink()


@pytest.fixture
def pipeline(store, settings, alert_sink):
    """Pipeline over the empty store with a frozen clock and seeded RNG."""
    return JSIPipeline(
        store,
        alert_sink=alert_sink,
        rng=random.Random(7),
        settings=settings,
        clock=lambda: NOW,
    )


@pytest.fixture
def client(pipeline):
    """Create test client wired to the fixture pipeline."""
    from jsi.main import app
    from jsi.routers.deps import get_pipeline

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
