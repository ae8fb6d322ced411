"""Per-worker anomaly detection over a recent score history.

Only each worker's two most recent records are compared:

  rapid_drop           (high)   previous − latest > rapid_drop_threshold (20)
  sustained_low_score  (medium) latest < 50 and previous < 50

Both checks may fire for the same pair.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import structlog

from jsi.models.analytics import DateRange
from jsi.models.enums import AnomalyType, Severity
from jsi.models.score import ScoreRecord
from jsi.scoring.filters import sort_by_time

logger = structlog.get_logger(__name__)

RAPID_DROP_THRESHOLD: float = 20
SUSTAINED_LOW_THRESHOLD: float = 50
UNKNOWN = "Unknown"


@dataclass
class Anomaly:
    """One detected anomaly for one worker."""

    worker_id: str
    type: AnomalyType
    severity: Severity
    description: str
    current_score: int
    previous_score: int
    detected_at: datetime
    department: str = UNKNOWN
    location: str = UNKNOWN
    score_drop: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "worker_id": self.worker_id,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "current_score": self.current_score,
            "previous_score": self.previous_score,
            "detected_at": self.detected_at.isoformat(),
            "department": self.department,
            "location": self.location,
        }
        if self.score_drop is not None:
            data["score_drop"] = self.score_drop
        return data


@dataclass
class AnomalyReport:
    anomalies: List[Anomaly] = field(default_factory=list)
    time_range: DateRange = field(default_factory=DateRange)

    @property
    def total_detected(self) -> int:
        return len(self.anomalies)

    def to_dict(self) -> dict:
        return {
            "anomalies": [a.to_dict() for a in self.anomalies],
            "total_detected": self.total_detected,
            "time_range": self.time_range.model_dump(),
        }


class AnomalyDetector:
    """Scan each worker's own history for drops and sustained low scores.

    Parameters
    ----------
    rapid_drop_threshold:
        Point drop that must be exceeded (strictly) to flag ``rapid_drop``.
    low_score_threshold:
        Both of the last two scores must be strictly below this value to
        flag ``sustained_low_score``.
    """

    def __init__(
        self,
        rapid_drop_threshold: float = RAPID_DROP_THRESHOLD,
        low_score_threshold: float = SUSTAINED_LOW_THRESHOLD,
    ) -> None:
        self.rapid_drop_threshold = rapid_drop_threshold
        self.low_score_threshold = low_score_threshold

    def _check_pair(
        self,
        worker_id: str,
        previous: ScoreRecord,
        latest: ScoreRecord,
        detected_at: datetime,
    ) -> List[Anomaly]:
        found: List[Anomaly] = []
        department = latest.department or UNKNOWN
        location = latest.location or UNKNOWN
        drop = previous.overall_score - latest.overall_score

        if drop > self.rapid_drop_threshold:
            found.append(
                Anomaly(
                    worker_id=worker_id,
                    type=AnomalyType.RAPID_DROP,
                    severity=Severity.HIGH,
                    description=f"Rapid score drop of {drop} points detected",
                    score_drop=drop,
                    current_score=latest.overall_score,
                    previous_score=previous.overall_score,
                    detected_at=detected_at,
                    department=department,
                    location=location,
                )
            )

        if (
            latest.overall_score < self.low_score_threshold
            and previous.overall_score < self.low_score_threshold
        ):
            found.append(
                Anomaly(
                    worker_id=worker_id,
                    type=AnomalyType.SUSTAINED_LOW_SCORE,
                    severity=Severity.MEDIUM,
                    description="Sustained low JSI score detected",
                    current_score=latest.overall_score,
                    previous_score=previous.overall_score,
                    detected_at=detected_at,
                    department=department,
                    location=location,
                )
            )
        return found

    def detect(
        self,
        records: Iterable[ScoreRecord],
        now: Optional[datetime] = None,
        time_range: Optional[DateRange] = None,
    ) -> AnomalyReport:
        """Detect anomalies in an already-filtered record slice.

        Args:
            records: Records for one customer within the lookback window.
            now: Detection timestamp (defaults to current UTC time).
            time_range: Window echoed back in the report.

        Returns:
            AnomalyReport; workers are visited in order of first appearance.
        """
        detected_at = now or datetime.now(timezone.utc)
        by_worker: Dict[str, List[ScoreRecord]] = defaultdict(list)
        for record in records:
            by_worker[record.worker_id].append(record)

        anomalies: List[Anomaly] = []
        for worker_id, history in by_worker.items():
            if len(history) < 2:
                continue
            ordered = sort_by_time(history)
            anomalies.extend(
                self._check_pair(worker_id, ordered[-2], ordered[-1], detected_at)
            )

        logger.info(
            "anomalies_detected",
            workers=len(by_worker),
            total_detected=len(anomalies),
        )
        return AnomalyReport(anomalies=anomalies, time_range=time_range or DateRange())
