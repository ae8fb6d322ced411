"""CSV / JSON export of a customer's score records.

``detailed`` emits one row per record with its % change against the
baseline; ``summary`` emits one row per named metric. Field names are
camelCase to match downstream spreadsheet templates.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from jsi.errors import UnsupportedFormat
from jsi.models.analytics import Baseline, DateRange
from jsi.models.enums import ExportFormat, ExportType
from jsi.models.score import ScoreRecord
from jsi.scoring.insights import UNKNOWN, percentage_change
from jsi.scoring.trend_analyzer import risk_counts, trend_counts
from jsi.scoring.utils import mean, round_half_up

logger = structlog.get_logger(__name__)

NOT_AVAILABLE = "N/A"
DETAILED_COLUMNS = (
    "userId",
    "department",
    "location",
    "overallScore",
    "workEngagement",
    "careerAlignment",
    "managerRelationship",
    "personalWellbeing",
    "jobMobility",
    "riskLevel",
    "trend",
    "flags",
    "lastUpdated",
    "baselineComparison",
)


@dataclass
class ExportResult:
    format: ExportFormat
    export_type: ExportType
    data: str
    record_count: int
    exported_at: datetime

    def to_dict(self) -> dict:
        return {
            "format": self.format.value,
            "export_type": self.export_type.value,
            "data": self.data,
            "record_count": self.record_count,
            "exported_at": self.exported_at.isoformat(),
        }


def _csv_value(value: Any) -> str:
    # Embedded quotes are left as-is; consumers split on the wrapping quotes only.
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str) and "," in value:
        return f'"{value}"'
    return str(value)


def _csv_line(values: Iterable[Any]) -> str:
    return ",".join(_csv_value(v) for v in values)


class ReportExporter:
    """Format already-filtered records as CSV or JSON.

    Parameters
    ----------
    include_personal_wellbeing:
        When ``False`` the ``personalWellbeing`` column is exported as null.
    """

    def __init__(self, include_personal_wellbeing: bool = False) -> None:
        self.include_personal_wellbeing = include_personal_wellbeing

    def detailed_rows(
        self,
        records: Iterable[ScoreRecord],
        baseline: Optional[Baseline] = None,
    ) -> List[Dict[str, Any]]:
        rows = []
        for r in records:
            dims = r.dimensions
            rows.append({
                "userId": r.worker_id,
                "department": r.department or UNKNOWN,
                "location": r.location or UNKNOWN,
                "overallScore": r.overall_score,
                "workEngagement": dims.work_engagement,
                "careerAlignment": dims.career_alignment,
                "managerRelationship": dims.manager_relationship,
                "personalWellbeing": (
                    dims.personal_wellbeing if self.include_personal_wellbeing else None
                ),
                "jobMobility": dims.job_mobility,
                "riskLevel": r.risk_level.value,
                "trend": r.trend.value,
                "flags": ", ".join(r.flags),
                "lastUpdated": r.timestamp.isoformat(),
                "baselineComparison": (
                    percentage_change(r.overall_score, baseline.overall_score)
                    if baseline else None
                ),
            })
        return rows

    @staticmethod
    def summary(
        records: List[ScoreRecord],
        baseline: Optional[Baseline] = None,
        date_range: Optional[DateRange] = None,
    ) -> Dict[str, Any]:
        average = mean(r.overall_score for r in records)
        window = date_range or DateRange()
        comparison = None
        if baseline is not None:
            comparison = {
                "baselineScore": baseline.overall_score,
                "percentageChange": percentage_change(average, baseline.overall_score),
            }
        return {
            "summary": {
                "totalWorkers": len(records),
                "averageScore": round_half_up(average),
                "dateRange": {"start": window.start, "end": window.end},
                "baselineComparison": comparison,
            },
            "distributions": {
                "riskLevels": risk_counts(records),
                "trends": trend_counts(records),
            },
        }

    @staticmethod
    def summary_csv(summary: Dict[str, Any]) -> str:
        head = summary["summary"]
        comparison = head["baselineComparison"] or {}
        risks = summary["distributions"]["riskLevels"]
        trends = summary["distributions"]["trends"]

        # Only missing values print N/A; a 0 baseline or 0% change prints 0.
        def or_na(value: Any) -> Any:
            return NOT_AVAILABLE if value is None else value

        rows = [
            ("Metric", "Value"),
            ("Total Workers", head["totalWorkers"]),
            ("Average Score", head["averageScore"]),
            ("Date Range Start", head["dateRange"]["start"]),
            ("Date Range End", head["dateRange"]["end"]),
            ("Baseline Score", or_na(comparison.get("baselineScore"))),
            ("Percentage Change", or_na(comparison.get("percentageChange"))),
            ("Low Risk Workers", risks["low"]),
            ("Medium Risk Workers", risks["medium"]),
            ("High Risk Workers", risks["high"]),
            ("Improving Workers", trends["improving"]),
            ("Declining Workers", trends["declining"]),
            ("Stable Workers", trends["stable"]),
        ]
        return "\n".join(_csv_line(row) for row in rows)

    def export(
        self,
        records: Iterable[ScoreRecord],
        export_format: Union[ExportFormat, str],
        export_type: Union[ExportType, str] = ExportType.DETAILED,
        baseline: Optional[Baseline] = None,
        date_range: Optional[DateRange] = None,
        now: Optional[datetime] = None,
    ) -> ExportResult:
        """Render ``records`` in the requested format.

        Args:
            records: Records to export, in the order they should appear.
            export_format: ``csv`` or ``json`` (case-insensitive).
            export_type: ``detailed`` or ``summary``.
            baseline: Reference for % change columns, if one exists.
            date_range: Window reported in the summary.
            now: Export timestamp (defaults to current UTC time).

        Raises:
            UnsupportedFormat: If the format or export type is unknown.
        """
        fmt = _parse_enum(ExportFormat, export_format, "format")
        kind = _parse_enum(ExportType, export_type, "export_type")
        population = list(records)

        if kind == ExportType.DETAILED:
            payload: Any = self.detailed_rows(population, baseline)
            record_count = len(payload)
        else:
            payload = self.summary(population, baseline, date_range)
            record_count = 1

        if fmt == ExportFormat.JSON:
            data = json.dumps(payload, indent=2)
        elif kind == ExportType.DETAILED:
            lines = [",".join(DETAILED_COLUMNS)]
            lines.extend(_csv_line(row[c] for c in DETAILED_COLUMNS) for row in payload)
            data = "\n".join(lines)
        else:
            data = self.summary_csv(payload)

        result = ExportResult(
            format=fmt,
            export_type=kind,
            data=data,
            record_count=record_count,
            exported_at=now or datetime.now(timezone.utc),
        )
        logger.info(
            "report_exported",
            format=fmt.value,
            export_type=kind.value,
            record_count=record_count,
        )
        return result


def _parse_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise UnsupportedFormat(
            f"Unsupported {field_name.replace('_', ' ')}: {value}", field=field_name
        ) from None
