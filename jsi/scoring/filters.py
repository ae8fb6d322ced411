"""Slicing helpers for score histories.

A department or location filter of ``None``, ``""`` or ``"all"`` means no
filter; any other value must match exactly. Date bounds are inclusive.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from jsi.errors import ValidationError
from jsi.models.analytics import DateRange
from jsi.models.score import ScoreRecord

ALL = "all"


def normalise_slice(value: Optional[str]) -> Optional[str]:
    """Map the ``"all"`` wildcard (and blanks) to ``None``."""
    if value is None or value == "" or value == ALL:
        return None
    return value


@dataclass(frozen=True)
class RecordFilter:
    """Selection criteria applied to a sequence of ScoreRecords."""

    customer_id: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def trailing(
        cls,
        days: int,
        now: Optional[datetime] = None,
        **criteria: Optional[str],
    ) -> "RecordFilter":
        """Filter covering the ``days`` days that end at ``now``."""
        end = now or datetime.now(timezone.utc)
        return cls(start=end - timedelta(days=days), end=end, **criteria)

    def matches(self, record: ScoreRecord) -> bool:
        if self.customer_id is not None and record.customer_id != self.customer_id:
            return False
        department = normalise_slice(self.department)
        if department is not None and record.department != department:
            return False
        location = normalise_slice(self.location)
        if location is not None and record.location != location:
            return False
        if self.start is not None and record.timestamp < _aware(self.start):
            return False
        if self.end is not None and record.timestamp > _aware(self.end):
            return False
        return True

    def apply(self, records: Iterable[ScoreRecord]) -> List[ScoreRecord]:
        return [r for r in records if self.matches(r)]

    @classmethod
    def from_date_range(cls, date_range: Optional[DateRange], **criteria: Optional[str]) -> "RecordFilter":
        """Build a filter from ISO ``start`` / ``end`` strings.

        A date-only ``end`` covers that whole day.

        Raises:
            ValidationError: If ``start`` or ``end`` is not an ISO date.
        """
        if date_range is None:
            return cls(**criteria)
        start = _parse_iso(date_range.start, "start") if date_range.start else None
        end = _parse_iso(date_range.end, "end") if date_range.end else None
        if end is not None and len(date_range.end) == 10:
            end = end + timedelta(days=1) - timedelta(microseconds=1)
        return cls(start=start, end=end, **criteria)


def _parse_iso(value: str, field: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid ISO date for {field}: {value!r}", field=field) from exc
    return _aware(parsed)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_by_time(records: Iterable[ScoreRecord], descending: bool = False) -> List[ScoreRecord]:
    """Stable sort by timestamp; equal timestamps keep their input order."""
    return sorted(records, key=lambda r: r.timestamp, reverse=descending)
