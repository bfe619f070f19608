# slotwise/services/availability/interval.py
"""
Half-open time interval [start, end) on absolute instants.

All comparisons happen on timezone-aware datetimes. Wall-clock conversion is done
once, in timezones.py, before an Interval is ever built.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List

from slotwise.services.availability.exceptions import InvalidTimeRangeError


@dataclass(frozen=True, order=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidTimeRangeError("Interval bounds must be timezone-aware")
        if self.end <= self.start:
            raise InvalidTimeRangeError(
                f"Interval end {self.end.isoformat()} must be after start {self.start.isoformat()}"
            )

    def overlaps(self, other: "Interval") -> bool:
        """Touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, point: datetime) -> bool:
        return self.start <= point < self.end

    def covers(self, other: "Interval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def padded(self, before_minutes: int = 0, after_minutes: int = 0) -> "Interval":
        return Interval(
            self.start - timedelta(minutes=before_minutes),
            self.end + timedelta(minutes=after_minutes),
        )

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Coalesce overlapping or touching intervals into a sorted list"""
    merged: List[Interval] = []
    for interval in sorted(intervals):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged
