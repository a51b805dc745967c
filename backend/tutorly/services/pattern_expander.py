# backend/tutorly/services/pattern_expander.py
"""
Pattern expansion.

Turns a recurring pattern (weekdays + start time + duration) into the
weekly slot rows it owns. Expansion is pure; PatternService applies the
result by deleting the pattern's previous rows and inserting these.
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Iterable, List, Optional

from ..utils.time_utils import add_minutes_wrapped


@dataclass(frozen=True)
class GeneratedSlot:
    """One weekly slot produced by a pattern."""

    day_of_week: int
    start_time: time
    end_time: time
    pattern_id: Optional[str]

    def as_row(self, teacher_id: str) -> Dict[str, Any]:
        return {
            "teacher_id": teacher_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "pattern_id": self.pattern_id,
        }


def pattern_end_time(start_time: time, duration_minutes: int) -> time:
    """
    End of a pattern window.

    Crossing midnight wraps rather than overflowing: 23:30 plus 60 minutes
    ends at 00:30.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    return add_minutes_wrapped(start_time, duration_minutes)


def expand_pattern(
    days_of_week: Iterable[int],
    start_time: time,
    duration_minutes: int,
    pattern_id: Optional[str] = None,
) -> List[GeneratedSlot]:
    """
    One slot per distinct weekday, ordered by weekday.

    Args:
        days_of_week: Weekdays 0 (Sunday) to 6 (Saturday)
        start_time: Start of every generated window
        duration_minutes: Window length, must be positive
        pattern_id: Tag written on every generated row

    Returns:
        Generated slots; the same inputs always give the same list
    """
    end_time = pattern_end_time(start_time, duration_minutes)
    days = sorted(set(days_of_week))
    for day in days:
        if not 0 <= day <= 6:
            raise ValueError(f"day_of_week out of range: {day}")
    return [GeneratedSlot(day, start_time, end_time, pattern_id) for day in days]


def expand(pattern: Any) -> List[GeneratedSlot]:
    """Expand a stored AvailabilityPattern."""
    return expand_pattern(
        pattern.days_of_week,
        pattern.start_time,
        pattern.duration_minutes,
        pattern_id=pattern.id,
    )
