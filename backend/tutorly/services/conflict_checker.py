# backend/tutorly/services/conflict_checker.py
"""
Conflict Checker Service for the Tutorly platform.

Decides whether a proposed availability window overlaps a teacher's
existing windows. Windows are half-open ``[start, end)``: a slot ending
at 10:00 and another starting at 10:00 do not conflict, so lessons can
be scheduled back to back.

Scopes:
    - Dated slots are compared only with slots on the same calendar date.
    - Weekly slots are compared only with slots on the same weekday.

The two scopes are never compared with each other.
"""

from dataclasses import dataclass
from datetime import date, time
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..core.constants import WEEKDAY_NAMES
from ..core.exceptions import SlotOverlapException
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.availability_repository import (
    DateAvailabilityRepository,
    WeeklyAvailabilityRepository,
)
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import format_range, span_seconds
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeWindow:
    """A time-of-day window, optionally tied to the stored slot it came from."""

    start: time
    end: time
    slot_id: Optional[str] = None

    @property
    def span(self) -> tuple[int, int]:
        return span_seconds(self.start, self.end)

    @property
    def label(self) -> str:
        return format_range(self.start, self.end)


def windows_overlap(a: TimeWindow, b: TimeWindow) -> bool:
    """
    Half-open overlap test: ``a.start < b.end and a.end > b.start``.

    Symmetric in its arguments. Touching endpoints do not overlap.
    """
    a_start, a_end = a.span
    b_start, b_end = b.span
    return a_start < b_end and a_end > b_start


def find_overlap(existing: Iterable[TimeWindow], candidate: TimeWindow) -> Optional[TimeWindow]:
    """Return the first existing window that overlaps the candidate, or None."""
    for window in existing:
        if windows_overlap(window, candidate):
            return window
    return None


def weekday_label(day_of_week: int) -> str:
    return WEEKDAY_NAMES[day_of_week]


def date_label(value: date) -> str:
    return value.isoformat()


class ConflictChecker(BaseService):
    """
    Service that rejects overlapping availability before it is written.

    The check is a pre-check, not a lock. On PostgreSQL the overlap
    constraints catch writers that race past it.
    """

    def __init__(
        self,
        db: Session,
        date_repository: Optional[DateAvailabilityRepository] = None,
        weekly_repository: Optional[WeeklyAvailabilityRepository] = None,
    ):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            date_repository: Optional DateAvailabilityRepository instance
            weekly_repository: Optional WeeklyAvailabilityRepository instance
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.date_repository = (
            date_repository or RepositoryFactory.create_date_availability_repository(db)
        )
        self.weekly_repository = (
            weekly_repository or RepositoryFactory.create_weekly_availability_repository(db)
        )

    @BaseService.measure_operation("check_date_slot")
    def check_date_slot(
        self, teacher_id: str, available_date: date, start_time: time, end_time: time
    ) -> None:
        """
        Raise if the window overlaps another dated slot on the same date.

        Raises:
            SlotOverlapException: naming the conflicting window
        """
        slots = self.date_repository.list_for_date(teacher_id, available_date)
        candidate = TimeWindow(start_time, end_time)
        conflict = find_overlap(
            (TimeWindow(s.start_time, s.end_time, s.id) for s in slots), candidate
        )
        if conflict:
            self._reject("date", date_label(available_date), candidate, conflict)

    @BaseService.measure_operation("check_weekly_slot")
    def check_weekly_slot(
        self,
        teacher_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        exclude_pattern_id: Optional[str] = None,
    ) -> None:
        """
        Raise if the window overlaps another weekly slot on the same weekday.

        Every weekly slot on that weekday counts regardless of the pattern
        that generated it, except rows of ``exclude_pattern_id`` (a pattern
        being regenerated replaces its own rows).

        Raises:
            SlotOverlapException: naming the weekday and the conflicting window
        """
        slots = self.weekly_repository.list_for_day(
            teacher_id, day_of_week, exclude_pattern_id=exclude_pattern_id
        )
        candidate = TimeWindow(start_time, end_time)
        conflict = find_overlap(
            (TimeWindow(s.start_time, s.end_time, s.id) for s in slots), candidate
        )
        if conflict:
            self._reject("weekly", weekday_label(day_of_week), candidate, conflict)

    def _reject(
        self, scope: str, scope_label: str, candidate: TimeWindow, conflict: TimeWindow
    ) -> None:
        self.logger.warning(
            f"Rejected {scope} slot {candidate.label} on {scope_label}: "
            f"overlaps {conflict.label} ({conflict.slot_id})"
        )
        prometheus_metrics.inc_availability_conflict(scope, source="check")
        raise SlotOverlapException(
            scope_label,
            candidate.label,
            conflict.label,
            conflicting_slot_id=conflict.slot_id,
        )
