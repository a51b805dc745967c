# backend/tutorly/services/pattern_service.py
"""
Pattern Service for the Tutorly platform.

A pattern is the only writer of the weekly slots tagged with its id.
Whenever a pattern is saved as active, its rows are rebuilt from scratch
(delete, then insert) in the same transaction as the pattern itself, so
the stored rows always mirror the current definition. Saving it inactive
removes them.

State transitions on save:
    inactive -> active    regenerate
    active   -> active    regenerate
    active   -> inactive  delete generated rows
    inactive -> inactive  nothing
"""

from datetime import time
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_MAX_SLOT_MINUTES
from ..core.exceptions import (
    NotFoundException,
    SlotOverlapException,
    SlotStorageConflictError,
    ValidationException,
)
from ..models.availability import AvailabilityPattern, WeeklyAvailability
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import format_range
from .base import BaseService
from .conflict_checker import ConflictChecker, weekday_label
from .pattern_expander import GeneratedSlot, expand, expand_pattern
from .teacher_scope import TeacherScopedService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "days_of_week", "start_time", "duration_minutes", "is_active")


class PatternService(TeacherScopedService):
    """Create, edit and remove recurring patterns and keep their slots in sync."""

    def __init__(
        self,
        db: Session,
        conflict_checker: Optional[ConflictChecker] = None,
        max_slot_minutes: int = DEFAULT_MAX_SLOT_MINUTES,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.max_slot_minutes = max_slot_minutes
        self.pattern_repository = RepositoryFactory.create_pattern_repository(db)
        self.weekly_repository = RepositoryFactory.create_weekly_availability_repository(db)

    @BaseService.measure_operation("list_patterns")
    def list_patterns(self, user: User) -> List[AvailabilityPattern]:
        """The caller's patterns, oldest first."""
        profile = self.resolve_teacher(user)
        return self.pattern_repository.list_for_teacher(profile.id)

    @BaseService.measure_operation("create_pattern")
    def create_pattern(
        self,
        user: User,
        name: str,
        days_of_week: Iterable[int],
        start_time: time,
        duration_minutes: int,
        is_active: bool = False,
    ) -> AvailabilityPattern:
        """
        Create a pattern, generating its weekly slots right away if active.

        Raises:
            ValidationException: empty name or weekdays, bad duration
            SlotOverlapException: an active pattern would overlap existing weekly slots
        """
        profile = self.resolve_teacher(user)
        days = self._validate_definition(name, days_of_week, duration_minutes)

        if is_active:
            self._check_generated(profile.id, expand_pattern(days, start_time, duration_minutes))

        with self.transaction():
            pattern = self.pattern_repository.create(
                teacher_id=profile.id,
                name=name.strip(),
                days_of_week=days,
                start_time=start_time,
                duration_minutes=duration_minutes,
                is_active=is_active,
            )
            if is_active:
                self._regenerate_slots(pattern)

        self.logger.info(
            f"Teacher {profile.id} created pattern {pattern.id} "
            f"({'active' if is_active else 'inactive'})"
        )
        return pattern

    @BaseService.measure_operation("update_pattern")
    def update_pattern(self, user: User, pattern_id: str, **changes: Any) -> AvailabilityPattern:
        """
        Apply a partial update and bring the generated slots in line.

        Only ``name``, ``days_of_week``, ``start_time``, ``duration_minutes``
        and ``is_active`` may change. Fields passed as None are left alone.

        Raises:
            NotFoundException: no such pattern
            ForbiddenException: the pattern belongs to another teacher
            SlotOverlapException: the active result would overlap other weekly slots;
                nothing is changed in that case
        """
        profile = self.resolve_teacher(user)
        pattern = self._get_owned(profile, pattern_id)

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationException(f"Cannot update fields: {', '.join(sorted(unknown))}")
        updates: Dict[str, Any] = {k: v for k, v in changes.items() if v is not None}

        name = updates.get("name", pattern.name)
        start_time = updates.get("start_time", pattern.start_time)
        duration = updates.get("duration_minutes", pattern.duration_minutes)
        days = self._validate_definition(
            name, updates.get("days_of_week", pattern.days_of_week), duration
        )
        if "days_of_week" in updates:
            updates["days_of_week"] = days
        if "name" in updates:
            updates["name"] = name.strip()
        will_be_active = updates.get("is_active", pattern.is_active)

        if will_be_active:
            self._check_generated(
                profile.id,
                expand_pattern(days, start_time, duration, pattern_id=pattern.id),
                exclude_pattern_id=pattern.id,
            )

        with self.transaction():
            self.pattern_repository.update(pattern, **updates)
            if will_be_active:
                self._regenerate_slots(pattern)
            else:
                self._remove_slots(pattern.id)

        self.logger.info(f"Teacher {profile.id} updated pattern {pattern.id}")
        return pattern

    @BaseService.measure_operation("apply_pattern_activation")
    def apply_pattern_activation(self, pattern_id: str, teacher_id: str) -> List[WeeklyAvailability]:
        """
        Rebuild the weekly slots of a pattern and mark it active.

        Applying it twice in a row leaves the same set of rows.
        """
        pattern = self.pattern_repository.get_by_id(pattern_id)
        if pattern is None or pattern.teacher_id != teacher_id:
            raise NotFoundException("Pattern not found", code="PATTERN_NOT_FOUND")

        self._check_generated(teacher_id, expand(pattern), exclude_pattern_id=pattern.id)
        with self.transaction():
            if not pattern.is_active:
                self.pattern_repository.update(pattern, is_active=True)
            slots = self._regenerate_slots(pattern)
        return slots

    @BaseService.measure_operation("apply_pattern_deactivation")
    def apply_pattern_deactivation(self, pattern_id: str) -> int:
        """Delete every weekly slot generated by the pattern and mark it inactive."""
        pattern = self.pattern_repository.get_by_id(pattern_id)
        with self.transaction():
            if pattern is not None and pattern.is_active:
                self.pattern_repository.update(pattern, is_active=False)
            removed = self._remove_slots(pattern_id)
        return removed

    @BaseService.measure_operation("delete_pattern")
    def delete_pattern(self, user: User, pattern_id: str) -> None:
        """
        Delete a pattern together with its generated slots.

        Slots go first so no row is left pointing at a missing pattern.
        """
        profile = self.resolve_teacher(user)
        pattern = self._get_owned(profile, pattern_id)
        with self.transaction():
            self._remove_slots(pattern.id)
            self.pattern_repository.delete(pattern.id)
        self.logger.info(f"Teacher {profile.id} deleted pattern {pattern_id}")

    # Helpers

    def _get_owned(self, profile: Any, pattern_id: str) -> AvailabilityPattern:
        pattern = self.pattern_repository.get_by_id(pattern_id)
        if pattern is None:
            raise NotFoundException("Pattern not found", code="PATTERN_NOT_FOUND")
        self.ensure_owner(profile, pattern.teacher_id, "pattern")
        return pattern

    def _validate_definition(
        self, name: Optional[str], days_of_week: Iterable[int], duration_minutes: int
    ) -> List[int]:
        if not name or not name.strip():
            raise ValidationException("Pattern name is required", code="INVALID_PATTERN")
        days = sorted(set(days_of_week or []))
        if not days:
            raise ValidationException(
                "Pick at least one day of the week", code="INVALID_PATTERN"
            )
        if any(not 0 <= d <= 6 for d in days):
            raise ValidationException(
                "days_of_week must be between 0 (Sunday) and 6 (Saturday)", code="INVALID_PATTERN"
            )
        if duration_minutes is None or duration_minutes <= 0:
            raise ValidationException("duration_minutes must be positive", code="INVALID_PATTERN")
        if duration_minutes > self.max_slot_minutes:
            raise ValidationException(
                f"A pattern may not be longer than {self.max_slot_minutes} minutes",
                code="SLOT_TOO_LONG",
            )
        return days

    def _check_generated(
        self,
        teacher_id: str,
        generated: List[GeneratedSlot],
        exclude_pattern_id: Optional[str] = None,
    ) -> None:
        for slot in generated:
            self.conflict_checker.check_weekly_slot(
                teacher_id,
                slot.day_of_week,
                slot.start_time,
                slot.end_time,
                exclude_pattern_id=exclude_pattern_id,
            )

    def _regenerate_slots(self, pattern: AvailabilityPattern) -> List[WeeklyAvailability]:
        """Replace the pattern's rows. Runs inside the caller's transaction."""
        removed = self.weekly_repository.delete_by_pattern(pattern.id)
        generated = expand(pattern)
        try:
            rows = self.weekly_repository.bulk_create(
                [slot.as_row(pattern.teacher_id) for slot in generated]
            )
        except SlotStorageConflictError:
            labels = ", ".join(weekday_label(s.day_of_week) for s in generated)
            self.logger.warning(f"Storage constraint rejected slots of pattern {pattern.id}")
            prometheus_metrics.inc_availability_conflict("weekly", source="storage")
            first = generated[0]
            raise SlotOverlapException(
                labels, format_range(first.start_time, first.end_time)
            )
        self.logger.debug(
            f"Pattern {pattern.id}: replaced {removed} slot(s) with {len(rows)}"
        )
        return rows

    def _remove_slots(self, pattern_id: str) -> int:
        removed = self.weekly_repository.delete_by_pattern(pattern_id)
        if removed:
            self.logger.debug(f"Pattern {pattern_id}: removed {removed} slot(s)")
        return removed
