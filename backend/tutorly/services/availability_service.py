# backend/tutorly/services/availability_service.py
"""
Availability Service for the Tutorly platform.

Handles a teacher's bookable windows:
- Dated slots (one calendar date)
- Weekly slots (one weekday, every week)
- Time-off ranges
- Booking buffer settings

Every write is conflict-checked first. Overlaps rejected by the database
itself (a lost race on PostgreSQL) are reported the same way as overlaps
caught by the check.
"""

from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_MAX_SLOT_MINUTES, MAX_BUFFER_MINUTES
from ..core.enums import LessonKind
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    SlotOverlapException,
    SlotStorageConflictError,
    ValidationException,
)
from ..models.availability import DateAvailability, TeacherTimeOff, WeeklyAvailability
from ..models.teacher import TeacherProfile
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import duration_minutes, format_range, time_to_seconds
from .base import BaseService
from .conflict_checker import ConflictChecker, date_label, weekday_label
from .teacher_scope import TeacherScopedService

logger = logging.getLogger(__name__)


def capacity_for(lesson_kind: str, max_students: Optional[int]) -> int:
    """Seats offered by a slot: group lessons keep the requested size, one-on-one is always 1."""
    if lesson_kind == LessonKind.GROUP.value:
        return max(max_students or 1, 1)
    return 1


class AvailabilityService(TeacherScopedService):
    """
    Service layer for availability operations.

    Owns the transaction for every write; repositories only flush.
    """

    def __init__(
        self,
        db: Session,
        conflict_checker: Optional[ConflictChecker] = None,
        max_slot_minutes: int = DEFAULT_MAX_SLOT_MINUTES,
    ):
        """
        Initialize availability service.

        Args:
            db: Database session
            conflict_checker: Optional ConflictChecker instance
            max_slot_minutes: Longest window a teacher may publish
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.max_slot_minutes = max_slot_minutes
        self.date_repository = RepositoryFactory.create_date_availability_repository(db)
        self.weekly_repository = RepositoryFactory.create_weekly_availability_repository(db)
        self.time_off_repository = RepositoryFactory.create_time_off_repository(db)

    # Dated slots

    @BaseService.measure_operation("list_date_slots")
    def list_date_slots(
        self,
        teacher_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        exclude_time_off: bool = False,
    ) -> List[DateAvailability]:
        """
        Public listing of a teacher's dated slots.

        Args:
            teacher_id: Teacher profile to list
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound
            exclude_time_off: Drop slots on dates covered by a time-off range

        Returns:
            Slots ordered by date, then start time
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationException("start_date must be on or before end_date")

        slots = self.date_repository.list_in_range(teacher_id, start_date, end_date)
        if not exclude_time_off or not slots:
            return slots

        windows = self.time_off_repository.list_overlapping(teacher_id, start_date, end_date)
        if not windows:
            return slots
        return [
            slot
            for slot in slots
            if not any(w.start_date <= slot.available_date <= w.end_date for w in windows)
        ]

    @BaseService.measure_operation("add_date_slot")
    def add_date_slot(
        self,
        user: User,
        teacher_id: str,
        available_date: date,
        start_time: time,
        end_time: time,
        lesson_type: str = LessonKind.ONE_ON_ONE.value,
        max_students: Optional[int] = None,
    ) -> DateAvailability:
        """
        Publish a one-off slot on a calendar date.

        Raises:
            ForbiddenException: teacher_id is not the caller's profile
            ValidationException: end is not after start, or the window is too long
            SlotOverlapException: another slot on that date overlaps
        """
        profile = self.resolve_teacher(user, claimed_teacher_id=teacher_id)

        if time_to_seconds(end_time) <= time_to_seconds(start_time):
            raise ValidationException(
                "End time must be after start time",
                code="INVALID_TIME_RANGE",
                details={"start_time": str(start_time), "end_time": str(end_time)},
            )
        self._validate_length(start_time, end_time)

        self.conflict_checker.check_date_slot(profile.id, available_date, start_time, end_time)

        with self.transaction():
            try:
                slot = self.date_repository.create(
                    teacher_id=profile.id,
                    available_date=available_date,
                    start_time=start_time,
                    end_time=end_time,
                    lesson_type=lesson_type,
                    max_students=capacity_for(lesson_type, max_students),
                )
            except SlotStorageConflictError:
                raise self._storage_conflict("date", date_label(available_date), start_time, end_time)

        self.logger.info(
            f"Teacher {profile.id} added slot {format_range(start_time, end_time)} on {available_date}"
        )
        return slot

    @BaseService.measure_operation("delete_date_slot")
    def delete_date_slot(self, user: User, slot_id: str) -> None:
        """
        Delete a dated slot owned by the caller.

        Raises:
            NotFoundException: no such slot
            ForbiddenException: the slot belongs to another teacher
        """
        slot = self.date_repository.get_with_teacher(slot_id)
        if slot is None:
            raise NotFoundException("Slot not found", code="SLOT_NOT_FOUND")
        if slot.teacher is None or slot.teacher.user_id != user.id:
            self.logger.warning(f"User {user.id} attempted to delete slot {slot_id}")
            raise ForbiddenException("Unauthorized to delete this slot")

        with self.transaction():
            self.date_repository.delete(slot_id)

    # Weekly slots

    @BaseService.measure_operation("list_weekly_slots")
    def list_weekly_slots(self, teacher_id: str) -> List[WeeklyAvailability]:
        """A teacher's weekly slots ordered by weekday, then start time."""
        return self.weekly_repository.list_for_teacher(teacher_id)

    @BaseService.measure_operation("add_weekly_slot")
    def add_weekly_slot(
        self,
        user: User,
        day_of_week: int,
        start_time: time,
        end_time: time,
        session_type: str = LessonKind.ONE_ON_ONE.value,
        max_students: Optional[int] = None,
        subject: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> WeeklyAvailability:
        """
        Publish a window that repeats every week on ``day_of_week``.

        The slot always lands on the caller's own profile. An end time at or
        before the start time means the window runs past midnight.

        Raises:
            ForbiddenException: a supplied teacher_id is not the caller's profile
            NotFoundException: the caller has no teacher profile
            ValidationException: empty or over-long window
            SlotOverlapException: another weekly slot on that weekday overlaps
        """
        profile = self.resolve_teacher(user, claimed_teacher_id=teacher_id)

        if not 0 <= day_of_week <= 6:
            raise ValidationException("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        if time_to_seconds(start_time) == time_to_seconds(end_time):
            raise ValidationException(
                "Start and end time must differ",
                code="INVALID_TIME_RANGE",
                details={"start_time": str(start_time), "end_time": str(end_time)},
            )
        self._validate_length(start_time, end_time)

        self.conflict_checker.check_weekly_slot(profile.id, day_of_week, start_time, end_time)

        with self.transaction():
            try:
                slot = self.weekly_repository.create(
                    teacher_id=profile.id,
                    day_of_week=day_of_week,
                    start_time=start_time,
                    end_time=end_time,
                    session_type=session_type,
                    max_students=capacity_for(session_type, max_students),
                    subject=subject or None,
                )
            except SlotStorageConflictError:
                raise self._storage_conflict(
                    "weekly", weekday_label(day_of_week), start_time, end_time
                )

        self.logger.info(
            f"Teacher {profile.id} added weekly slot {format_range(start_time, end_time)} "
            f"on {weekday_label(day_of_week)}"
        )
        return slot

    @BaseService.measure_operation("delete_weekly_slot")
    def delete_weekly_slot(self, user: User, slot_id: str) -> None:
        """
        Delete one of the caller's weekly slots.

        Raises:
            NotFoundException: no such slot on the caller's calendar
        """
        profile = self.resolve_teacher(user)
        with self.transaction():
            deleted = self.weekly_repository.delete_owned(slot_id, profile.id)
        if not deleted:
            raise NotFoundException("Slot not found", code="SLOT_NOT_FOUND")

    # Buffer settings

    @BaseService.measure_operation("update_buffer_settings")
    def update_buffer_settings(
        self, user: User, buffer_minutes: int, is_buffer_enabled: bool
    ) -> TeacherProfile:
        """Store the gap the booking flow keeps between lessons."""
        if not 0 <= buffer_minutes <= MAX_BUFFER_MINUTES:
            raise ValidationException(
                f"buffer_minutes must be between 0 and {MAX_BUFFER_MINUTES}",
                code="INVALID_BUFFER",
            )
        profile = self.resolve_teacher(user)
        with self.transaction():
            self.teacher_repository.update(
                profile, buffer_minutes=buffer_minutes, is_buffer_enabled=is_buffer_enabled
            )
        return profile

    # Time off

    @BaseService.measure_operation("list_time_off")
    def list_time_off(self, user: User) -> List[TeacherTimeOff]:
        """The caller's time-off ranges ordered by start date."""
        profile = self.resolve_teacher(user)
        return self.time_off_repository.list_for_teacher(profile.id)

    @BaseService.measure_operation("add_time_off")
    def add_time_off(
        self, user: User, start_date: date, end_date: date, reason: Optional[str] = None
    ) -> TeacherTimeOff:
        """
        Record a closed date range when the caller takes no lessons.

        Overlapping ranges are allowed; they are redundant, not contradictory.
        """
        if end_date < start_date:
            raise ValidationException(
                "end_date must be on or after start_date", code="INVALID_DATE_RANGE"
            )
        profile = self.resolve_teacher(user)
        with self.transaction():
            entry = self.time_off_repository.create(
                teacher_id=profile.id,
                start_date=start_date,
                end_date=end_date,
                reason=reason or None,
            )
        self.logger.info(f"Teacher {profile.id} added time off {start_date}..{end_date}")
        return entry

    @BaseService.measure_operation("delete_time_off")
    def delete_time_off(self, user: User, time_off_id: str) -> None:
        """
        Delete one of the caller's time-off ranges.

        Raises:
            NotFoundException: no such range
            ForbiddenException: the range belongs to another teacher
        """
        profile = self.resolve_teacher(user)
        entry = self.time_off_repository.get_by_id(time_off_id)
        if entry is None:
            raise NotFoundException("Time off not found", code="TIME_OFF_NOT_FOUND")
        self.ensure_owner(profile, entry.teacher_id, "time off")
        with self.transaction():
            self.time_off_repository.delete(time_off_id)

    def is_on_time_off(self, teacher_id: str, day: date) -> bool:
        """True if any of the teacher's time-off ranges covers ``day``."""
        return self.time_off_repository.find_covering(teacher_id, day) is not None

    # Helpers

    def _validate_length(self, start_time: time, end_time: time) -> None:
        length = duration_minutes(start_time, end_time)
        if length > self.max_slot_minutes:
            raise ValidationException(
                f"A slot may not be longer than {self.max_slot_minutes} minutes",
                code="SLOT_TOO_LONG",
                details={"duration_minutes": length},
            )

    def _storage_conflict(
        self, scope: str, scope_label: str, start_time: time, end_time: time
    ) -> SlotOverlapException:
        self.logger.warning(
            f"Storage constraint rejected {scope} slot {format_range(start_time, end_time)} "
            f"on {scope_label}"
        )
        prometheus_metrics.inc_availability_conflict(scope, source="storage")
        return SlotOverlapException(scope_label, format_range(start_time, end_time))
