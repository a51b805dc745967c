# backend/tutorly/repositories/availability_repository.py
"""
Availability repositories - dated and weekly slot storage.

Conflict checks read a teacher's slots one scope at a time: a single
calendar date for dated slots, a single weekday for weekly slots.
"""

from datetime import date
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.availability import DateAvailability, WeeklyAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class DateAvailabilityRepository(BaseRepository[DateAvailability]):
    """Data access for one-off slots on specific dates."""

    def __init__(self, db: Session):
        super().__init__(db, DateAvailability)

    def list_for_date(self, teacher_id: str, available_date: date) -> List[DateAvailability]:
        """
        Get every slot a teacher has on one date.

        Args:
            teacher_id: Owning teacher profile
            available_date: The calendar date

        Returns:
            Slots ordered by start time
        """
        query = (
            self._build_query()
            .filter(
                DateAvailability.teacher_id == teacher_id,
                DateAvailability.available_date == available_date,
            )
            .order_by(DateAvailability.start_time)
        )
        return self._execute_query(query)

    def list_in_range(
        self,
        teacher_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[DateAvailability]:
        """Get a teacher's dated slots, optionally bounded by an inclusive date range."""
        query = self._build_query().filter(DateAvailability.teacher_id == teacher_id)
        if start_date:
            query = query.filter(DateAvailability.available_date >= start_date)
        if end_date:
            query = query.filter(DateAvailability.available_date <= end_date)
        query = query.order_by(DateAvailability.available_date, DateAvailability.start_time)
        return self._execute_query(query)

    def get_with_teacher(self, slot_id: str) -> Optional[DateAvailability]:
        """Get a slot with its owning teacher profile loaded (for ownership checks)."""
        try:
            return cast(
                Optional[DateAvailability],
                self.db.query(DateAvailability)
                .options(joinedload(DateAvailability.teacher))
                .filter(DateAvailability.id == slot_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to get slot: {str(e)}")


class WeeklyAvailabilityRepository(BaseRepository[WeeklyAvailability]):
    """Data access for weekly recurring slots, including pattern-generated ones."""

    def __init__(self, db: Session):
        super().__init__(db, WeeklyAvailability)

    def list_for_day(
        self,
        teacher_id: str,
        day_of_week: int,
        exclude_pattern_id: Optional[str] = None,
    ) -> List[WeeklyAvailability]:
        """
        Get every weekly slot a teacher has on one weekday.

        Args:
            teacher_id: Owning teacher profile
            day_of_week: 0 (Sunday) to 6 (Saturday)
            exclude_pattern_id: Leave out rows generated by this pattern

        Returns:
            Slots ordered by start time
        """
        query = self._build_query().filter(
            WeeklyAvailability.teacher_id == teacher_id,
            WeeklyAvailability.day_of_week == day_of_week,
        )
        if exclude_pattern_id:
            query = query.filter(
                (WeeklyAvailability.pattern_id.is_(None))
                | (WeeklyAvailability.pattern_id != exclude_pattern_id)
            )
        return self._execute_query(query.order_by(WeeklyAvailability.start_time))

    def list_for_teacher(self, teacher_id: str) -> List[WeeklyAvailability]:
        query = (
            self._build_query()
            .filter(WeeklyAvailability.teacher_id == teacher_id)
            .order_by(WeeklyAvailability.day_of_week, WeeklyAvailability.start_time)
        )
        return self._execute_query(query)

    def list_by_pattern(self, pattern_id: str) -> List[WeeklyAvailability]:
        query = (
            self._build_query()
            .filter(WeeklyAvailability.pattern_id == pattern_id)
            .order_by(WeeklyAvailability.day_of_week)
        )
        return self._execute_query(query)

    def delete_by_pattern(self, pattern_id: str) -> int:
        """Delete every slot generated by a pattern. Returns the number removed."""
        query = self._build_query().filter(WeeklyAvailability.pattern_id == pattern_id)
        return self._execute_delete(query)

    def delete_owned(self, slot_id: str, teacher_id: str) -> bool:
        """Delete a slot only if it belongs to the teacher."""
        query = self._build_query().filter(
            WeeklyAvailability.id == slot_id,
            WeeklyAvailability.teacher_id == teacher_id,
        )
        return self._execute_delete(query) > 0
