# backend/tutorly/repositories/time_off_repository.py
"""
TimeOffRepository - teacher vacation / unavailable date ranges.

Time-off rows never delete slots; readers consult them to hide dates.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..models.availability import TeacherTimeOff
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TimeOffRepository(BaseRepository[TeacherTimeOff]):
    """Data access for TeacherTimeOff rows."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherTimeOff)

    def list_for_teacher(self, teacher_id: str) -> List[TeacherTimeOff]:
        """All windows for a teacher ordered by start date."""
        query = (
            self._build_query()
            .filter(TeacherTimeOff.teacher_id == teacher_id)
            .order_by(TeacherTimeOff.start_date, TeacherTimeOff.end_date)
        )
        return self._execute_query(query)

    def list_overlapping(
        self,
        teacher_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[TeacherTimeOff]:
        """
        Windows intersecting the inclusive range ``[start_date, end_date]``.

        Either bound may be omitted to leave that side open.
        """
        query = self._build_query().filter(TeacherTimeOff.teacher_id == teacher_id)
        if start_date:
            query = query.filter(TeacherTimeOff.end_date >= start_date)
        if end_date:
            query = query.filter(TeacherTimeOff.start_date <= end_date)
        return self._execute_query(query.order_by(TeacherTimeOff.start_date))

    def find_covering(self, teacher_id: str, day: date) -> Optional[TeacherTimeOff]:
        """First window that contains ``day``, if any."""
        query = self._build_query().filter(
            and_(
                TeacherTimeOff.teacher_id == teacher_id,
                TeacherTimeOff.start_date <= day,
                TeacherTimeOff.end_date >= day,
            )
        )
        rows = self._execute_query(query.order_by(TeacherTimeOff.start_date).limit(1))
        return rows[0] if rows else None
