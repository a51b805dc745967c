# backend/tutorly/repositories/pattern_repository.py
"""Repository for recurring availability patterns."""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..models.availability import AvailabilityPattern
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PatternRepository(BaseRepository[AvailabilityPattern]):
    """Data access for AvailabilityPattern rows."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilityPattern)

    def list_for_teacher(self, teacher_id: str) -> List[AvailabilityPattern]:
        """A teacher's patterns, oldest first."""
        query = (
            self._build_query()
            .filter(AvailabilityPattern.teacher_id == teacher_id)
            .order_by(AvailabilityPattern.created_at, AvailabilityPattern.id)
        )
        return self._execute_query(query)
