# backend/tutorly/repositories/teacher_profile_repository.py
"""Repository for teacher profiles."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.teacher import TeacherProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TeacherProfileRepository(BaseRepository[TeacherProfile]):
    """Data access for TeacherProfile rows."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        """The profile owned by a user, if the user is a teacher."""
        return self.find_one_by(user_id=user_id)
