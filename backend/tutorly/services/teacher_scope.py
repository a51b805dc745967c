# backend/tutorly/services/teacher_scope.py
"""
Ownership resolution shared by the teacher-facing services.

The acting user's teacher profile is always looked up from the user id;
a ``teacher_id`` supplied by a client is only ever compared against it.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import ERROR_TEACHER_PROFILE_NOT_FOUND
from ..core.exceptions import ForbiddenException, NotFoundException
from ..models.teacher import TeacherProfile
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class TeacherScopedService(BaseService):
    """Base for services whose writes are restricted to the caller's own calendar."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.teacher_repository = RepositoryFactory.create_teacher_profile_repository(db)

    def resolve_teacher(self, user: User, claimed_teacher_id: Optional[str] = None) -> TeacherProfile:
        """
        Return the caller's teacher profile.

        Args:
            user: Authenticated actor
            claimed_teacher_id: teacher_id sent by the client, if any

        Raises:
            ForbiddenException: the claimed id is not the caller's profile
            NotFoundException: the caller has no teacher profile
        """
        profile = self.teacher_repository.get_by_user_id(user.id)
        if claimed_teacher_id is not None and (profile is None or profile.id != claimed_teacher_id):
            self.logger.warning(
                f"User {user.id} attempted to manage teacher profile {claimed_teacher_id}"
            )
            raise ForbiddenException(
                "Unauthorized to manage this profile", code="TEACHER_PROFILE_MISMATCH"
            )
        if profile is None:
            raise NotFoundException(ERROR_TEACHER_PROFILE_NOT_FOUND, code="TEACHER_PROFILE_NOT_FOUND")
        return profile

    def ensure_owner(self, profile: TeacherProfile, owner_teacher_id: str, resource: str) -> None:
        """Raise ForbiddenException unless the resource belongs to the profile."""
        if owner_teacher_id != profile.id:
            self.logger.warning(
                f"Teacher {profile.id} attempted to modify {resource} owned by {owner_teacher_id}"
            )
            raise ForbiddenException(f"Unauthorized to modify this {resource}")
