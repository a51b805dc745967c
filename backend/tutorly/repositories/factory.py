# backend/tutorly/repositories/factory.py
"""
Repository Factory for the Tutorly platform.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import DateAvailabilityRepository, WeeklyAvailabilityRepository
    from .oauth_credential_repository import OAuthCredentialRepository
    from .pattern_repository import PatternRepository
    from .teacher_profile_repository import TeacherProfileRepository
    from .time_off_repository import TimeOffRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services never construct
    repositories directly.
    """

    @staticmethod
    def create_date_availability_repository(db: Session) -> "DateAvailabilityRepository":
        """Create repository for dated availability slots."""
        from .availability_repository import DateAvailabilityRepository

        return DateAvailabilityRepository(db)

    @staticmethod
    def create_weekly_availability_repository(db: Session) -> "WeeklyAvailabilityRepository":
        """Create repository for weekly availability slots."""
        from .availability_repository import WeeklyAvailabilityRepository

        return WeeklyAvailabilityRepository(db)

    @staticmethod
    def create_pattern_repository(db: Session) -> "PatternRepository":
        from .pattern_repository import PatternRepository

        return PatternRepository(db)

    @staticmethod
    def create_time_off_repository(db: Session) -> "TimeOffRepository":
        from .time_off_repository import TimeOffRepository

        return TimeOffRepository(db)

    @staticmethod
    def create_teacher_profile_repository(db: Session) -> "TeacherProfileRepository":
        from .teacher_profile_repository import TeacherProfileRepository

        return TeacherProfileRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_oauth_credential_repository(db: Session) -> "OAuthCredentialRepository":
        from .oauth_credential_repository import OAuthCredentialRepository

        return OAuthCredentialRepository(db)
