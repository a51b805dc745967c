# backend/tutorly/repositories/__init__.py
"""
Repository layer for the Tutorly platform.

Repositories own all queries; services own transactions.
"""

from .availability_repository import DateAvailabilityRepository, WeeklyAvailabilityRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .oauth_credential_repository import OAuthCredentialRepository
from .pattern_repository import PatternRepository
from .teacher_profile_repository import TeacherProfileRepository
from .time_off_repository import TimeOffRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "DateAvailabilityRepository",
    "OAuthCredentialRepository",
    "PatternRepository",
    "RepositoryFactory",
    "TeacherProfileRepository",
    "TimeOffRepository",
    "UserRepository",
    "WeeklyAvailabilityRepository",
]
