"""
Database models for the Tutorly platform.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import (
    AvailabilityPattern,
    DateAvailability,
    TeacherTimeOff,
    WeeklyAvailability,
)
from .oauth_credential import OAuthCredential
from .teacher import TeacherProfile
from .user import User

__all__ = [
    "AvailabilityPattern",
    "DateAvailability",
    "OAuthCredential",
    "TeacherProfile",
    "TeacherTimeOff",
    "User",
    "WeeklyAvailability",
]
