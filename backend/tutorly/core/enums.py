# backend/tutorly/core/enums.py
"""
Core enums for the Tutorly platform.

Values are stored as plain strings in the database so they stay readable
from SQL and from the hosted dashboard.
"""

from enum import Enum


class RoleName(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class LessonKind(str, Enum):
    """Kind of lesson a slot is offered for."""

    ONE_ON_ONE = "one_on_one"
    GROUP = "group"


class OAuthProvider(str, Enum):
    """Third-party accounts a user can connect."""

    ZOOM = "zoom"
    GOOGLE = "google"
