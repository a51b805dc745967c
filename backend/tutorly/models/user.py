# backend/tutorly/models/user.py
"""
User model for the Tutorly platform.

Accounts are created by the hosted auth provider; this table mirrors the
fields the scheduling backend needs (role and identity for ownership checks).
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import RoleName
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A platform account (student, teacher or admin)."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    # Relationships
    teacher_profile = relationship(
        "TeacherProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    oauth_credentials = relationship(
        "OAuthCredential", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
