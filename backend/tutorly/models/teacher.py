# backend/tutorly/models/teacher.py
"""
Teacher profile model.

A TeacherProfile is the owner of a teacher's whole scheduling domain:
dated slots, weekly slots, recurring patterns and time-off windows all
hang off it and are removed with it.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TeacherProfile(Base):
    """
    Teacher-specific data for a user.

    Attributes:
        id: Primary key, the ``teacher_id`` every availability row refers to
        user_id: Owning user (one-to-one)
        buffer_minutes: Gap the booking flow keeps between lessons
        is_buffer_enabled: Whether the buffer applies at all
    """

    __tablename__ = "teacher_profiles"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    headline = Column(String(255), nullable=True)
    buffer_minutes = Column(Integer, nullable=False, default=0)
    is_buffer_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    # Relationships
    user = relationship("User", back_populates="teacher_profile")
    date_slots = relationship(
        "DateAvailability", back_populates="teacher", cascade="all, delete-orphan"
    )
    weekly_slots = relationship(
        "WeeklyAvailability", back_populates="teacher", cascade="all, delete-orphan"
    )
    patterns = relationship(
        "AvailabilityPattern", back_populates="teacher", cascade="all, delete-orphan"
    )
    time_off = relationship("TeacherTimeOff", back_populates="teacher", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("buffer_minutes >= 0", name="ck_teacher_buffer_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<TeacherProfile {self.id} user={self.user_id}>"
