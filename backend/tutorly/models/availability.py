# backend/tutorly/models/availability.py
"""
Availability models for the Tutorly platform.

This module defines the database models for a teacher's calendar:

Classes:
    DateAvailability: One-off bookable window on a calendar date
    WeeklyAvailability: Bookable window that repeats every week on a weekday
    AvailabilityPattern: Named template that generates WeeklyAvailability rows
    TeacherTimeOff: Closed date range when the teacher is unavailable

Overlap rules are enforced by the services before every write. On
PostgreSQL the same rules are also installed as EXCLUDE constraints so a
race between two writers is rejected by the database (SQLSTATE 23P01).
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import (
    DDL,
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Time,
    event,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import LessonKind
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class DateAvailability(Base):
    """Availability on one specific calendar date."""

    __tablename__ = "date_availability"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    teacher_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    available_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    lesson_type = Column(String(20), nullable=False, default=LessonKind.ONE_ON_ONE.value)
    max_students = Column(Integer, nullable=False, default=1)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    teacher = relationship("TeacherProfile", back_populates="date_slots")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_date_availability_time_order"),
        CheckConstraint("max_students >= 1", name="ck_date_availability_max_students"),
        Index("idx_date_availability_teacher_date", "teacher_id", "available_date"),
    )

    def __repr__(self) -> str:
        return f"<DateAvailability {self.available_date} {self.start_time}-{self.end_time}>"


class WeeklyAvailability(Base):
    """
    Availability repeating every week on ``day_of_week`` (0 = Sunday).

    Rows with a ``pattern_id`` are generated from an AvailabilityPattern and
    are replaced wholesale whenever that pattern is re-applied. An end time
    at or before the start time means the window runs past midnight.
    """

    __tablename__ = "availability"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    teacher_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    session_type = Column(String(20), nullable=False, default=LessonKind.ONE_ON_ONE.value)
    max_students = Column(Integer, nullable=False, default=1)
    subject = Column(String(100), nullable=True)
    pattern_id = Column(
        String(26),
        ForeignKey("availability_patterns.id", ondelete="CASCADE"),
        nullable=True,
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    teacher = relationship("TeacherProfile", back_populates="weekly_slots")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        CheckConstraint("start_time <> end_time", name="ck_availability_non_empty"),
        CheckConstraint("max_students >= 1", name="ck_availability_max_students"),
        Index("idx_availability_teacher_day", "teacher_id", "day_of_week"),
        Index("idx_availability_pattern", "pattern_id"),
    )

    def __repr__(self) -> str:
        return f"<WeeklyAvailability day={self.day_of_week} {self.start_time}-{self.end_time}>"


class AvailabilityPattern(Base):
    """Named weekly template: the same start time and length on a set of weekdays."""

    __tablename__ = "availability_patterns"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    teacher_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(100), nullable=False)
    days_of_week = Column(JSON, nullable=False)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_now_utc,
        onupdate=_now_utc,
        server_default=func.now(),
    )

    teacher = relationship("TeacherProfile", back_populates="patterns")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_pattern_duration_positive"),
        Index("idx_patterns_teacher", "teacher_id"),
    )

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"<AvailabilityPattern {self.name!r} {state}>"


class TeacherTimeOff(Base):
    """Closed date range ``[start_date, end_date]`` when the teacher takes no lessons."""

    __tablename__ = "teacher_time_off"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    teacher_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    teacher = relationship("TeacherProfile", back_populates="time_off")

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_time_off_date_order"),
        Index("idx_time_off_teacher_dates", "teacher_id", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return f"<TeacherTimeOff {self.start_date}..{self.end_date} - {self.reason or 'No reason'}>"


# PostgreSQL-only overlap constraints. Ranges are half-open, so touching
# windows (10:00-11:00 next to 11:00-12:00) are accepted.
DATE_SLOT_EXCLUSION = "date_availability_no_overlap"
WEEKLY_SLOT_EXCLUSION = "availability_no_overlap"

event.listen(
    Base.metadata,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    DateAvailability.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE date_availability ADD CONSTRAINT {DATE_SLOT_EXCLUSION} "
        "EXCLUDE USING gist ("
        "teacher_id WITH =, available_date WITH =, "
        "tsrange(available_date + start_time, available_date + end_time) WITH &&)"
    ).execute_if(dialect="postgresql"),
)
event.listen(
    WeeklyAvailability.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE availability ADD CONSTRAINT {WEEKLY_SLOT_EXCLUSION} "
        "EXCLUDE USING gist ("
        "teacher_id WITH =, day_of_week WITH =, "
        "tsrange(DATE '2000-01-02' + start_time, DATE '2000-01-02' + end_time"
        " + CASE WHEN end_time <= start_time THEN INTERVAL '1 day' ELSE INTERVAL '0 days' END)"
        " WITH &&)"
    ).execute_if(dialect="postgresql"),
)
