# backend/tutorly/schemas/availability.py
"""
Availability schemas for the Tutorly platform.

Dated slots belong to one calendar date; weekly slots repeat on a weekday
(0 = Sunday). Times are accepted as ``HH:MM`` or ``HH:MM:SS`` and returned
as ``HH:MM:SS``.
"""

import datetime
from typing import Literal, Optional

from pydantic import Field, computed_field, field_validator

from ..core.constants import MAX_BUFFER_MINUTES, WEEKDAY_NAMES
from ..core.enums import LessonKind
from ._strict_base import StrictRequestModel
from .base import StandardizedModel, TimeOfDay

LessonKindValue = Literal["one_on_one", "group"]


def _normalize_lesson_kind(value: Optional[str]) -> str:
    # Older clients send "one-on-one"
    if value is None:
        return LessonKind.ONE_ON_ONE.value
    return value.replace("-", "_")


class DateSlotCreate(StrictRequestModel):
    """Schema for publishing a slot on a specific date."""

    teacher_id: str = Field(..., min_length=1)
    available_date: datetime.date
    start_time: TimeOfDay
    end_time: TimeOfDay
    lesson_type: LessonKindValue = "one_on_one"
    max_students: Optional[int] = Field(None, ge=1, le=100)

    @field_validator("lesson_type", mode="before")
    @classmethod
    def normalize_lesson_type(cls, v: Optional[str]) -> str:
        return _normalize_lesson_kind(v)


class DateSlotResponse(StandardizedModel):
    """A slot on a specific date."""

    id: str
    teacher_id: str
    available_date: datetime.date
    start_time: TimeOfDay
    end_time: TimeOfDay
    lesson_type: str
    max_students: int


class WeeklySlotCreate(StrictRequestModel):
    """
    Schema for publishing a weekly slot.

    ``teacher_id`` is optional; when sent it must be the caller's own profile.
    An end time at or before the start time runs past midnight.
    """

    teacher_id: Optional[str] = None
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: TimeOfDay
    end_time: TimeOfDay
    session_type: LessonKindValue = "one_on_one"
    max_students: Optional[int] = Field(None, ge=1, le=100)
    subject: Optional[str] = Field(None, max_length=100)

    @field_validator("session_type", mode="before")
    @classmethod
    def normalize_session_type(cls, v: Optional[str]) -> str:
        return _normalize_lesson_kind(v)


class WeeklySlotResponse(StandardizedModel):
    """A weekly slot, possibly generated by a pattern."""

    id: str
    teacher_id: str
    day_of_week: int
    start_time: TimeOfDay
    end_time: TimeOfDay
    session_type: str
    max_students: int
    subject: Optional[str] = None
    pattern_id: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def day_name(self) -> str:
        return WEEKDAY_NAMES[self.day_of_week]


class DeleteSlotResponse(StandardizedModel):
    success: bool = True
    slot_id: str


class BufferSettingsUpdate(StrictRequestModel):
    """Gap kept between booked lessons."""

    buffer_minutes: int = Field(..., ge=0, le=MAX_BUFFER_MINUTES)
    is_buffer_enabled: bool


class BufferSettingsResponse(StandardizedModel):
    teacher_id: str = Field(..., validation_alias="id")
    buffer_minutes: int
    is_buffer_enabled: bool
