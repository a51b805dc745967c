# backend/tutorly/schemas/pattern.py
"""Recurring pattern schemas."""

import datetime
from typing import List, Optional

from pydantic import Field, computed_field, field_validator

from ..utils.time_utils import add_minutes_wrapped, format_hhmmss
from ._strict_base import StrictRequestModel
from .base import StandardizedModel, TimeOfDay


def _clean_days(days: Optional[List[int]]) -> Optional[List[int]]:
    if days is None:
        return None
    for day in days:
        if not 0 <= day <= 6:
            raise ValueError("days_of_week values must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(days))


class PatternCreate(StrictRequestModel):
    """Schema for creating a recurring pattern."""

    name: str = Field(..., min_length=1, max_length=100)
    days_of_week: List[int] = Field(..., min_length=1)
    start_time: TimeOfDay
    duration_minutes: int = Field(..., gt=0)
    is_active: bool = False

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        return _clean_days(v) or []


class PatternUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their value."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    days_of_week: Optional[List[int]] = Field(None, min_length=1)
    start_time: Optional[TimeOfDay] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        return _clean_days(v)


class PatternResponse(StandardizedModel):
    """A recurring pattern and the window it generates."""

    id: str
    teacher_id: str
    name: str
    days_of_week: List[int]
    start_time: TimeOfDay
    duration_minutes: int
    is_active: bool
    created_at: datetime.datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def end_time(self) -> str:
        return format_hhmmss(add_minutes_wrapped(self.start_time, self.duration_minutes))
