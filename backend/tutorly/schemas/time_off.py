# backend/tutorly/schemas/time_off.py
"""Time-off schemas."""

import datetime
from typing import Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class TimeOffCreate(StrictRequestModel):
    """Closed date range, both ends inclusive."""

    start_date: datetime.date
    end_date: datetime.date
    reason: Optional[str] = Field(None, max_length=255)


class TimeOffResponse(StandardizedModel):
    id: str
    teacher_id: str
    start_date: datetime.date
    end_date: datetime.date
    reason: Optional[str] = None
    created_at: datetime.datetime


class DeleteTimeOffResponse(StandardizedModel):
    success: bool = True
    time_off_id: str
