"""
Base schemas with standardized field types for consistent API responses.
"""

import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from ..utils.time_utils import format_hhmmss, parse_time_of_day


def _parse_time(value: Any) -> datetime.time:
    if isinstance(value, (str, datetime.time)):
        return parse_time_of_day(value)
    raise ValueError("Expected a time of day as HH:MM or HH:MM:SS")


# Accepts "HH:MM" or "HH:MM:SS"; always serialized as "HH:MM:SS"
TimeOfDay = Annotated[
    datetime.time,
    BeforeValidator(_parse_time),
    PlainSerializer(format_hhmmss, return_type=str),
]


class StandardizedModel(BaseModel):
    """Base model with standardized JSON encoding"""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


class SuccessResponse(StandardizedModel):
    """Acknowledgement for writes that return no resource."""

    success: bool = True
    message: str | None = None
