# backend/tutorly/core/constants.py
"""Shared constants for the Tutorly backend."""

BRAND_NAME = "Tutorly"

API_TITLE = f"{BRAND_NAME} Scheduling API"
API_VERSION = "0.4.0"
API_DESCRIPTION = "Teacher availability, recurring patterns and calendar integrations."

# Day 0 is Sunday, matching the weekday numbering stored in availability rows.
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

SECONDS_PER_DAY = 24 * 60 * 60

MAX_BUFFER_MINUTES = 240

# Longest single slot or pattern window, in minutes
DEFAULT_MAX_SLOT_MINUTES = 720

ERROR_TEACHER_PROFILE_NOT_FOUND = "Teacher profile not found"
ERROR_NOT_AUTHENTICATED = "Not authenticated"
