from __future__ import annotations

from datetime import time
from typing import Union

from ..core.constants import SECONDS_PER_DAY

TimeLike = Union[str, time]


def _looks_like_hhmm(value: str) -> bool:
    # fromisoformat alone would also take "HHMM", "HH" and UTC offsets
    return len(value) in (5, 8) and all(
        ch == ":" if i % 3 == 2 else ch.isdigit() for i, ch in enumerate(value)
    )


def parse_time_of_day(value: TimeLike) -> time:
    """
    Parse ``HH:MM`` or ``HH:MM:SS`` into a time.

    ``"09:00"`` and ``"09:00:00"`` parse to the same value.

    Raises:
        ValueError: if the string is not a valid time of day.
    """
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    text = value.strip() if isinstance(value, str) else ""
    if not _looks_like_hhmm(text):
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM or HH:MM:SS)")
    try:
        return time.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid time of day: {value!r}") from e


def time_to_seconds(t: time) -> int:
    """Seconds since midnight."""
    return t.hour * 3600 + t.minute * 60 + t.second


def span_seconds(start: time, end: time) -> tuple[int, int]:
    """
    Half-open ``[start, end)`` span in seconds-of-day.

    An end at or before the start means the window runs past midnight,
    so the end is pushed into the next day.
    """
    start_s = time_to_seconds(start)
    end_s = time_to_seconds(end)
    if end_s <= start_s:
        end_s += SECONDS_PER_DAY
    return start_s, end_s


def add_minutes_wrapped(start: time, minutes: int) -> time:
    """Add minutes to a time of day, wrapping past midnight."""
    total = start.hour * 60 + start.minute + minutes
    return time((total // 60) % 24, total % 60, start.second)


def duration_minutes(start: time, end: time) -> int:
    """Length of ``[start, end)`` in whole minutes, wrapping past midnight."""
    start_s, end_s = span_seconds(start, end)
    return (end_s - start_s) // 60


def format_hhmm(t: time) -> str:
    """Render a time as ``HH:MM``."""
    return f"{t.hour:02d}:{t.minute:02d}"


def format_hhmmss(t: time) -> str:
    """Render a time as ``HH:MM:SS``."""
    return f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"


def format_range(start: time, end: time) -> str:
    return f"{format_hhmm(start)} - {format_hhmm(end)}"
