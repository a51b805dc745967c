"""Tutorly scheduling backend: teacher availability, recurring patterns, time off."""

__version__ = "0.4.0"
