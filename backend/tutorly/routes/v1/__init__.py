"""
API v1 routers.

Each module exposes ``router`` without a prefix; prefixes are applied
when the routers are mounted in ``main.py``.
"""

from . import availability, health, integrations, patterns, prometheus, time_off

__all__ = ["availability", "health", "integrations", "patterns", "prometheus", "time_off"]
