"""
FastAPI dependency providers.

Routes import from here; nothing in this package holds global state, every
provider reads what it needs from ``request.app.state``.
"""

from .auth import get_current_user, get_current_user_optional
from .database import get_db, get_settings_dep
from .services import (
    get_availability_service,
    get_conflict_checker,
    get_oauth_token_service,
    get_pattern_service,
)

__all__ = [
    "get_availability_service",
    "get_conflict_checker",
    "get_current_user",
    "get_current_user_optional",
    "get_db",
    "get_oauth_token_service",
    "get_pattern_service",
    "get_settings_dep",
]
