# backend/tutorly/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from ...core.config import Settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that will be closed after use
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_settings_dep(request: Request) -> Settings:
    """Settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings
