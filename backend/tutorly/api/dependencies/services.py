# backend/tutorly/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging
from typing import Dict

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ...core.config import Settings
from ...integrations.oauth_client import OAuthProviderClient
from ...services.availability_service import AvailabilityService
from ...services.conflict_checker import ConflictChecker
from ...services.oauth_token_service import OAuthTokenService
from ...services.pattern_service import PatternService
from .database import get_db, get_settings_dep

logger = logging.getLogger(__name__)


def get_conflict_checker(db: Session = Depends(get_db)) -> ConflictChecker:
    """
    Get conflict checker service instance.

    Args:
        db: Database session

    Returns:
        ConflictChecker instance
    """
    return ConflictChecker(db)


def get_availability_service(
    db: Session = Depends(get_db),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
    settings: Settings = Depends(get_settings_dep),
) -> AvailabilityService:
    """Get availability service instance sharing the request's conflict checker."""
    return AvailabilityService(
        db, conflict_checker=conflict_checker, max_slot_minutes=settings.max_slot_minutes
    )


def get_pattern_service(
    db: Session = Depends(get_db),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
    settings: Settings = Depends(get_settings_dep),
) -> PatternService:
    """Get recurring pattern service instance."""
    return PatternService(
        db, conflict_checker=conflict_checker, max_slot_minutes=settings.max_slot_minutes
    )


def get_oauth_clients(request: Request) -> Dict[str, OAuthProviderClient]:
    """Provider clients built once by the application factory."""
    clients: Dict[str, OAuthProviderClient] = request.app.state.oauth_clients
    return clients


def get_oauth_token_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    clients: Dict[str, OAuthProviderClient] = Depends(get_oauth_clients),
) -> OAuthTokenService:
    """Get OAuth token lifecycle service instance."""
    return OAuthTokenService(db, settings, clients=clients)
