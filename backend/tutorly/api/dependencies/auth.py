# backend/tutorly/api/dependencies/auth.py
"""
Authentication dependencies.

Resolves the bearer token to a User row. Missing or invalid tokens are
rejected with 401 before any route logic runs.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError
from sqlalchemy.orm import Session

from ...auth import decode_access_token
from ...core.config import Settings
from ...core.constants import ERROR_NOT_AUTHENTICATED
from ...core.exceptions import UnauthorizedException
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db, get_settings_dep

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> Optional[User]:
    """The authenticated user, or None when no usable token was sent."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        payload = decode_access_token(credentials.credentials, settings)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return RepositoryFactory.create_user_repository(db).get_by_id(str(user_id))


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    """
    The authenticated user.

    Raises:
        HTTPException: 401 when the request carries no valid token
    """
    if user is None:
        raise UnauthorizedException(
            ERROR_NOT_AUTHENTICATED, code="NOT_AUTHENTICATED"
        ).to_http_exception()
    return user
