# backend/tutorly/auth.py
"""
Bearer token handling.

Access tokens are issued by the hosting platform's auth service and signed
with the shared ``SECRET_KEY``; ``sub`` carries the user id. The same key
signs the short-lived ``state`` values used in OAuth redirects.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError

from .core.config import Settings

logger = logging.getLogger(__name__)

OAUTH_STATE_PURPOSE = "oauth_state"


def _secret_value(settings: Settings) -> str:
    return settings.secret_key.get_secret_value()


def create_access_token(
    data: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: The claims to encode; ``sub`` must be the user id
        settings: Application settings holding the signing key
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_value(settings), algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Decode and verify an access token. Raises PyJWTError on any failure."""
    payload = jwt.decode(token, _secret_value(settings), algorithms=[settings.algorithm])
    if payload.get("purpose") == OAUTH_STATE_PURPOSE:
        raise jwt.InvalidTokenError("OAuth state is not an access token")
    return cast(Dict[str, Any], payload)


def create_oauth_state(user_id: str, provider: str, settings: Settings) -> str:
    """Signed, expiring ``state`` for an OAuth redirect."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.oauth_state_ttl_minutes)
    claims = {"sub": user_id, "provider": provider, "purpose": OAUTH_STATE_PURPOSE, "exp": expire}
    return jwt.encode(claims, _secret_value(settings), algorithm=settings.algorithm)


def read_oauth_state(state: str, provider: str, settings: Settings) -> Optional[str]:
    """User id carried by a valid state for ``provider``, or None."""
    try:
        claims = jwt.decode(state, _secret_value(settings), algorithms=[settings.algorithm])
    except PyJWTError as e:
        logger.warning(f"Rejected OAuth state for {provider}: {str(e)}")
        return None
    if claims.get("purpose") != OAUTH_STATE_PURPOSE or claims.get("provider") != provider:
        logger.warning(f"OAuth state was not issued for {provider}")
        return None
    return cast(Optional[str], claims.get("sub"))
