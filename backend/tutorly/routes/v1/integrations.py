# backend/tutorly/routes/v1/integrations.py
"""
Calendar and video integration routes - API v1

Versioned OAuth endpoints under /api/v1/integrations.

Endpoints:
    GET /{provider}/connect     → Consent URL for the provider
    GET /{provider}/callback    → Provider redirect target; stores tokens
    DELETE /{provider}          → Forget the stored tokens

The callback is reached by a browser redirect from the provider, so it
answers with a redirect back to the settings page instead of JSON. The
signed ``state`` identifies the user; a bearer token is optional there.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from ...api.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_oauth_token_service,
    get_settings_dep,
)
from ...core.config import Settings
from ...core.enums import OAuthProvider
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.integration import AuthorizationUrlResponse, DisconnectResponse
from ...services.oauth_token_service import OAuthTokenService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["integrations-v1"])

SETTINGS_PAGE_PATH = "/teacher/settings"

# Service error codes surfaced to the settings page
_CALLBACK_ERRORS = {
    "OAUTH_NO_CODE": "no_code",
    "OAUTH_INVALID_STATE": "invalid_state",
    "OAUTH_STATE_MISMATCH": "unauthorized",
}


def _settings_redirect(settings: Settings, **params: str) -> RedirectResponse:
    query = urlencode({"tab": "calendar", **params})
    return RedirectResponse(
        url=f"{settings.app_url}{SETTINGS_PAGE_PATH}?{query}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/{provider}/connect", response_model=AuthorizationUrlResponse)
async def connect_provider(
    provider: OAuthProvider,
    current_user: User = Depends(get_current_user),
    token_service: OAuthTokenService = Depends(get_oauth_token_service),
) -> AuthorizationUrlResponse:
    """Consent URL the frontend should send the user to."""
    try:
        url = token_service.authorization_url(provider.value, current_user)
        return AuthorizationUrlResponse(provider=provider.value, authorization_url=url)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error building {provider.value} consent URL: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.get("/{provider}/callback", response_class=RedirectResponse, response_model=None)
async def provider_callback(
    provider: OAuthProvider,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    token_service: OAuthTokenService = Depends(get_oauth_token_service),
    settings: Settings = Depends(get_settings_dep),
) -> RedirectResponse:
    """Finish the OAuth flow and send the browser back to the settings page."""
    if error:
        logger.info(f"User declined {provider.value} authorization: {error}")
        return _settings_redirect(settings, error=f"{provider.value}_denied")

    try:
        await asyncio.to_thread(
            token_service.complete_authorization,
            provider.value,
            code or "",
            state or "",
            user=current_user,
        )
    except DomainException as e:
        logger.warning(f"{provider.value} callback rejected: {e.message}")
        return _settings_redirect(settings, error=_CALLBACK_ERRORS.get(e.code, "callback_failed"))
    except Exception as e:
        logger.error(f"Error completing {provider.value} authorization: {str(e)}")
        return _settings_redirect(settings, error="callback_failed")

    return _settings_redirect(settings, success=f"{provider.value}_connected")


@router.delete("/{provider}", response_model=DisconnectResponse)
async def disconnect_provider(
    provider: OAuthProvider,
    current_user: User = Depends(get_current_user),
    token_service: OAuthTokenService = Depends(get_oauth_token_service),
) -> DisconnectResponse:
    """Forget the caller's stored tokens for the provider."""
    try:
        removed = await asyncio.to_thread(token_service.disconnect, current_user, provider.value)
        return DisconnectResponse(provider=provider.value, disconnected=removed)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error disconnecting {provider.value}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )
