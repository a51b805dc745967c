# backend/tutorly/services/oauth_token_service.py
"""
OAuth token lifecycle for connected Zoom and Google Calendar accounts.

Flow:
    1. authorization_url    - consent URL carrying a signed, expiring state
    2. complete_authorization - verify state, exchange the code, store tokens
    3. get_valid_access_token - reuse the stored token or refresh it early
    4. call_with_token      - run a provider call, refresh and retry once on 401

A refresh the provider rejects (revoked grant) disconnects the account.
Network failures and provider outages surface as DependencyFailureException
so callers can retry later.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Callable, Dict, Optional, TypeVar, cast

from sqlalchemy.orm import Session

from ..auth import create_oauth_state, read_oauth_state
from ..core.config import Settings
from ..core.enums import OAuthProvider
from ..core.exceptions import (
    DependencyFailureException,
    ForbiddenException,
    ServiceException,
    ValidationException,
)
from ..integrations.google_calendar_client import GoogleCalendarClient
from ..integrations.oauth_client import OAuthProviderClient, OAuthProviderError, TokenSet
from ..integrations.zoom_client import ZoomClient
from ..models.oauth_credential import OAuthCredential
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Provider answers to a refresh that mean the grant is gone for good
REVOKED_STATUSES = (400, 401)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_provider_clients(settings: Settings) -> Dict[str, OAuthProviderClient]:
    """Provider clients configured from settings."""
    return {
        OAuthProvider.ZOOM.value: ZoomClient(
            client_id=settings.zoom_client_id,
            client_secret=settings.zoom_client_secret,
            redirect_uri=settings.zoom_callback_url,
            timeout=settings.oauth_http_timeout_seconds,
        ),
        OAuthProvider.GOOGLE.value: GoogleCalendarClient(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_callback_url,
            timeout=settings.oauth_http_timeout_seconds,
        ),
    }


class OAuthTokenService(BaseService):
    """Stores, refreshes and uses provider tokens on behalf of a user."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        clients: Optional[Dict[str, OAuthProviderClient]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the token service.

        Args:
            db: Database session
            settings: Application settings (signing key, refresh skew)
            clients: Provider clients by provider name; built from settings when omitted
            clock: Source of the current UTC time
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.clients = clients if clients is not None else build_provider_clients(settings)
        self.clock = clock
        self.credential_repository = RepositoryFactory.create_oauth_credential_repository(db)

    # Connect / disconnect

    def authorization_url(self, provider: str, user: User) -> str:
        """Consent URL for ``provider`` whose state identifies ``user``."""
        client = self._client(provider)
        state = create_oauth_state(user.id, provider, self.settings)
        return client.authorization_url(state)

    @BaseService.measure_operation("complete_authorization")
    def complete_authorization(
        self, provider: str, code: str, state: str, user: Optional[User] = None
    ) -> OAuthCredential:
        """
        Finish the OAuth redirect: verify state, exchange the code, store tokens.

        Args:
            provider: Provider name
            code: Authorization code from the redirect
            state: State from the redirect
            user: Signed-in user, if the callback request carried one

        Raises:
            ValidationException: missing code or invalid/expired state
            ForbiddenException: state was issued to a different user
            DependencyFailureException: the provider could not be reached
        """
        client = self._client(provider)
        if not code:
            raise ValidationException("Missing authorization code", code="OAUTH_NO_CODE")
        user_id = read_oauth_state(state, provider, self.settings) if state else None
        if not user_id:
            raise ValidationException("Invalid or expired OAuth state", code="OAUTH_INVALID_STATE")
        if user is not None and user.id != user_id:
            raise ForbiddenException("OAuth state belongs to another user", code="OAUTH_STATE_MISMATCH")

        try:
            tokens = client.exchange_code(code)
        except OAuthProviderError as e:
            raise self._translate(provider, e, "exchange the authorization code")

        account_id = self._external_account_id(client, tokens)

        existing = self.credential_repository.get_for(user_id, provider)
        fields: Dict[str, Any] = {
            "access_token": tokens.access_token,
            "expires_at": self._expires_at(tokens),
            "scope": tokens.scope,
            "external_account_id": account_id,
        }
        if tokens.refresh_token or existing is None:
            fields["refresh_token"] = tokens.refresh_token

        with self.transaction():
            credential = self.credential_repository.upsert(user_id, provider, **fields)
        self.logger.info(f"User {user_id} connected {provider}")
        return credential

    @BaseService.measure_operation("disconnect")
    def disconnect(self, user: User, provider: str) -> bool:
        """Forget the stored tokens. Returns False if nothing was connected."""
        if provider not in self.clients:
            raise ValidationException(f"Unknown provider: {provider}", code="UNKNOWN_PROVIDER")
        with self.transaction():
            removed = self.credential_repository.delete_for(user.id, provider)
        if removed:
            self.logger.info(f"User {user.id} disconnected {provider}")
        return removed

    def is_connected(self, user_id: str, provider: str) -> bool:
        return self.credential_repository.get_for(user_id, provider) is not None

    # Tokens

    @BaseService.measure_operation("get_valid_access_token")
    def get_valid_access_token(
        self, user_id: str, provider: str, force_refresh: bool = False
    ) -> Optional[str]:
        """
        Access token good for at least the refresh skew, or None if not connected.

        Tokens expiring within ``oauth_refresh_skew_seconds`` are refreshed
        first. The provider may omit a new refresh token; the old one is kept.

        Raises:
            DependencyFailureException: the refresh failed for a transient reason
        """
        client = self._client(provider)
        credential = self.credential_repository.get_for(user_id, provider)
        if credential is None:
            return None

        if not force_refresh and credential.access_token and self._is_fresh(credential):
            return credential.access_token

        if not credential.refresh_token:
            self.logger.info(f"{provider} token for user {user_id} expired with no refresh token")
            return None

        try:
            tokens = client.refresh(credential.refresh_token)
        except OAuthProviderError as e:
            if e.status_code in REVOKED_STATUSES:
                self.logger.warning(
                    f"{provider} refused to refresh token for user {user_id}; disconnecting"
                )
                prometheus_metrics.inc_token_refresh(provider, "revoked")
                with self.transaction():
                    self.credential_repository.delete_for(user_id, provider)
                return None
            prometheus_metrics.inc_token_refresh(provider, "error")
            raise self._translate(provider, e, "refresh the access token")

        with self.transaction():
            self.credential_repository.update(
                credential,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token or credential.refresh_token,
                expires_at=self._expires_at(tokens),
                scope=tokens.scope or credential.scope,
            )
        prometheus_metrics.inc_token_refresh(provider, "success")
        self.logger.info(f"Refreshed {provider} token for user {user_id}")
        return tokens.access_token

    def call_with_token(
        self, user_id: str, provider: str, call: Callable[[str], T]
    ) -> Optional[T]:
        """
        Run ``call(access_token)``; on a 401 refresh once and retry once.

        Returns None when the user has no usable connection.

        Raises:
            DependencyFailureException: provider unreachable or failing
            ServiceException: provider rejected the request
        """
        token = self.get_valid_access_token(user_id, provider)
        if token is None:
            return None
        try:
            return call(token)
        except OAuthProviderError as e:
            if not e.is_unauthorized:
                raise self._translate(provider, e, "complete the request")
            self.logger.info(f"{provider} rejected token for user {user_id}; refreshing once")

        token = self.get_valid_access_token(user_id, provider, force_refresh=True)
        if token is None:
            return None
        try:
            return call(token)
        except OAuthProviderError as e:
            raise self._translate(provider, e, "complete the request")

    # Provider actions

    @BaseService.measure_operation("create_zoom_meeting")
    def create_zoom_meeting(
        self,
        teacher_user_id: str,
        topic: str,
        start_time: datetime,
        duration_minutes: int,
        timezone_name: str = "UTC",
    ) -> Optional[Dict[str, str]]:
        """Meeting join details, or None if the teacher has not connected Zoom."""
        client = cast(ZoomClient, self._client(OAuthProvider.ZOOM.value))
        meeting = self.call_with_token(
            teacher_user_id,
            OAuthProvider.ZOOM.value,
            lambda token: client.create_meeting(
                token,
                topic=topic,
                start_time=start_time,
                duration_minutes=duration_minutes,
                timezone_name=timezone_name,
            ),
        )
        if meeting is None:
            return None
        return {"meeting_id": str(meeting.get("id")), "join_url": str(meeting.get("join_url"))}

    @BaseService.measure_operation("push_calendar_event")
    def push_calendar_event(
        self,
        user_id: str,
        summary: str,
        start: datetime,
        end: datetime,
        description: Optional[str] = None,
    ) -> Optional[str]:
        """Google event id, or None if the user has not connected Google Calendar."""
        if end <= start:
            raise ValidationException("Event end must be after its start")
        client = cast(GoogleCalendarClient, self._client(OAuthProvider.GOOGLE.value))
        event = self.call_with_token(
            user_id,
            OAuthProvider.GOOGLE.value,
            lambda token: client.insert_event(
                token, summary=summary, start=start, end=end, description=description
            ),
        )
        if event is None:
            return None
        return str(event.get("id")) if event.get("id") is not None else None

    # Helpers

    def _client(self, provider: str) -> OAuthProviderClient:
        client = self.clients.get(provider)
        if client is None:
            raise ValidationException(f"Unknown provider: {provider}", code="UNKNOWN_PROVIDER")
        if not client.is_configured:
            raise ServiceException(
                f"{provider} integration is not configured", code="PROVIDER_NOT_CONFIGURED"
            )
        return client

    def _is_fresh(self, credential: OAuthCredential) -> bool:
        expires_at = _as_utc(credential.expires_at)
        if expires_at is None:
            return False
        skew = timedelta(seconds=self.settings.oauth_refresh_skew_seconds)
        return expires_at > self.clock() + skew

    def _expires_at(self, tokens: TokenSet) -> datetime:
        return self.clock() + timedelta(seconds=tokens.expires_in)

    def _external_account_id(self, client: OAuthProviderClient, tokens: TokenSet) -> Optional[str]:
        if not isinstance(client, ZoomClient):
            return None
        try:
            profile = client.get_current_user(tokens.access_token)
        except OAuthProviderError as e:
            # The account id is informational; the connection still works without it
            self.logger.warning(f"Could not fetch Zoom user info: {e.message}")
            return None
        account_id = profile.get("id")
        return str(account_id) if account_id else None

    def _translate(self, provider: str, error: OAuthProviderError, action: str) -> Exception:
        if error.is_transient:
            self.logger.error(f"{provider} unavailable while trying to {action}: {error.message}")
            return DependencyFailureException(
                f"{provider} is temporarily unavailable",
                details={"provider": provider, "status_code": error.status_code},
            )
        self.logger.error(
            f"{provider} rejected the attempt to {action} ({error.status_code}): {error.message}"
        )
        return ServiceException(
            f"{provider} rejected the request: {error.message}",
            code="PROVIDER_ERROR",
            details={"provider": provider, "status_code": error.status_code},
        )
