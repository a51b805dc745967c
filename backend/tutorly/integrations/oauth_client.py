"""OAuth 2.0 authorization-code client shared by the Zoom and Google integrations.

Handles the consent URL, the code exchange and token refresh, plus an
authenticated ``_request`` helper for provider API calls.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, cast
from urllib.parse import urlencode

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class OAuthProviderError(RuntimeError):
    """Raised when a provider is unreachable or responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_transient(self) -> bool:
        """Network failures, throttling and 5xx responses are worth retrying later."""
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


@dataclass(frozen=True)
class TokenSet:
    """Tokens returned by a code exchange or refresh."""

    access_token: str
    refresh_token: str | None
    expires_in: int
    scope: str | None = None

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "TokenSet":
        access_token = payload.get("access_token")
        if not access_token:
            raise OAuthProviderError("Token response did not include an access token")
        return cls(
            access_token=str(access_token),
            refresh_token=payload.get("refresh_token") or None,
            expires_in=int(payload.get("expires_in") or 3600),
            scope=payload.get("scope"),
        )


class OAuthProviderClient:
    """Base HTTP client for an OAuth 2.0 provider."""

    provider: str = ""
    authorize_url: str = ""
    token_url: str = ""
    api_base_url: str = ""
    scopes: tuple[str, ...] = ()

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | SecretStr,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = (
            client_secret.get_secret_value()
            if isinstance(client_secret, SecretStr)
            else client_secret
        )
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ── OAuth flow ──────────────────────────────────────────────────────

    def authorization_url(self, state: str) -> str:
        """Consent page URL the user is sent to."""
        params = {
            "response_type": "code",
            "client_id": self._client_id or "",
            "redirect_uri": self._redirect_uri,
            "scope": " ".join(self.scopes),
            "state": state,
        }
        params.update(self._extra_authorize_params())
        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> TokenSet:
        """Trade an authorization code for tokens."""
        payload = self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
            }
        )
        return TokenSet.from_response(payload)

    def refresh(self, refresh_token: str) -> TokenSet:
        """Trade a refresh token for a new access token."""
        payload = self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )
        return TokenSet.from_response(payload)

    def _extra_authorize_params(self) -> dict[str, str]:
        return {}

    def _token_request(self, form: dict[str, str]) -> dict[str, Any]:
        """POST to the token endpoint. Providers differ in how the client authenticates."""
        raise NotImplementedError

    # ── HTTP ────────────────────────────────────────────────────────────

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport)

    def _request(
        self,
        method: str,
        url: str,
        *,
        access_token: str | None = None,
        json_body: dict[str, Any] | None = None,
        form: dict[str, str] | None = None,
        basic_auth: tuple[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body ({} for empty responses)."""
        headers: dict[str, str] = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        try:
            with self._client() as client:
                response = client.request(
                    method,
                    url,
                    headers=headers,
                    json=json_body,
                    data=form,
                    auth=basic_auth,
                )
        except httpx.TransportError as exc:
            logger.error("%s API unreachable for %s %s: %s", self.provider, method, url, exc)
            raise OAuthProviderError(
                message=f"{self.provider} API unreachable: {exc}",
                status_code=None,
            ) from exc

        if response.status_code >= 400:
            error_body: dict[str, Any] = {}
            try:
                parsed_body = response.json()
                if isinstance(parsed_body, dict):
                    error_body = parsed_body
                else:
                    error_body = {"raw": response.text[:500]}
            except ValueError:
                error_body = {"raw": response.text[:500]}

            raw_error = error_body.get("error")
            message = (
                error_body.get("error_description")
                or error_body.get("message")
                or (raw_error.get("message") if isinstance(raw_error, dict) else raw_error)
                or response.text[:200]
                or f"HTTP {response.status_code}"
            )
            logger.error(
                "%s API error %s for %s %s",
                self.provider,
                response.status_code,
                method,
                url,
            )
            raise OAuthProviderError(
                message=str(message),
                status_code=response.status_code,
                details=error_body,
            )

        if response.status_code == 204 or not response.content:
            return {}
        return cast(dict[str, Any], response.json())
