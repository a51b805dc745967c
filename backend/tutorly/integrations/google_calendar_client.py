"""Google Calendar integration client.

Pushes lesson events to the user's primary calendar.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from .oauth_client import OAuthProviderClient

logger = logging.getLogger(__name__)


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class GoogleCalendarClient(OAuthProviderClient):
    """HTTP client for Google OAuth and the Calendar v3 API."""

    provider = "google"
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    api_base_url = "https://www.googleapis.com/calendar/v3"
    scopes = ("https://www.googleapis.com/auth/calendar.events",)

    def _extra_authorize_params(self) -> dict[str, str]:
        # offline + consent so Google issues a refresh token
        return {"access_type": "offline", "prompt": "consent", "include_granted_scopes": "true"}

    def _token_request(self, form: dict[str, str]) -> dict[str, Any]:
        body = dict(form)
        body["client_id"] = self._client_id or ""
        body["client_secret"] = self._client_secret
        return self._request("POST", self.token_url, form=body)

    def insert_event(
        self,
        access_token: str,
        *,
        summary: str,
        start: datetime,
        end: datetime,
        description: str | None = None,
        calendar_id: str = "primary",
    ) -> dict[str, Any]:
        """Create an event and return Google's representation of it."""
        body: dict[str, Any] = {
            "summary": summary,
            "start": {"dateTime": _rfc3339(start)},
            "end": {"dateTime": _rfc3339(end)},
            "reminders": {"useDefault": True},
        }
        if description:
            body["description"] = description
        return self._request(
            "POST",
            f"{self.api_base_url}/calendars/{calendar_id}/events",
            access_token=access_token,
            json_body=body,
        )
