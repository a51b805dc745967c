"""Zoom integration client.

Creates and deletes scheduled meetings on the connected teacher's account.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from .oauth_client import OAuthProviderClient, OAuthProviderError

logger = logging.getLogger(__name__)

SCHEDULED_MEETING = 2


class ZoomClient(OAuthProviderClient):
    """HTTP client for the Zoom OAuth and REST APIs."""

    provider = "zoom"
    authorize_url = "https://zoom.us/oauth/authorize"
    token_url = "https://zoom.us/oauth/token"
    api_base_url = "https://api.zoom.us/v2"
    scopes = ("user:read", "meeting:write")

    def _token_request(self, form: dict[str, str]) -> dict[str, Any]:
        # Zoom authenticates the app with HTTP Basic on the token endpoint
        return self._request(
            "POST",
            self.token_url,
            form=form,
            basic_auth=(self._client_id or "", self._client_secret),
        )

    def get_current_user(self, access_token: str) -> dict[str, Any]:
        """Profile of the account that granted access."""
        return self._request("GET", f"{self.api_base_url}/users/me", access_token=access_token)

    def create_meeting(
        self,
        access_token: str,
        *,
        topic: str,
        start_time: datetime,
        duration_minutes: int,
        timezone_name: str = "UTC",
    ) -> dict[str, Any]:
        """Create a scheduled meeting students can join before the host."""
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)
        body = {
            "topic": topic,
            "type": SCHEDULED_MEETING,
            "start_time": start_time.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "duration": duration_minutes,
            "timezone": timezone_name,
            "settings": {
                "host_video": True,
                "participant_video": True,
                "join_before_host": True,
                "waiting_room": False,
                "mute_upon_entry": False,
                "audio": "both",
                "auto_recording": "none",
            },
        }
        return self._request(
            "POST",
            f"{self.api_base_url}/users/me/meetings",
            access_token=access_token,
            json_body=body,
        )

    def delete_meeting(self, access_token: str, meeting_id: str | int) -> None:
        """Delete a meeting. A meeting that is already gone counts as deleted."""
        try:
            self._request(
                "DELETE", f"{self.api_base_url}/meetings/{meeting_id}", access_token=access_token
            )
        except OAuthProviderError as e:
            if e.status_code == 404:
                return
            raise
