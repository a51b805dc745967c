"""Tests for the Zoom and Google OAuth clients using httpx.MockTransport."""

from datetime import datetime, timezone
import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from tutorly.integrations import GoogleCalendarClient, OAuthProviderError, TokenSet, ZoomClient


def make_client(cls, handler):
    return cls(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://testserver/callback",
        transport=httpx.MockTransport(handler),
    )


class TestTokenSet:
    def test_defaults(self):
        tokens = TokenSet.from_response({"access_token": "a"})
        assert tokens.refresh_token is None
        assert tokens.expires_in == 3600

    def test_missing_access_token(self):
        with pytest.raises(OAuthProviderError):
            TokenSet.from_response({"refresh_token": "r"})


class TestZoomClient:
    def test_authorization_url(self):
        client = make_client(ZoomClient, lambda request: httpx.Response(200))
        url = urlparse(client.authorization_url("signed-state"))
        params = parse_qs(url.query)
        assert url.netloc == "zoom.us"
        assert params["state"] == ["signed-state"]
        assert params["client_id"] == ["client-id"]
        assert params["scope"] == ["user:read meeting:write"]
        assert params["response_type"] == ["code"]

    def test_exchange_code_uses_basic_auth(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(
                200, json={"access_token": "at", "refresh_token": "rt", "expires_in": 3599}
            )

        tokens = make_client(ZoomClient, handler).exchange_code("the-code")

        assert tokens == TokenSet("at", "rt", 3599, None)
        assert seen["auth"].startswith("Basic ")
        assert seen["form"]["grant_type"] == ["authorization_code"]
        assert seen["form"]["code"] == ["the-code"]

    def test_create_meeting_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 123, "join_url": "https://zoom.us/j/123"})

        meeting = make_client(ZoomClient, handler).create_meeting(
            "at",
            topic="Algebra",
            start_time=datetime(2025, 3, 4, 14, 0, tzinfo=timezone.utc),
            duration_minutes=60,
        )

        assert meeting["id"] == 123
        assert seen["url"] == "https://api.zoom.us/v2/users/me/meetings"
        assert seen["auth"] == "Bearer at"
        assert seen["body"]["type"] == 2
        assert seen["body"]["start_time"] == "2025-03-04T14:00:00Z"
        assert seen["body"]["duration"] == 60

    def test_delete_meeting_ignores_missing(self):
        client = make_client(ZoomClient, lambda request: httpx.Response(404, json={"message": "gone"}))
        client.delete_meeting("at", 123)

    def test_error_status_is_reported(self):
        client = make_client(
            ZoomClient, lambda request: httpx.Response(401, json={"message": "Invalid access token"})
        )
        with pytest.raises(OAuthProviderError) as exc_info:
            client.get_current_user("stale")
        assert exc_info.value.status_code == 401
        assert exc_info.value.is_unauthorized
        assert not exc_info.value.is_transient
        assert exc_info.value.message == "Invalid access token"

    def test_network_failure_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OAuthProviderError) as exc_info:
            make_client(ZoomClient, handler).refresh("rt")
        assert exc_info.value.status_code is None
        assert exc_info.value.is_transient

    def test_not_configured(self):
        client = ZoomClient(client_id=None, client_secret="", redirect_uri="http://x")
        assert client.is_configured is False


class TestGoogleCalendarClient:
    def test_authorization_url_requests_offline_access(self):
        client = make_client(GoogleCalendarClient, lambda request: httpx.Response(200))
        params = parse_qs(urlparse(client.authorization_url("s")).query)
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]

    def test_refresh_sends_credentials_in_form(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"access_token": "new", "expires_in": 3600})

        tokens = make_client(GoogleCalendarClient, handler).refresh("rt")

        assert tokens.access_token == "new"
        assert tokens.refresh_token is None
        assert seen["auth"] is None
        assert seen["form"]["client_id"] == ["client-id"]
        assert seen["form"]["client_secret"] == ["client-secret"]
        assert seen["form"]["refresh_token"] == ["rt"]

    def test_insert_event(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "evt-1"})

        event = make_client(GoogleCalendarClient, handler).insert_event(
            "at",
            summary="Lesson",
            start=datetime(2025, 3, 4, 14, 0),
            end=datetime(2025, 3, 4, 15, 0),
            description="Algebra",
        )

        assert event == {"id": "evt-1"}
        assert seen["url"].endswith("/calendars/primary/events")
        assert seen["body"]["start"] == {"dateTime": "2025-03-04T14:00:00Z"}
        assert seen["body"]["description"] == "Algebra"

    def test_server_error_is_transient(self):
        client = make_client(
            GoogleCalendarClient,
            lambda request: httpx.Response(503, json={"error": {"message": "backend error"}}),
        )
        with pytest.raises(OAuthProviderError) as exc_info:
            client.insert_event("at", summary="x", start=datetime(2025, 1, 1), end=datetime(2025, 1, 2))
        assert exc_info.value.is_transient
        assert exc_info.value.message == "backend error"
