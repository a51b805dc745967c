"""Route tests for /api/v1/integrations (OAuth connect, callback, disconnect)."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from tutorly.auth import create_oauth_state
from tutorly.integrations import GoogleCalendarClient, ZoomClient
from tutorly.models.oauth_credential import OAuthCredential

BASE = "/api/v1/integrations"
SETTINGS_PAGE = "http://testserver/teacher/settings"


def zoom_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/oauth/token":
        form = parse_qs(request.content.decode())
        if form.get("code") == ["bad-code"]:
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(
            200, json={"access_token": "zoom-at", "refresh_token": "zoom-rt", "expires_in": 3600}
        )
    if request.url.path == "/v2/users/me":
        return httpx.Response(200, json={"id": "zoom-user-1"})
    return httpx.Response(404)


def google_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": "backendError"})


@pytest.fixture
def provider_clients(app):
    clients = {
        "zoom": ZoomClient(
            client_id="zoom-client-id",
            client_secret="zoom-client-secret",
            redirect_uri="http://testserver/api/v1/integrations/zoom/callback",
            transport=httpx.MockTransport(zoom_handler),
        ),
        "google": GoogleCalendarClient(
            client_id="google-client-id",
            client_secret="google-client-secret",
            redirect_uri="http://testserver/api/v1/integrations/google/callback",
            transport=httpx.MockTransport(google_handler),
        ),
    }
    app.state.oauth_clients = clients
    return clients


def redirect_params(response):
    location = response.headers["location"]
    assert location.startswith(SETTINGS_PAGE)
    return {k: v[0] for k, v in parse_qs(urlparse(location).query).items()}


class TestConnect:
    def test_returns_consent_url(self, client, provider_clients, teacher_user, auth_headers_teacher):
        response = client.get(f"{BASE}/zoom/connect", headers=auth_headers_teacher)

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "zoom"
        url = urlparse(body["authorization_url"])
        assert url.netloc == "zoom.us"
        assert parse_qs(url.query)["state"][0]

    def test_requires_authentication(self, client, provider_clients):
        response = client.get(f"{BASE}/zoom/connect")
        assert response.status_code == 401

    def test_unknown_provider(self, client, auth_headers_teacher):
        response = client.get(f"{BASE}/dropbox/connect", headers=auth_headers_teacher)
        assert response.status_code == 422


class TestCallback:
    def test_success_stores_tokens_and_redirects(
        self, client, db, provider_clients, teacher_user, test_settings
    ):
        state = create_oauth_state(teacher_user.id, "zoom", test_settings)

        response = client.get(
            f"{BASE}/zoom/callback",
            params={"code": "good-code", "state": state},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert redirect_params(response) == {"tab": "calendar", "success": "zoom_connected"}
        credential = db.query(OAuthCredential).filter_by(user_id=teacher_user.id).one()
        assert credential.access_token == "zoom-at"
        assert credential.refresh_token == "zoom-rt"
        assert credential.external_account_id == "zoom-user-1"

    def test_user_denied(self, client, provider_clients):
        response = client.get(
            f"{BASE}/google/callback", params={"error": "access_denied"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert redirect_params(response)["error"] == "google_denied"

    def test_missing_code(self, client, provider_clients, teacher_user, test_settings):
        state = create_oauth_state(teacher_user.id, "zoom", test_settings)
        response = client.get(
            f"{BASE}/zoom/callback", params={"state": state}, follow_redirects=False
        )
        assert redirect_params(response)["error"] == "no_code"

    def test_state_for_other_provider(self, client, provider_clients, teacher_user, test_settings):
        state = create_oauth_state(teacher_user.id, "google", test_settings)
        response = client.get(
            f"{BASE}/zoom/callback",
            params={"code": "good-code", "state": state},
            follow_redirects=False,
        )
        assert redirect_params(response)["error"] == "invalid_state"

    def test_state_for_another_signed_in_user(
        self, client, db, provider_clients, teacher_user, auth_headers_other_teacher, test_settings
    ):
        state = create_oauth_state(teacher_user.id, "zoom", test_settings)
        response = client.get(
            f"{BASE}/zoom/callback",
            params={"code": "good-code", "state": state},
            headers=auth_headers_other_teacher,
            follow_redirects=False,
        )
        assert redirect_params(response)["error"] == "unauthorized"
        assert db.query(OAuthCredential).count() == 0

    def test_rejected_code(self, client, provider_clients, teacher_user, test_settings):
        state = create_oauth_state(teacher_user.id, "zoom", test_settings)
        response = client.get(
            f"{BASE}/zoom/callback",
            params={"code": "bad-code", "state": state},
            follow_redirects=False,
        )
        assert redirect_params(response)["error"] == "callback_failed"

    def test_provider_outage(self, client, db, provider_clients, teacher_user, test_settings):
        state = create_oauth_state(teacher_user.id, "google", test_settings)
        response = client.get(
            f"{BASE}/google/callback",
            params={"code": "good-code", "state": state},
            follow_redirects=False,
        )
        assert redirect_params(response)["error"] == "callback_failed"
        assert db.query(OAuthCredential).count() == 0


class TestDisconnect:
    def test_disconnect(self, client, db, provider_clients, teacher_user, auth_headers_teacher, test_settings):
        state = create_oauth_state(teacher_user.id, "zoom", test_settings)
        client.get(
            f"{BASE}/zoom/callback",
            params={"code": "good-code", "state": state},
            follow_redirects=False,
        )

        first = client.delete(f"{BASE}/zoom", headers=auth_headers_teacher)
        second = client.delete(f"{BASE}/zoom", headers=auth_headers_teacher)

        assert first.json() == {"provider": "zoom", "disconnected": True}
        assert second.json() == {"provider": "zoom", "disconnected": False}
        assert db.query(OAuthCredential).count() == 0

    def test_requires_authentication(self, client, provider_clients):
        assert client.delete(f"{BASE}/zoom").status_code == 401
