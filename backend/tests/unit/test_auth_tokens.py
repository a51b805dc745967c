"""Tests for access tokens and signed OAuth state."""

from datetime import timedelta

import jwt
import pytest

from tutorly.auth import (
    create_access_token,
    create_oauth_state,
    decode_access_token,
    read_oauth_state,
)


def test_access_token_round_trip(test_settings):
    token = create_access_token({"sub": "user-1"}, test_settings)
    assert decode_access_token(token, test_settings)["sub"] == "user-1"


def test_expired_access_token(test_settings):
    token = create_access_token({"sub": "user-1"}, test_settings, expires_delta=timedelta(seconds=-1))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token, test_settings)


def test_oauth_state_is_not_an_access_token(test_settings):
    state = create_oauth_state("user-1", "zoom", test_settings)
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(state, test_settings)


def test_oauth_state_is_bound_to_provider(test_settings):
    state = create_oauth_state("user-1", "zoom", test_settings)
    assert read_oauth_state(state, "zoom", test_settings) == "user-1"
    assert read_oauth_state(state, "google", test_settings) is None


def test_access_token_is_not_an_oauth_state(test_settings):
    token = create_access_token({"sub": "user-1"}, test_settings)
    assert read_oauth_state(token, "zoom", test_settings) is None


def test_tampered_state(test_settings):
    state = create_oauth_state("user-1", "zoom", test_settings)
    forged = state.rsplit(".", 1)[0] + ".forged-signature"
    assert read_oauth_state(forged, "zoom", test_settings) is None
