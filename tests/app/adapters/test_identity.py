"""Tests for the identity providers."""

import time
import uuid

import pytest
from jose import jwt
from starlette.requests import Request

from app.adapters.identity import HeaderIdentityProvider, JWTIdentityProvider
from app.exceptions import NotAuthenticated

SECRET = "test-secret"


def _request(headers: dict) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


def _token(claims: dict) -> str:
    return jwt.encode(claims, SECRET, algorithm="HS256")


def test_jwt_provider_returns_sub():
    user_id = uuid.uuid4()
    token = _token({"sub": str(user_id), "aud": "authenticated", "exp": int(time.time()) + 60})
    provider = JWTIdentityProvider(SECRET, audience="authenticated")
    assert provider.current_user_id(_request({"Authorization": f"Bearer {token}"})) == user_id


def test_jwt_provider_without_audience_check():
    user_id = uuid.uuid4()
    token = _token({"sub": str(user_id)})
    provider = JWTIdentityProvider(SECRET)
    assert provider.current_user_id(_request({"Authorization": f"Bearer {token}"})) == user_id


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic abc"},
        {"Authorization": "Bearer "},
        {"Authorization": "Bearer not-a-jwt"},
    ],
)
def test_jwt_provider_rejects_bad_headers(headers):
    with pytest.raises(NotAuthenticated):
        JWTIdentityProvider(SECRET).current_user_id(_request(headers))


def test_jwt_provider_rejects_expired_token():
    token = _token({"sub": str(uuid.uuid4()), "exp": int(time.time()) - 60})
    with pytest.raises(NotAuthenticated):
        JWTIdentityProvider(SECRET).current_user_id(
            _request({"Authorization": f"Bearer {token}"})
        )


def test_jwt_provider_rejects_wrong_secret():
    token = jwt.encode({"sub": str(uuid.uuid4())}, "other", algorithm="HS256")
    with pytest.raises(NotAuthenticated):
        JWTIdentityProvider(SECRET).current_user_id(
            _request({"Authorization": f"Bearer {token}"})
        )


def test_jwt_provider_rejects_non_uuid_sub():
    token = _token({"sub": "alice"})
    with pytest.raises(NotAuthenticated):
        JWTIdentityProvider(SECRET).current_user_id(
            _request({"Authorization": f"Bearer {token}"})
        )


def test_header_provider():
    user_id = uuid.uuid4()
    provider = HeaderIdentityProvider()
    assert provider.current_user_id(_request({"X-User-Id": str(user_id)})) == user_id
    with pytest.raises(NotAuthenticated):
        provider.current_user_id(_request({}))
