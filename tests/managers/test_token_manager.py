# tests/managers/test_token_manager.py
"""Tests for app/managers/token_manager.py module."""

from datetime import timedelta

from jose import jwt

from app.configs import settings
from app.managers.token_manager import create_access_token, decode_access_token, is_owner_email


def test_round_trip_claims() -> None:
    token = create_access_token(user_id=7, email="jane@example.com", name="Jane")
    data = decode_access_token(token)

    assert data is not None
    assert data.user_id == 7
    assert data.email == "jane@example.com"
    assert data.name == "Jane"
    assert data.is_owner is False
    assert data.jti


def test_owner_claim() -> None:
    token = create_access_token(user_id=1, email="OWNER@example.com", name="Owner")
    assert decode_access_token(token).is_owner is True


def test_is_owner_email_is_case_insensitive() -> None:
    assert is_owner_email("owner@EXAMPLE.com")
    assert not is_owner_email("someone@example.com")


def test_expired_token_is_rejected() -> None:
    token = create_access_token(1, "a@example.com", "A", expires_delta=timedelta(seconds=-1))
    assert decode_access_token(token) is None


def test_wrong_secret_is_rejected() -> None:
    token = jwt.encode(
        {
            "sub": "1",
            "email": "a@example.com",
            "type": "access",
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        },
        "another-secret",
        algorithm=settings.ALGORITHM,
    )
    assert decode_access_token(token) is None


def test_non_access_token_is_rejected() -> None:
    token = jwt.encode(
        {
            "sub": "1",
            "email": "a@example.com",
            "type": "refresh",
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    assert decode_access_token(token) is None


def test_garbage_is_rejected() -> None:
    assert decode_access_token("not-a-token") is None
