"""Tests for app/auth/tokens.py - JWT issuing and verification."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from app.auth.exceptions import InvalidTokenError
from app.auth.tokens import ALGORITHM, TokenService
from app.core.exceptions import ConfigurationError
from app.user.models import User
from tests.factories import build_user


@pytest.fixture
def user() -> User:
    return build_user(1)


def test_tokens_carry_subject_and_email(tokens: TokenService, user: User):
    pair = tokens.generate_tokens(user)

    access = tokens.verify_token(pair.access_token)
    refresh = tokens.verify_token(pair.refresh_token, is_refresh=True)

    assert access.sub == refresh.sub == user.id
    assert access.email == refresh.email == user.email


def test_refresh_token_outlives_access_token(user: User):
    service = TokenService(
        "a" * 32,
        "r" * 32,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )
    pair = service.generate_tokens(user)

    access = service.verify_token(pair.access_token)
    refresh = service.verify_token(pair.refresh_token, is_refresh=True)

    assert refresh.exp - access.exp > timedelta(days=6)


def test_tokens_are_not_interchangeable(tokens: TokenService, user: User):
    pair = tokens.generate_tokens(user)

    with pytest.raises(InvalidTokenError):
        tokens.verify_token(pair.refresh_token)
    with pytest.raises(InvalidTokenError):
        tokens.verify_token(pair.access_token, is_refresh=True)


def test_expired_token_rejected(user: User):
    service = TokenService("a" * 32, "r" * 32, access_ttl=timedelta(seconds=-1))
    pair = service.generate_tokens(user)

    with pytest.raises(InvalidTokenError) as exc_info:
        service.verify_token(pair.access_token)

    assert exc_info.value.message == "Invalid or expired token"


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not-a-jwt",
        jwt.encode({"sub": str(uuid.uuid4()), "exp": 9999999999}, "x" * 32),
        jwt.encode(
            {"sub": "not-a-uuid", "exp": datetime.now(UTC) + timedelta(hours=1)},
            "a" * 32,
            algorithm=ALGORITHM,
        ),
        jwt.encode({"sub": str(uuid.uuid4())}, "a" * 32, algorithm=ALGORITHM),
    ],
    ids=["empty", "garbage", "foreign-key", "bad-subject", "no-expiry"],
)
def test_malformed_tokens_rejected(tokens: TokenService, token: str):
    with pytest.raises(InvalidTokenError) as exc_info:
        tokens.verify_token(token)

    assert exc_info.value.message == "Invalid or expired token"


@pytest.mark.parametrize("secrets", [("", "r" * 32), ("a" * 32, "")])
def test_missing_secret_fails_fast(secrets):
    with pytest.raises(ConfigurationError):
        TokenService(*secrets)
