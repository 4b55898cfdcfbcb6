"""
Tests for password hashing and bearer tokens.
"""
import time
from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import SECRET_KEY, ALGORITHM
from app.core.exceptions import InvalidToken, TokenExpired
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_password_is_salted_and_verifies():
    first = hash_password("testpass123")
    second = hash_password("testpass123")

    assert first != second
    assert first != "testpass123"
    assert verify_password("testpass123", first)
    assert verify_password("testpass123", second)


def test_verify_password_wrong_password():
    hashed = hash_password("testpass123")
    assert verify_password("wrongpass", hashed) is False


def test_verify_password_unreadable_hash_returns_false():
    """A hash neither bcrypt nor the legacy context can read never verifies."""
    assert verify_password("testpass123", "not-a-bcrypt-hash") is False
    assert verify_password("testpass123", None) is False


def test_password_over_72_bytes_matches_its_prefix():
    """bcrypt only sees the first 72 bytes."""
    hashed = hash_password("a" * 80)
    assert verify_password("a" * 72, hashed)


def test_token_round_trip_returns_user_id():
    token = create_access_token("user-123")
    assert decode_access_token(token) == "user-123"


def test_token_default_expiry_is_thirty_days():
    token = create_access_token("user-123")
    claims = jwt.get_unverified_claims(token)
    assert abs(claims["exp"] - time.time() - 30 * 24 * 3600) < 60


def test_expired_token_raises_token_expired():
    token = create_access_token("user-123", expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenExpired):
        decode_access_token(token)


def test_tampered_token_raises_invalid_token():
    token = create_access_token("user-123")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(InvalidToken):
        decode_access_token(tampered)


def test_token_signed_with_other_secret_is_invalid():
    token = jwt.encode({"sub": "user-123"}, SECRET_KEY + "-other", algorithm=ALGORITHM)
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_malformed_token_is_invalid():
    with pytest.raises(InvalidToken):
        decode_access_token("not.a.token")


def test_token_without_subject_is_invalid():
    token = jwt.encode({"foo": "bar"}, SECRET_KEY, algorithm=ALGORITHM)
    with pytest.raises(InvalidToken):
        decode_access_token(token)
