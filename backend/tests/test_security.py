"""Tests for password hashing and token issuance/verification."""

from datetime import timedelta

from auth.security import (
    create_access_token,
    create_user_token,
    get_token_user_id,
    hash_password,
    verify_password,
    verify_token,
)


def test_hash_password_never_stores_plaintext():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_verify_password_with_garbage_hash_returns_false():
    assert verify_password("secret123", "not-a-hash") is False


def test_user_token_round_trip():
    token = create_user_token(42)
    assert get_token_user_id(token) == 42
    payload = verify_token(token)
    assert payload["sub"] == "42"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-10))
    assert verify_token(token) is None
    assert get_token_user_id(token) is None


def test_tampered_token_is_rejected():
    token = create_user_token(7)
    assert get_token_user_id(token[:-2] + ("AA" if not token.endswith("AA") else "BB")) is None


def test_token_with_non_numeric_subject_is_rejected():
    token = create_access_token({"sub": "not-a-number"})
    assert get_token_user_id(token) is None
