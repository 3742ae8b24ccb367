"""Tests for password hashing, input rules and tokens."""

from datetime import timedelta

import pytest

from personachat.core.security import (
    create_access_token,
    generate_temporary_password,
    hash_password,
    is_strong_password,
    is_valid_email,
    is_valid_username,
    verify_password,
    verify_token,
)


def test_password_hash_round_trip():
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert verify_password("Secret123", hashed)
    assert not verify_password("secret123", hashed)


@pytest.mark.parametrize("email,valid", [
    ("nel@example.com", True),
    ("nel@example", False),
    ("nel example@x.com", False),
    ("", False),
])
def test_email_format(email, valid):
    assert is_valid_email(email) is valid


@pytest.mark.parametrize("username,valid", [
    ("nel_fan", True),
    ("ab", False),
    ("has space", False),
    ("x" * 31, False),
])
def test_username_format(username, valid):
    assert is_valid_username(username) is valid


@pytest.mark.parametrize("password,valid", [
    ("Secret123", True),
    ("secret123", False),
    ("SECRET123", False),
    ("Secretxyz", False),
    ("Sec12", False),
])
def test_password_strength(password, valid):
    assert is_strong_password(password) is valid


def test_temporary_password_is_strong():
    for _ in range(20):
        assert is_strong_password(generate_temporary_password())


class TestTokens:
    def test_token_carries_subject(self):
        payload = verify_token(create_access_token({"sub": "42"}))
        assert payload["sub"] == "42"
        assert "exp" in payload

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-10))
        assert verify_token(token) is None

    def test_garbage_is_rejected(self):
        assert verify_token("not-a-jwt") is None
