from datetime import timedelta

import pytest

from app.auth import (
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    generate_one_time_token,
    get_password_hash,
    hash_token,
    verify_password,
)


class TestJwtTokens:
    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1", "email": "a@example.com"})
        payload = decode_access_token(token)
        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@example.com"
        assert payload["type"] == "access"

    def test_refresh_token_round_trip(self):
        payload = decode_refresh_token(create_refresh_token({"sub": "user-1"}))
        assert payload["sub"] == "user-1"
        assert payload["type"] == "refresh"

    def test_access_token_is_not_a_refresh_token(self):
        token = create_access_token({"sub": "user-1"})
        with pytest.raises(InvalidTokenError):
            decode_refresh_token(token)

    def test_refresh_token_is_not_an_access_token(self):
        token = create_refresh_token({"sub": "user-1"})
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not-a-jwt")

    def test_token_without_subject_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token(create_access_token({"email": "a@example.com"}))


class TestPasswordsAndOneTimeTokens:
    def test_password_hash_verifies(self):
        hashed = get_password_hash("TestPassword123!")
        assert hashed != "TestPassword123!"
        assert verify_password("TestPassword123!", hashed)
        assert not verify_password("wrong-password", hashed)

    def test_one_time_tokens_are_random_hex(self):
        first, second = generate_one_time_token(), generate_one_time_token()
        assert first != second
        assert len(first) == 64
        int(first, 16)

    def test_hash_token_is_stable_sha256(self):
        assert hash_token("abc") == hash_token("abc")
        assert hash_token("abc") != "abc"
        assert len(hash_token("abc")) == 64
