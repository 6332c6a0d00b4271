from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .core.config import settings

logger = logging.getLogger(__name__)

# Minimum bcrypt cost under test
_BCRYPT_ROUNDS = 4 if settings.is_testing else 12
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=_BCRYPT_ROUNDS)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Valid bcrypt hash compared against when the account does not exist, so
# login takes the same time for unknown emails.
DUMMY_HASH_FOR_TIMING_ATTACK = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.V4ferVKnNaOuJi"


class InvalidTokenError(Exception):
    """Raised when a JWT cannot be decoded or has the wrong type."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return str(pwd_context.hash(password))


def _encode(claims: Dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return cast(str, jwt.encode(to_encode, secret, algorithm=settings.algorithm))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode; ``sub`` must be the user id
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    token = _encode(
        {**data, "type": ACCESS_TOKEN_TYPE},
        settings.secret_key.get_secret_value(),
        delta,
    )
    logger.info(f"Created access token for user: {data.get('sub')}")
    return token


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a refresh token signed with the dedicated refresh secret."""
    delta = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _encode(
        {**data, "type": REFRESH_TOKEN_TYPE},
        settings.refresh_secret_key.get_secret_value(),
        delta,
    )


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = cast(
            Dict[str, Any],
            jwt.decode(token, secret, algorithms=[settings.algorithm]),
        )
    except PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise InvalidTokenError("Unexpected token type")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate an access token. Raises InvalidTokenError."""
    return _decode(token, settings.secret_key.get_secret_value(), ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Decode and validate a refresh token. Raises InvalidTokenError."""
    return _decode(token, settings.refresh_secret_key.get_secret_value(), REFRESH_TOKEN_TYPE)


def generate_one_time_token() -> str:
    """32 random bytes as hex, sent to the user by email."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 of a one-time token; only the hash is persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
