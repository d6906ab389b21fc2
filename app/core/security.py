"""Security utilities for staff password hashing and JWT handling."""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import settings

SALT_LENGTH = 9
RESET_PASSWORD_LENGTH = 10


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def _random_md5() -> str:
    """md5 hex digest of fresh random bytes."""
    return hashlib.md5(secrets.token_bytes(16)).hexdigest()


def generate_salt() -> str:
    """Generate a new 9-character hex salt."""
    return _random_md5()[:SALT_LENGTH]


def generate_password() -> str:
    """Generate a random 10-character password for resets."""
    return _random_md5()[:RESET_PASSWORD_LENGTH]


def hash_password(password: str, salt: str) -> str:
    """
    Hash a password the way stored staff credentials are hashed.

    The format is sha1(salt + sha1(salt + sha1(password))), all hex digests.
    Existing credential rows depend on it, so it must not change.
    """
    return _sha1(salt + _sha1(salt + _sha1(password)))


def verify_password(plain_password: str, salt: str, hashed_password: str) -> bool:
    """Verify a password against a stored salt and hash."""
    return hmac.compare_digest(hash_password(plain_password, salt), hashed_password)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(UTC),
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token to decode

    Returns:
        Decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    return payload
