"""Security utilities for password hashing, JWT tokens and reset tokens."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from bcrypt import checkpw, gensalt, hashpw
from jose import ExpiredSignatureError, JWTError, jwt

from natours.config import settings
from natours.core.errors import AuthenticationError


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password as a string

    Example:
        ```python
        from natours.core.security import hash_password

        hashed = hash_password("my_password")
        ```
    """
    return hashpw(password.encode("utf-8"), gensalt(12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(
    user_id: Any,
    expires_delta: timedelta | None = None,
    issued_at: datetime | None = None,
) -> str:
    """Create a signed JWT for a user.

    Args:
        user_id: Subject of the token
        expires_delta: Optional custom lifetime. Defaults to ``jwt_expires_in_days``
        issued_at: Optional issue time, defaults to now

    Returns:
        Encoded JWT token string

    Example:
        ```python
        from natours.core.security import create_access_token

        token = create_access_token(user.id)
        ```
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(days=settings.jwt_expires_in_days)

    to_encode = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload as dictionary

    Raises:
        AuthenticationError: If the token is expired, malformed or badly signed
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Your token has expired! Please log in again.") from e
    except JWTError as e:
        raise AuthenticationError("Invalid token. Please log in again!") from e


def hash_reset_token(token: str) -> str:
    """One-way digest of a password reset token, as stored in the database."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_password_reset_token() -> tuple[str, str, datetime]:
    """Generate a password reset token.

    Returns:
        Tuple of (plain token to email, digest to store, expiry time)
    """
    token = secrets.token_hex(32)
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.password_reset_expires_minutes)
    return token, hash_reset_token(token), expires
