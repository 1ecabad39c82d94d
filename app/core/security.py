"""
Password hashing and access tokens.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs carrying the
user id and role. Department and team are re-read from the user record on
every request, never trusted from the token.
"""

from datetime import timedelta
from typing import Any, Dict

import bcrypt
import jwt

from app.core.config import settings
from app.errors import AuthenticationError
from app.utils.time import utc_now


def hash_password(password: str) -> str:
    """
    Hash a plain password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hashed password as string
    """
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def create_access_token(data: Dict[str, Any]) -> str:
    """Create a signed access token that expires after ACCESS_TOKEN_EXPIRE_HOURS."""
    to_encode = data.copy()
    to_encode["exp"] = utc_now() + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        AuthenticationError: expired or invalid token
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")
