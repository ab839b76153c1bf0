# backend/pkasla/auth.py
"""
Password hashing and JWT helpers.

Access and refresh tokens are signed with separate secrets so a leaked
access-token secret cannot mint refresh tokens.
"""

from datetime import datetime, timedelta, timezone
import logging
import secrets
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain password against a hashed password.

    Returns False for accounts without a password (OAuth-only users).
    """
    if not hashed_password:
        return False
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except Exception as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return str(pwd_context.hash(password))


def _encode(data: Dict[str, Any], secret: str, lifetime: timedelta, token_type: str) -> str:
    to_encode = dict(data)
    now = datetime.now(timezone.utc)
    to_encode.update(
        {
            "iat": now,
            "exp": now + lifetime,
            "typ": token_type,
            # Unique per token so rotation never re-issues a revoked value
            "jti": secrets.token_hex(8),
        }
    )
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to embed; ``sub`` must be the user id
        expires_delta: Optional custom lifetime
    """
    token = _encode(
        data,
        _secret_value(settings.jwt_access_secret),
        expires_delta or settings.access_token_lifetime,
        ACCESS_TOKEN_TYPE,
    )
    logger.debug(f"Created access token for user: {data.get('sub')}")
    return token


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        data,
        _secret_value(settings.jwt_refresh_secret),
        expires_delta or settings.refresh_token_lifetime,
        REFRESH_TOKEN_TYPE,
    )


def create_token_pair(user: Any) -> Dict[str, str]:
    """Issue ``{accessToken, refreshToken}`` for a user with ``{sub, email, role}`` claims."""
    claims = {"sub": user.id, "email": user.email, "role": user.role}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
    }


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an access token.

    Raises:
        PyJWTError: If the token is invalid, expired or not an access token
    """
    payload = cast(
        Dict[str, Any],
        jwt.decode(token, _secret_value(settings.jwt_access_secret), algorithms=[settings.algorithm]),
    )
    if payload.get("typ", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an access token")
    return payload


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a refresh token.

    Raises:
        PyJWTError: If the token is invalid, expired or not a refresh token
    """
    payload = cast(
        Dict[str, Any],
        jwt.decode(token, _secret_value(settings.jwt_refresh_secret), algorithms=[settings.algorithm]),
    )
    if payload.get("typ") != REFRESH_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not a refresh token")
    return payload


def token_expiry(token: str) -> Optional[datetime]:
    """
    Read the ``exp`` claim without verifying the signature.

    Used when revoking tokens, which only needs to know how long to remember them.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except PyJWTError as e:
        logger.debug(f"Could not read token expiry: {e}")
        return None
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)
