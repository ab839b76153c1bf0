# backend/pkasla/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

A request is authenticated by the server-side session first
(``authenticated`` + ``userId``), then by an ``Authorization: Bearer``
access token that must not be on the revocation blacklist.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from jwt import PyJWTError
from sqlalchemy.orm import Session

from ...auth import decode_access_token
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...models.user import User, UserRole, UserStatus
from ...repositories.factory import RepositoryFactory
from ...services.token_blacklist_service import TokenBlacklistService
from .database import get_db

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _session_user_id(request: Request) -> Optional[str]:
    session = request.scope.get("session")
    if not session or not session.get("authenticated"):
        return None
    user_id = session.get("userId")
    return str(user_id) if user_id else None


def _resolve_user(request: Request, db: Session) -> User:
    users = RepositoryFactory.create_user_repository(db)

    user_id = _session_user_id(request)
    if user_id:
        user = users.get_by_id(user_id)
        if user is not None:
            request.state.auth_via = "session"
            request.state.token = request.session.get("accessToken")
            return _check_status(user)
        request.session.clear()
        raise UnauthorizedException("Account not found")

    token = _bearer_token(request)
    if not token:
        raise UnauthorizedException("Authentication required")
    if TokenBlacklistService(db).is_revoked(token):
        raise UnauthorizedException("Token has been revoked")
    try:
        payload = decode_access_token(token)
    except PyJWTError as exc:
        logger.debug(f"Rejected bearer token: {exc}")
        raise UnauthorizedException("Invalid or expired token")

    user = users.get_by_id(str(payload.get("sub", "")))
    if user is None:
        raise UnauthorizedException("Account not found")
    request.state.auth_via = "bearer"
    request.state.token = token
    return _check_status(user)


def _check_status(user: User) -> User:
    if user.status == UserStatus.SUSPENDED.value:
        raise ForbiddenException("Account is suspended")
    return user


async def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Get the authenticated user.

    Raises:
        UnauthorizedException: No credentials, revoked or invalid token, or unknown user
    """
    return _resolve_user(request, db)


async def get_current_user_optional(
    request: Request, db: Session = Depends(get_db)
) -> Optional[User]:
    """Same as ``get_current_user`` but returns None instead of failing."""
    try:
        return _resolve_user(request, db)
    except (UnauthorizedException, ForbiddenException):
        return None


def require_roles(*roles: str) -> Callable[..., object]:
    """Dependency factory: the current user must hold one of ``roles``."""

    async def verify_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ForbiddenException("Insufficient permissions")
        return user

    return verify_role


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise ForbiddenException("Insufficient permissions")
    return user
