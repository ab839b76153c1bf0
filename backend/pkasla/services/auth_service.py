# backend/pkasla/services/auth_service.py
"""
Authentication Service for the PKASLA platform

Handles registration, password and OAuth login, the second step of
two-factor login, refresh-token rotation and logout. Session storage is
the route layer's concern; this service only deals in users and tokens.
"""

import logging
from typing import Dict, List, Optional, Tuple

from jwt import PyJWTError
from sqlalchemy.orm import Session

from ..auth import create_token_pair, decode_refresh_token, get_password_hash, verify_password
from ..core.exceptions import ConflictException, ForbiddenException, UnauthorizedException
from ..models.user import User, UserRole, UserStatus
from ..repositories.factory import RepositoryFactory
from ..schemas.user import OAuthLoginRequest, RegisterRequest
from .base import BaseService
from .cache_service import CacheService
from .site_settings_service import SiteSettingsService
from .token_blacklist_service import TokenBlacklistService
from .two_factor_auth_service import TwoFactorAuthService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.blacklist = TokenBlacklistService(db)
        self.two_factor = TwoFactorAuthService(db)
        self.site_settings = SiteSettingsService(db, cache)

    @BaseService.measure_operation("register_user")
    def register(self, data: RegisterRequest) -> Tuple[User, Dict[str, str]]:
        if not self.site_settings.is_registration_allowed():
            raise ForbiddenException("Registration is currently disabled")
        if self.user_repository.get_by_email(data.email):
            raise ConflictException("Email already in use")
        if data.phone and self.user_repository.get_by_phone(data.phone):
            raise ConflictException("Phone number already in use")

        with self.transaction():
            user = self.user_repository.create(
                name=data.name.strip(),
                email=data.email,
                phone=data.phone or None,
                hashed_password=get_password_hash(data.password),
                role=UserRole.USER.value,
                status=UserStatus.ACTIVE.value,
            )
        self.logger.info(f"Registered user {user.id}")
        return user, create_token_pair(user)

    @BaseService.measure_operation("authenticate_credentials")
    def authenticate_credentials(self, email: str, password: str) -> User:
        """Check email/password; the caller decides whether 2FA is still needed."""
        user = self.user_repository.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            self.logger.info("Failed login attempt")
            raise UnauthorizedException("Invalid credentials")
        if user.status == UserStatus.SUSPENDED.value:
            raise ForbiddenException("Account is suspended")
        return user

    def issue_tokens(self, user: User) -> Dict[str, str]:
        return create_token_pair(user)

    @BaseService.measure_operation("complete_two_factor_login")
    def complete_two_factor_login(self, user_id: str, token: str) -> Tuple[User, Dict[str, str], bool]:
        user = self.user_repository.get_by_id(user_id)
        if not user or not user.two_factor_enabled:
            raise UnauthorizedException("Two-factor authentication session expired")
        valid, used_backup_code = self.two_factor.verify_login(user, token)
        if not valid:
            raise UnauthorizedException("Invalid two-factor authentication code")
        return user, create_token_pair(user), used_backup_code

    @BaseService.measure_operation("oauth_login")
    def oauth_login(self, data: OAuthLoginRequest) -> Tuple[User, Dict[str, str]]:
        """
        Sign in with an OAuth identity.

        Lookup order: provider identity, then an existing password account
        with the same email (which gets linked). New accounts are job seekers.
        """
        user = self.user_repository.get_by_provider(data.provider, data.provider_id)
        if user is None:
            existing = self.user_repository.get_by_email(data.email)
            if existing is not None:
                if existing.provider and existing.provider != data.provider:
                    raise ConflictException("Email already registered with a different provider")
                with self.transaction():
                    existing.provider = data.provider
                    existing.provider_id = data.provider_id
                    if data.avatar and not existing.avatar:
                        existing.avatar = data.avatar
                self.logger.info(f"Linked {data.provider} identity to user {existing.id}")
                user = existing
            else:
                with self.transaction():
                    user = self.user_repository.create(
                        name=data.name.strip(),
                        email=data.email,
                        avatar=data.avatar,
                        provider=data.provider,
                        provider_id=data.provider_id,
                        role=UserRole.JOB_SEEKER.value,
                        status=UserStatus.ACTIVE.value,
                    )
                self.logger.info(f"Created {data.provider} user {user.id}")

        if user.status == UserStatus.SUSPENDED.value:
            raise ForbiddenException("Account is suspended")
        return user, create_token_pair(user)

    @BaseService.measure_operation("refresh_tokens")
    def refresh(self, refresh_token: str) -> Tuple[User, Dict[str, str]]:
        """Rotate a refresh token: the presented one is revoked, a new pair issued."""
        if self.blacklist.is_revoked(refresh_token):
            raise UnauthorizedException("Token has been revoked")
        try:
            payload = decode_refresh_token(refresh_token)
        except PyJWTError:
            raise UnauthorizedException("Invalid refresh token")

        user = self.user_repository.get_by_id(payload.get("sub", ""))
        if not user:
            raise UnauthorizedException("Invalid refresh token")
        if user.status == UserStatus.SUSPENDED.value:
            raise ForbiddenException("Account is suspended")

        with self.transaction():
            self.blacklist.revoke_token(refresh_token)
        return user, create_token_pair(user)

    @BaseService.measure_operation("logout")
    def logout(self, tokens: List[Optional[str]]) -> int:
        """Revoke every presented token; returns how many were newly revoked."""
        revoked = 0
        with self.transaction():
            for token in {t for t in tokens if t}:
                if self.blacklist.revoke_token(token):
                    revoked += 1
        return revoked

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_repository.get_by_id(user_id)
