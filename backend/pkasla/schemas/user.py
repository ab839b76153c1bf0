# backend/pkasla/schemas/user.py
"""Auth and user profile schemas."""

from datetime import datetime
import re
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from ..models.user import UserRole, UserStatus
from .base import CamelModel

_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$")


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    status: str
    two_factor_enabled: bool = False
    provider: Optional[str] = None
    is_telegram_bot: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        if not _PASSWORD_RULE.match(v):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class VerifyTwoFactorLoginRequest(CamelModel):
    # 6-digit TOTP or a backup code (XXXX-XXXX-XXXX)
    token: str = Field(..., min_length=6, max_length=20)


class OAuthLoginRequest(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    provider: Literal["google", "facebook", "github"]
    provider_id: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)
    avatar: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class TwoFactorVerifyRequest(CamelModel):
    token: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class TwoFactorDisableRequest(CamelModel):
    password: str = Field(..., min_length=1)


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class AuthResponse(CamelModel):
    user: UserResponse
    tokens: TokenPair


class TwoFactorSetupResponse(CamelModel):
    secret: str
    qr_code_url: str
    backup_codes: list[str]


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    avatar: Optional[str] = Field(default=None, max_length=1000)


class UpdateUserStatusRequest(CamelModel):
    status: UserStatus


class UpdateUserRoleRequest(CamelModel):
    role: UserRole
