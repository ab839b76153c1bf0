# backend/pkasla/models/user.py
"""
User model for the PKASLA platform.

A single users table backs every role: invitation hosts (``user``),
administrators, recruiters and job seekers. Password-less rows are OAuth
accounts identified by ``provider`` + ``provider_id``.

Classes:
    UserRole: Enum defining the possible user roles
    UserStatus: Enum defining account lifecycle states
    User: Main user model for authentication and role management
"""

from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, String, UniqueConstraint
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    RECRUITER = "recruiter"
    JOB_SEEKER = "job_seeker"


class UserStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    SUSPENDED = "suspended"


class OAuthProvider(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    GITHUB = "github"


class User(Base):
    """
    Main user model for authentication and profile management.

    Attributes:
        id: ULID primary key
        email: Unique, lowercased email address used for login
        hashed_password: Bcrypt hash, null for OAuth-only accounts
        role: One of ``UserRole``
        status: One of ``UserStatus``
        two_factor_secret: Fernet-encrypted TOTP secret
        two_factor_backup_codes: Bcrypt hashes of unused backup codes
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("provider", "provider_id", name="uq_users_provider"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(30), unique=True, nullable=True)
    hashed_password = Column(String(255), nullable=True)
    avatar = Column(String(1000), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value, index=True)

    two_factor_enabled = Column(Boolean, nullable=False, default=False)
    two_factor_secret = Column(String(255), nullable=True)
    two_factor_backup_codes = Column(JSON, nullable=True)

    provider = Column(String(20), nullable=True)
    provider_id = Column(String(255), nullable=True)

    is_telegram_bot = Column(Boolean, nullable=False, default=False)
    telegram_chat_id = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
