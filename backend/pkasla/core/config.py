# backend/pkasla/core/config.py
from datetime import timedelta
import logging
import os
from pathlib import Path
import re
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_BACKEND_ROOT = Path(__file__).resolve().parents[2]

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a short duration string such as "15m", "7d" or "3600".

    Bare numbers are seconds.
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings(BaseSettings):
    environment: str = Field(
        default="development",
        alias="NODE_ENV",
        description="Runtime environment name (development, production, test)",
    )
    port: int = Field(default=4000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str = Field(
        default=f"sqlite:///{_BACKEND_ROOT / 'pkasla.db'}",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )

    # JWT
    jwt_access_secret: SecretStr = Field(
        default=SecretStr("dev-access-secret-change-me"),
        alias="JWT_ACCESS_SECRET",
        description="Secret used to sign access tokens",
    )
    jwt_access_expires_in: str = Field(default="15m", alias="JWT_ACCESS_EXPIRES_IN")
    jwt_refresh_secret: SecretStr = Field(
        default=SecretStr("dev-refresh-secret-change-me"),
        alias="JWT_REFRESH_SECRET",
        description="Secret used to sign refresh tokens",
    )
    jwt_refresh_expires_in: str = Field(default="7d", alias="JWT_REFRESH_EXPIRES_IN")
    algorithm: str = "HS256"

    # Sessions
    session_secret: SecretStr = Field(
        default=SecretStr("dev-session-secret-change-me"),
        alias="SESSION_SECRET",
        description="Secret used to sign the session cookie",
    )
    session_cookie_name: str = Field(default="pkasla.sid", alias="SESSION_COOKIE_NAME")
    session_max_age: int = Field(default=3600, alias="SESSION_MAX_AGE")

    # 2FA / TOTP
    totp_encryption_key: SecretStr = Field(
        default=SecretStr(""),
        alias="TOTP_ENCRYPTION_KEY",
        description="Fernet key for encrypting TOTP secrets (optional in dev)",
    )
    totp_issuer: str = Field(default="PKASLA", alias="TOTP_ISSUER")

    # Storage
    storage_provider: Literal["local", "r2"] = Field(default="local", alias="STORAGE_PROVIDER")
    storage_local_path: str = Field(
        default=str(_BACKEND_ROOT / "uploads"),
        alias="STORAGE_LOCAL_PATH",
    )
    r2_account_id: str = Field(default="", alias="R2_ACCOUNT_ID")
    r2_access_key_id: str = Field(default="", alias="R2_ACCESS_KEY_ID")
    r2_secret_access_key: SecretStr = Field(default=SecretStr(""), alias="R2_SECRET_ACCESS_KEY")
    r2_bucket_name: str = Field(default="", alias="R2_BUCKET_NAME")
    r2_public_url: str = Field(default="", alias="R2_PUBLIC_URL")
    max_upload_size: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_SIZE")

    # Redis
    redis_enabled: bool = Field(default=False, alias="REDIS_ENABLED")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_ttl: int = Field(default=3600, alias="REDIS_TTL")

    # Stripe
    stripe_secret_key: SecretStr = Field(default=SecretStr(""), alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: str = Field(default="", alias="STRIPE_PUBLISHABLE_KEY")
    stripe_webhook_secret: SecretStr = Field(default=SecretStr(""), alias="STRIPE_WEBHOOK_SECRET")

    # Bakong KHQR
    bakong_api_url: str = Field(default="https://api-bakong.nbc.gov.kh", alias="BAKONG_API_URL")
    bakong_access_token: SecretStr = Field(default=SecretStr(""), alias="BAKONG_ACCESS_TOKEN")
    bakong_merchant_account_id: str = Field(default="", alias="BAKONG_MERCHANT_ACCOUNT_ID")
    bakong_webhook_secret: SecretStr = Field(default=SecretStr(""), alias="BAKONG_WEBHOOK_SECRET")
    bakong_environment: Literal["sit", "production"] = Field(
        default="sit", alias="BAKONG_ENVIRONMENT"
    )
    bakong_merchant_name: str = Field(default="PKASLA", alias="BAKONG_MERCHANT_NAME")
    bakong_merchant_city: str = Field(default="Phnom Penh", alias="BAKONG_MERCHANT_CITY")

    # HTTP
    api_base_url: str = Field(default="http://localhost:4000", alias="API_BASE_URL")
    cors_origin: str = Field(default="", alias="CORS_ORIGIN")
    scraper_timeout_seconds: int = Field(default=15, alias="SCRAPER_TIMEOUT_SECONDS")

    # Rate limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable Redis-backed request rate limiting",
    )
    rate_limit_window_ms: int = Field(default=900000, alias="RATE_LIMIT_WINDOW_MS")
    rate_limit_max: int = Field(default=100, alias="RATE_LIMIT_MAX")
    rate_limit_auth_window_ms: int = Field(default=900000, alias="RATE_LIMIT_AUTH_WINDOW_MS")
    rate_limit_auth_max: int = Field(default=5, alias="RATE_LIMIT_AUTH_MAX")

    # Set to True when running tests
    is_testing: bool = False

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("jwt_access_expires_in", "jwt_refresh_expires_in")
    @classmethod
    def _validate_duration(cls, v: str) -> str:
        parse_duration(v)
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"production", "prod"}

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_access_expires_in)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_refresh_expires_in)

    @property
    def cors_origins(self) -> List[str]:
        """CORS origins as a list; empty means same-origin only."""
        raw = (self.cors_origin or "").strip()
        if not raw:
            return []
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def r2_configured(self) -> bool:
        return bool(
            self.r2_account_id
            and self.r2_access_key_id
            and self.r2_secret_access_key.get_secret_value()
            and self.r2_bucket_name
        )

    def get_database_url(self) -> str:
        """Get the database URL for the current context."""
        return self.database_url

    def secret_value(self, name: str) -> Optional[str]:
        """Return the plain value of a SecretStr setting, or None when empty."""
        value = getattr(self, name, None)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        return value or None


settings = Settings()
