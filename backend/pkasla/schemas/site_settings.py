# backend/pkasla/schemas/site_settings.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

# Fields stored but never returned in clear text
SECRET_FIELDS = (
    "r2_secret_access_key",
    "email_password",
    "stripe_secret_key",
    "stripe_webhook_secret",
    "bakong_access_token",
    "bakong_webhook_secret",
    "telegram_bot_token",
)
MASK = "********"


class SiteSettingsBase(CamelModel):
    site_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    site_url: Optional[str] = Field(default=None, max_length=255)
    site_description: Optional[str] = Field(default=None, max_length=1000)
    maintenance_mode: Optional[bool] = None
    allow_registration: Optional[bool] = None

    session_timeout: Optional[int] = Field(default=None, ge=300, le=86400)
    max_login_attempts: Optional[int] = Field(default=None, ge=3, le=10)
    require_email_verification: Optional[bool] = None
    enable_2fa: Optional[bool] = Field(default=None, alias="enable2FA")
    password_min_length: Optional[int] = Field(default=None, ge=6, le=32)

    storage_provider: Optional[Literal["local", "r2"]] = None
    storage_local_path: Optional[str] = None
    r2_account_id: Optional[str] = None
    r2_access_key_id: Optional[str] = None
    r2_bucket_name: Optional[str] = None
    r2_public_url: Optional[str] = None

    email_enabled: Optional[bool] = None
    email_from: Optional[str] = None
    email_host: Optional[str] = None
    email_port: Optional[int] = Field(default=None, ge=1, le=65535)
    email_user: Optional[str] = None

    notification_on_user_registration: Optional[bool] = None
    notification_on_user_status_change: Optional[bool] = None

    stripe_enabled: Optional[bool] = None
    stripe_publishable_key: Optional[str] = None
    bakong_enabled: Optional[bool] = None
    bakong_merchant_account_id: Optional[str] = None
    bakong_environment: Optional[Literal["sit", "production"]] = None

    telegram_bot_enabled: Optional[bool] = None
    telegram_chat_id: Optional[str] = None
    telegram_notify_on_guest_check_in: Optional[bool] = None
    telegram_notify_on_new_guest: Optional[bool] = None
    telegram_notify_on_event_created: Optional[bool] = None


class SiteSettingsUpdate(SiteSettingsBase):
    """Partial update; secrets equal to the mask are left unchanged."""

    r2_secret_access_key: Optional[str] = None
    email_password: Optional[str] = None
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    bakong_access_token: Optional[str] = None
    bakong_webhook_secret: Optional[str] = None
    telegram_bot_token: Optional[str] = None


class SiteSettingsResponse(SiteSettingsBase):
    id: str
    r2_secret_access_key: Optional[str] = None
    email_password: Optional[str] = None
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    bakong_access_token: Optional[str] = None
    bakong_webhook_secret: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    updated_at: Optional[datetime] = None
