# backend/pkasla/models/site_settings.py
"""
Singleton row holding runtime-editable site configuration.

Secrets live here as well; they are masked by the service before anything
leaves the process.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class SiteSettings(Base):
    __tablename__ = "site_settings"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))

    # General
    site_name = Column(String(100), nullable=False, default="PKASLA")
    site_url = Column(String(255), nullable=False, default="https://pkasla.com")
    site_description = Column(Text, nullable=False, default="Professional Job Portal")
    maintenance_mode = Column(Boolean, nullable=False, default=False)
    allow_registration = Column(Boolean, nullable=False, default=True)

    # Security
    session_timeout = Column(Integer, nullable=False, default=3600)
    max_login_attempts = Column(Integer, nullable=False, default=5)
    require_email_verification = Column(Boolean, nullable=False, default=False)
    enable_2fa = Column(Boolean, nullable=False, default=False)
    password_min_length = Column(Integer, nullable=False, default=8)

    # Storage
    storage_provider = Column(String(10), nullable=False, default="local")
    storage_local_path = Column(String(255), nullable=False, default="uploads")
    r2_account_id = Column(String(255), nullable=True)
    r2_access_key_id = Column(String(255), nullable=True)
    r2_secret_access_key = Column(String(255), nullable=True)
    r2_bucket_name = Column(String(255), nullable=True)
    r2_public_url = Column(String(255), nullable=True)

    # Email
    email_enabled = Column(Boolean, nullable=False, default=False)
    email_from = Column(String(255), nullable=False, default="noreply@pkasla.com")
    email_host = Column(String(255), nullable=False, default="smtp.example.com")
    email_port = Column(Integer, nullable=False, default=587)
    email_user = Column(String(255), nullable=True)
    email_password = Column(String(255), nullable=True)

    # Notifications
    notification_on_user_registration = Column(Boolean, nullable=False, default=True)
    notification_on_user_status_change = Column(Boolean, nullable=False, default=True)

    # Payments
    stripe_enabled = Column(Boolean, nullable=False, default=False)
    stripe_publishable_key = Column(String(255), nullable=True)
    stripe_secret_key = Column(String(255), nullable=True)
    stripe_webhook_secret = Column(String(255), nullable=True)
    bakong_enabled = Column(Boolean, nullable=False, default=False)
    bakong_access_token = Column(String(500), nullable=True)
    bakong_merchant_account_id = Column(String(255), nullable=True)
    bakong_webhook_secret = Column(String(255), nullable=True)
    bakong_environment = Column(String(20), nullable=False, default="sit")

    # Telegram
    telegram_bot_enabled = Column(Boolean, nullable=False, default=False)
    telegram_bot_token = Column(String(255), nullable=True)
    telegram_chat_id = Column(String(100), nullable=True)
    telegram_notify_on_guest_check_in = Column(Boolean, nullable=False, default=True)
    telegram_notify_on_new_guest = Column(Boolean, nullable=False, default=True)
    telegram_notify_on_event_created = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
