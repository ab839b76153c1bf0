# backend/pkasla/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.admin_service import AdminAnalyticsService
from ...services.application_service import ApplicationService
from ...services.audit_service import AuditService
from ...services.auth_service import AuthService
from ...services.bakong_service import BakongService
from ...services.blog_service import BlogService
from ...services.cache_service import CacheService, get_cache_service
from ...services.event_service import EventService
from ...services.gift_service import GiftService
from ...services.guest_service import GuestService
from ...services.job_feed_service import JobFeedService
from ...services.job_scraper_service import JobScraperService
from ...services.job_service import JobService
from ...services.payment_log_service import PaymentLogService
from ...services.payment_webhook_service import PaymentWebhookService
from ...services.site_settings_service import SiteSettingsService
from ...services.stripe_service import StripeService
from ...services.subscription_service import SubscriptionPlanService, UserSubscriptionService
from ...services.template_service import TemplatePurchaseService, TemplateService
from ...services.two_factor_auth_service import TwoFactorAuthService
from ...services.upload_service import UploadService
from ...services.user_service import UserService
from .database import get_db

logger = logging.getLogger(__name__)


def get_cache_service_dep() -> CacheService:
    """Get cache service instance for dependency injection."""
    return get_cache_service()


def get_auth_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> AuthService:
    return AuthService(db, cache)


def get_two_factor_auth_service(db: Session = Depends(get_db)) -> TwoFactorAuthService:
    return TwoFactorAuthService(db)


def get_audit_service(db: Session = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_user_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> UserService:
    return UserService(db, cache)


def get_site_settings_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> SiteSettingsService:
    return SiteSettingsService(db, cache)


def get_event_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> EventService:
    return EventService(db, cache)


def get_guest_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> GuestService:
    return GuestService(db, cache)


def get_gift_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> GiftService:
    return GiftService(db, cache)


def get_template_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> TemplateService:
    return TemplateService(db, cache)


def get_template_purchase_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> TemplatePurchaseService:
    return TemplatePurchaseService(db, cache)


def get_subscription_plan_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> SubscriptionPlanService:
    return SubscriptionPlanService(db, cache)


def get_user_subscription_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> UserSubscriptionService:
    return UserSubscriptionService(db, cache)


def get_upload_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> UploadService:
    return UploadService(db, cache)


def get_payment_log_service(db: Session = Depends(get_db)) -> PaymentLogService:
    return PaymentLogService(db)


def get_stripe_service(
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
) -> StripeService:
    return StripeService(payment_logs)


def get_bakong_service(
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
) -> BakongService:
    return BakongService(payment_logs)


def get_payment_webhook_service(
    db: Session = Depends(get_db),
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
) -> PaymentWebhookService:
    return PaymentWebhookService(db, payment_logs)


def get_blog_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> BlogService:
    return BlogService(db, cache)


def get_job_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> JobService:
    return JobService(db, cache)


def get_application_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> ApplicationService:
    return ApplicationService(db, cache)


def get_admin_analytics_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> AdminAnalyticsService:
    return AdminAnalyticsService(db, cache)


def get_job_feed_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> JobFeedService:
    return JobFeedService(db, cache)


def get_job_scraper_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> JobScraperService:
    return JobScraperService(db, cache)
