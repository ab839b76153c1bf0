# backend/pkasla/repositories/factory.py
"""
Repository Factory for the PKASLA platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .application_repository import ApplicationRepository
from .audit_repository import AuditRepository
from .base_repository import BaseRepository
from .blog_repository import BlogRepository
from .event_repository import EventRepository
from .gift_repository import GiftRepository
from .guest_repository import GuestRepository
from .job_repository import JobRepository, SavedJobRepository
from .payment_log_repository import PaymentLogRepository
from .site_settings_repository import SiteSettingsRepository
from .subscription_repository import SubscriptionPlanRepository, UserSubscriptionRepository
from .template_repository import TemplatePurchaseRepository, TemplateRepository
from .token_blacklist_repository import TokenBlacklistRepository
from .upload_repository import UploadRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_token_blacklist_repository(db: Session) -> TokenBlacklistRepository:
        return TokenBlacklistRepository(db)

    @staticmethod
    def create_event_repository(db: Session) -> EventRepository:
        return EventRepository(db)

    @staticmethod
    def create_guest_repository(db: Session) -> GuestRepository:
        return GuestRepository(db)

    @staticmethod
    def create_gift_repository(db: Session) -> GiftRepository:
        return GiftRepository(db)

    @staticmethod
    def create_template_repository(db: Session) -> TemplateRepository:
        return TemplateRepository(db)

    @staticmethod
    def create_template_purchase_repository(db: Session) -> TemplatePurchaseRepository:
        return TemplatePurchaseRepository(db)

    @staticmethod
    def create_subscription_plan_repository(db: Session) -> SubscriptionPlanRepository:
        return SubscriptionPlanRepository(db)

    @staticmethod
    def create_user_subscription_repository(db: Session) -> UserSubscriptionRepository:
        return UserSubscriptionRepository(db)

    @staticmethod
    def create_upload_repository(db: Session) -> UploadRepository:
        return UploadRepository(db)

    @staticmethod
    def create_payment_log_repository(db: Session) -> PaymentLogRepository:
        return PaymentLogRepository(db)

    @staticmethod
    def create_blog_repository(db: Session) -> BlogRepository:
        return BlogRepository(db)

    @staticmethod
    def create_job_repository(db: Session) -> JobRepository:
        return JobRepository(db)

    @staticmethod
    def create_saved_job_repository(db: Session) -> SavedJobRepository:
        return SavedJobRepository(db)

    @staticmethod
    def create_application_repository(db: Session) -> ApplicationRepository:
        return ApplicationRepository(db)

    @staticmethod
    def create_audit_repository(db: Session) -> AuditRepository:
        return AuditRepository(db)

    @staticmethod
    def create_site_settings_repository(db: Session) -> SiteSettingsRepository:
        return SiteSettingsRepository(db)
