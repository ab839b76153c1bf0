# backend/pkasla/models/__init__.py
"""
SQLAlchemy models for the PKASLA platform.

Importing this package registers every table on ``Base.metadata``.
"""

from .application import Application, ApplicationStatus
from .audit_log import AuditAction, AuditLog, AuditStatus
from .blog import Blog, BlogStatus
from .event import Event, EventStatus, EventType
from .gift import Gift, GiftCurrency, GiftPaymentMethod
from .guest import Guest, GuestStatus
from .job import ApprovalStatus, EmploymentType, Job, JobStatus, SavedJob
from .payment_log import (
    PaymentEventType,
    PaymentLog,
    PaymentLogStatus,
    PaymentMethod,
    PaymentType,
)
from .site_settings import SiteSettings
from .subscription import BillingCycle, SubscriptionPlan, SubscriptionStatus, UserSubscription
from .template import Template, TemplatePurchase
from .token_blacklist import TokenBlacklist
from .upload import Upload
from .user import OAuthProvider, User, UserRole, UserStatus

__all__ = [
    "Application",
    "ApplicationStatus",
    "ApprovalStatus",
    "AuditAction",
    "AuditLog",
    "AuditStatus",
    "BillingCycle",
    "Blog",
    "BlogStatus",
    "EmploymentType",
    "Event",
    "EventStatus",
    "EventType",
    "Gift",
    "GiftCurrency",
    "GiftPaymentMethod",
    "Guest",
    "GuestStatus",
    "Job",
    "JobStatus",
    "OAuthProvider",
    "PaymentEventType",
    "PaymentLog",
    "PaymentLogStatus",
    "PaymentMethod",
    "PaymentType",
    "SavedJob",
    "SiteSettings",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "Template",
    "TemplatePurchase",
    "TokenBlacklist",
    "Upload",
    "User",
    "UserRole",
    "UserStatus",
    "UserSubscription",
]
