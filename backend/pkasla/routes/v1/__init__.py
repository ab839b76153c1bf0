# backend/pkasla/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    admin,
    applications,
    audit_logs,
    auth,
    blogs,
    events,
    gifts,
    guests,
    health,
    jobs,
    payment_logs,
    payments,
    subscription_plans,
    subscriptions,
    template_purchases,
    templates,
    upload,
    users,
)

__all__ = [
    "admin",
    "applications",
    "audit_logs",
    "auth",
    "blogs",
    "events",
    "gifts",
    "guests",
    "health",
    "jobs",
    "payment_logs",
    "payments",
    "subscription_plans",
    "subscriptions",
    "template_purchases",
    "templates",
    "upload",
    "users",
]
