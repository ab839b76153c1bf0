# backend/pkasla/models/audit_log.py
"""
Audit logging model capturing who did what to which resource.

Actor name and email are denormalized so entries stay readable after the
user is deleted.
"""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    VIEW = "view"
    EXPORT = "export"
    IMPORT = "import"
    APPROVE = "approve"
    REJECT = "reject"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"
    OTHER = "other"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


class AuditLog(Base):
    """Persistence model for audit trail entries."""

    __tablename__ = "audit_logs"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), nullable=True, index=True)
    user_email = Column(String(255), nullable=True)
    user_name = Column(String(100), nullable=True)
    action = Column(String(20), nullable=False, index=True)
    resource = Column(String(50), nullable=False, index=True)
    resource_id = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    status = Column(String(10), nullable=False, default=AuditStatus.SUCCESS.value, index=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
