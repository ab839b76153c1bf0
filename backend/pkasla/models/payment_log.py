# backend/pkasla/models/payment_log.py
"""
Append-only log of payment lifecycle events across Stripe and Bakong.

Rows are never updated; every state change or webhook adds a new entry.
"""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    BAKONG = "bakong"


class PaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    TEMPLATE = "template"


class PaymentEventType(str, Enum):
    PAYMENT_CREATED = "payment_created"
    PAYMENT_INTENT_CREATED = "payment_intent_created"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_EXPIRED = "payment_expired"
    PAYMENT_CANCELLED = "payment_cancelled"
    WEBHOOK_RECEIVED = "webhook_received"
    WEBHOOK_PROCESSED = "webhook_processed"
    WEBHOOK_FAILED = "webhook_failed"
    TRANSACTION_STATUS_CHECKED = "transaction_status_checked"


class PaymentLogStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentLog(Base):
    __tablename__ = "payment_logs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    transaction_id = Column(String(255), nullable=True, index=True)
    payment_method = Column(String(10), nullable=True, index=True)
    payment_type = Column(String(20), nullable=True, index=True)
    event_type = Column(String(40), nullable=False, index=True)
    status = Column(String(20), nullable=False, index=True)
    amount = Column(Numeric(14, 2, asdecimal=False), nullable=True)
    currency = Column(String(3), nullable=True)
    plan_id = Column(String(26), nullable=True)
    template_id = Column(String(26), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    error = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
