# backend/pkasla/models/gift.py
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class GiftPaymentMethod(str, Enum):
    CASH = "cash"
    KHQR = "khqr"


class GiftCurrency(str, Enum):
    KHR = "khr"
    USD = "usd"


class Gift(Base):
    """A cash or KHQR gift a guest gave at an event."""

    __tablename__ = "gifts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    guest_id = Column(String(26), ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(String(26), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_method = Column(String(10), nullable=False)
    currency = Column(String(3), nullable=False)
    amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    note = Column(Text, nullable=True)
    receipt_image = Column(String(1000), nullable=True)
    created_by = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
