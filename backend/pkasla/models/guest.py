# backend/pkasla/models/guest.py
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class GuestStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class Guest(Base):
    """An invitee of one event, addressed by a personal invite token."""

    __tablename__ = "guests"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    event_id = Column(String(26), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default=GuestStatus.PENDING.value, index=True)
    occupation = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    tag = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    province = Column(String(100), nullable=True)
    photo = Column(String(1000), nullable=True)
    has_given_gift = Column(Boolean, nullable=False, default=False)
    invite_token = Column(String(64), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    event = relationship("Event", lazy="joined")
