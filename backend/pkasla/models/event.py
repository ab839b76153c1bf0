# backend/pkasla/models/event.py
"""
Event model: a wedding (or other celebration) hosted by a user.

Guests and gifts hang off an event. ``qr_code_token`` is the public token
embedded in the event QR code that lets guests self-register.
"""

from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class EventType(str, Enum):
    WEDDING = "wedding"
    ENGAGEMENT = "engagement"
    HAND_CUTTING = "hand-cutting"
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    OTHER = "other"


class EventStatus(str, Enum):
    PUBLISHED = "published"
    DRAFT = "draft"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String(20), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    venue = Column(String(500), nullable=False)
    google_map_link = Column(String(1000), nullable=True)
    host_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_image = Column(String(1000), nullable=True)
    khqr_usd = Column(String(1000), nullable=True)
    khqr_khr = Column(String(1000), nullable=True)
    restrict_duplicate_names = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value, index=True)
    guest_count = Column(Integer, nullable=False, default=0)
    template_slug = Column(String(100), nullable=True)
    user_template_config = Column(JSON, nullable=True)
    qr_code_token = Column(String(64), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
