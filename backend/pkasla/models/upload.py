# backend/pkasla/models/upload.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class Upload(Base):
    """Metadata for a file stored on local disk or in R2."""

    __tablename__ = "uploads"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    original_filename = Column(String(255), nullable=False)
    filename = Column(String(255), nullable=False)
    url = Column(String(1000), nullable=False)
    key = Column(String(500), nullable=False, unique=True, index=True)
    provider = Column(String(10), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    folder = Column(String(100), nullable=False, default="general")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
