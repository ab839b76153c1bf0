# backend/pkasla/models/blog.py
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Blog(Base):
    """Blog post; ``published_at`` is set the first time it is published."""

    __tablename__ = "blogs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(String(500), nullable=True)
    featured_image = Column(String(1000), nullable=True)
    author_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BlogStatus.DRAFT.value, index=True)
    tags = Column(JSON, nullable=False, default=list)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="joined")
