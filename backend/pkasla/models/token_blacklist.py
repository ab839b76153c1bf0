# backend/pkasla/models/token_blacklist.py
"""Revoked JWTs, kept until their natural expiry."""

from sqlalchemy import Column, DateTime, String, Text
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class TokenBlacklist(Base):
    __tablename__ = "token_blacklist"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    token = Column(Text, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
