# backend/pkasla/models/template.py
"""
Invitation templates sold on the marketplace and their purchases.

Classes:
    Template: A renderable invitation design with editable variables/assets
    TemplatePurchase: One user's one-time purchase of a template
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True, index=True)
    title = Column(String(200), nullable=False)
    category = Column(String(50), nullable=True, index=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    preview_image = Column(String(1000), nullable=True)
    slug = Column(String(100), nullable=True, unique=True)
    variables = Column(JSON, nullable=True)
    assets = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class TemplatePurchase(Base):
    __tablename__ = "template_purchases"
    __table_args__ = (UniqueConstraint("user_id", "template_id", name="uq_template_purchase_user_template"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(String(26), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    purchase_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    payment_method = Column(String(30), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    template = relationship("Template", lazy="joined")
    user = relationship("User", lazy="joined")
