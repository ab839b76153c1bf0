# backend/pkasla/models/application.py
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    ACCEPTED = "accepted"
    WITHDRAWN = "withdrawn"


class Application(Base):
    """A candidate's application to a job; one per (job, candidate)."""

    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "candidate_id", name="uq_applications_job_candidate"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    job_id = Column(String(26), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ApplicationStatus.PENDING.value, index=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String(1000), nullable=True)
    portfolio_url = Column(String(1000), nullable=True)
    linked_in_url = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)
    reviewed_by = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    job = relationship("Job", lazy="joined")
