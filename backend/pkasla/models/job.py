# backend/pkasla/models/job.py
"""
Job board models.

Classes:
    Job: A posting; visible publicly once published and approved
    SavedJob: A user's bookmark of a job
"""

from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_utils import utcnow


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class JobStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False, index=True)
    company = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    employment_type = Column(String(20), nullable=False, default=EmploymentType.FULL_TIME.value)
    location = Column(String(200), nullable=False, index=True)
    is_remote = Column(Boolean, nullable=False, default=False)
    tags = Column(JSON, nullable=False, default=list)
    salary_min = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    salary_max = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    salary_currency = Column(String(3), nullable=True)
    status = Column(String(20), nullable=False, default=JobStatus.DRAFT.value, index=True)
    approval_status = Column(String(20), nullable=False, default=ApprovalStatus.PENDING.value, index=True)
    approved_by = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String(500), nullable=True)
    posted_by = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def salary_range(self):
        if self.salary_min is None and self.salary_max is None:
            return None
        return {
            "min": self.salary_min,
            "max": self.salary_max,
            "currency": self.salary_currency or "USD",
        }


class SavedJob(Base):
    __tablename__ = "saved_jobs"
    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(String(26), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    job = relationship("Job", lazy="joined")
