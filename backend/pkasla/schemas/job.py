# backend/pkasla/schemas/job.py
"""Job board request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from ..models.job import ApprovalStatus, EmploymentType, JobStatus
from .base import CamelModel, ORMResponse


class SalaryRange(CamelModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., gt=0)
    currency: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _max_not_below_min(self) -> "SalaryRange":
        if self.max < self.min:
            raise ValueError("Max salary must be >= min salary")
        return self


class JobCreate(CamelModel):
    title: str = Field(..., min_length=3)
    company: str = Field(..., min_length=2)
    description: str = Field(..., min_length=20)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    location: str = Field(..., min_length=2)
    is_remote: bool = False
    tags: List[str] = Field(default_factory=list)
    salary_range: Optional[SalaryRange] = None
    status: JobStatus = JobStatus.DRAFT
    expires_at: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag and tag.strip()]


class JobUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=3)
    company: Optional[str] = Field(default=None, min_length=2)
    description: Optional[str] = Field(default=None, min_length=20)
    employment_type: Optional[EmploymentType] = None
    location: Optional[str] = Field(default=None, min_length=2)
    is_remote: Optional[bool] = None
    tags: Optional[List[str]] = None
    salary_range: Optional[SalaryRange] = None
    status: Optional[JobStatus] = None
    expires_at: Optional[datetime] = None


class RejectJobRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class JobResponse(ORMResponse):
    title: str
    company: str
    description: str
    employment_type: str
    location: str
    is_remote: bool = False
    tags: List[str] = Field(default_factory=list)
    salary_range: Optional[Dict[str, Any]] = None
    status: str
    approval_status: str = ApprovalStatus.PENDING.value
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    posted_by: Optional[str] = None
    expires_at: Optional[datetime] = None


def salary_columns(salary: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Flatten a ``salaryRange`` mapping into the job's salary columns."""
    if not salary:
        return {"salary_min": None, "salary_max": None, "salary_currency": None}
    return {
        "salary_min": salary.get("min"),
        "salary_max": salary.get("max"),
        "salary_currency": salary.get("currency") or "USD",
    }
