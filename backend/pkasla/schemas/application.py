# backend/pkasla/schemas/application.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..models.application import ApplicationStatus
from .base import CamelModel, ORMResponse
from .job import JobResponse

_URL_FIELDS = ("resume_url", "portfolio_url", "linked_in_url")


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value.startswith(("http://", "https://")) or len(value) < 11:
        raise ValueError("Invalid url")
    return value


class ApplicationCreate(CamelModel):
    job_id: str = Field(..., min_length=1)
    cover_letter: Optional[str] = Field(default=None, max_length=5000)
    resume_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    linked_in_url: Optional[str] = None

    @field_validator(*_URL_FIELDS)
    @classmethod
    def _urls(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)


class ApplicationUpdate(CamelModel):
    status: Optional[ApplicationStatus] = None
    cover_letter: Optional[str] = Field(default=None, max_length=5000)
    resume_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    linked_in_url: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator(*_URL_FIELDS)
    @classmethod
    def _urls(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationResponse(ORMResponse):
    job_id: str
    candidate_id: str
    status: str
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    linked_in_url: Optional[str] = None
    notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    job: Optional[JobResponse] = None
