# backend/pkasla/schemas/guest.py
"""Guest and QR-join schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from ..models.guest import GuestStatus
from .base import CamelModel, ORMResponse


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class _GuestFields(CamelModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    occupation: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=1000)
    tag: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    province: Optional[str] = Field(default=None, max_length=100)
    photo: Optional[str] = Field(default=None, max_length=1000)

    @field_validator(
        "email", "phone", "occupation", "notes", "tag", "address", "province", "photo", mode="before"
    )
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("photo")
    @classmethod
    def _photo_url(cls, v: Optional[str]) -> Optional[str]:
        if v and not v.startswith(("http://", "https://", "/uploads/")):
            raise ValueError("Photo must be a valid URL")
        return v


class GuestCreate(_GuestFields):
    name: str = Field(..., min_length=1, max_length=200)
    event_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    has_given_gift: bool = False
    status: GuestStatus = GuestStatus.PENDING

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class GuestUpdate(_GuestFields):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    has_given_gift: Optional[bool] = None
    status: Optional[GuestStatus] = None


class GuestBulkCreate(CamelModel):
    event_id: str = Field(..., min_length=1)
    guests: List[dict] = Field(..., min_length=1)


class JoinByQRRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)


class GuestEventSummary(CamelModel):
    id: str
    title: str
    date: datetime
    venue: str
    host_id: str
    event_type: Optional[str] = None
    cover_image: Optional[str] = None
    google_map_link: Optional[str] = None


class GuestResponse(ORMResponse):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    event_id: str
    user_id: Optional[str] = None
    created_by: Optional[str] = None
    status: str
    occupation: Optional[str] = None
    notes: Optional[str] = None
    tag: Optional[str] = None
    address: Optional[str] = None
    province: Optional[str] = None
    photo: Optional[str] = None
    has_given_gift: bool = False
    invite_token: Optional[str] = None


class InvitationResponse(GuestResponse):
    """Guest as seen through its invite link, with the event it belongs to."""

    event: Optional[GuestEventSummary] = None
