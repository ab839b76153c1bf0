# backend/pkasla/schemas/event.py
"""Event request/response schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import Field, field_validator

from ..models.event import EventStatus, EventType
from .base import CamelModel, ORMResponse

_IMAGE_FIELD_LABELS = {
    "cover_image": "Cover image",
    "khqr_usd": "KHQR USD",
    "khqr_khr": "KHQR KHR",
}


def _check_image_ref(value: Optional[str], label: str) -> Optional[str]:
    if not value:
        return None
    if value.startswith(("http://", "https://", "/uploads/")):
        return value
    raise ValueError(f"{label} must be a valid URL or relative path starting with /uploads/")


class UserTemplateConfig(CamelModel):
    images: Optional[Dict[str, str]] = None
    colors: Optional[Dict[str, str]] = None
    fonts: Optional[Dict[str, str]] = None
    spacing: Optional[Dict[str, float]] = None
    custom_variables: Optional[Dict[str, str]] = None


class _EventImages(CamelModel):
    cover_image: Optional[str] = None
    khqr_usd: Optional[str] = None
    khqr_khr: Optional[str] = None
    google_map_link: Optional[str] = None

    @field_validator("cover_image", "khqr_usd", "khqr_khr")
    @classmethod
    def _image_refs(cls, v: Optional[str], info) -> Optional[str]:
        return _check_image_ref(v, _IMAGE_FIELD_LABELS[info.field_name])

    @field_validator("google_map_link")
    @classmethod
    def _map_link(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Google Map link must be a valid URL")
        return v


class EventCreate(_EventImages):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    event_type: EventType
    date: datetime
    venue: str = Field(..., min_length=1, max_length=500)
    restrict_duplicate_names: bool = False
    status: EventStatus = EventStatus.DRAFT

    @field_validator("title", "venue", "description")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v


class EventUpdate(_EventImages):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    event_type: Optional[EventType] = None
    date: Optional[datetime] = None
    venue: Optional[str] = Field(default=None, min_length=1, max_length=500)
    restrict_duplicate_names: Optional[bool] = None
    status: Optional[EventStatus] = None
    template_slug: Optional[str] = Field(default=None, max_length=100)
    user_template_config: Optional[UserTemplateConfig] = None


class EventResponse(ORMResponse):
    title: str
    description: Optional[str] = None
    event_type: str
    date: datetime
    venue: str
    google_map_link: Optional[str] = None
    host_id: str
    cover_image: Optional[str] = None
    khqr_usd: Optional[str] = None
    khqr_khr: Optional[str] = None
    restrict_duplicate_names: bool = False
    status: str
    guest_count: int = 0
    template_slug: Optional[str] = None
    user_template_config: Optional[Dict[str, Dict[str, object]]] = None
    qr_code_token: Optional[str] = None
