# backend/pkasla/schemas/blog.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models.blog import BlogStatus
from .base import CamelModel, ORMResponse

SLUG_PATTERN = r"^[a-z0-9-]+$"


def _check_featured_image(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError("Featured image must be a valid URL")
    return value


def _check_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    if len(value) > 10:
        raise ValueError("A blog can have at most 10 tags")
    for tag in value:
        if not 1 <= len(tag) <= 50:
            raise ValueError("Tags must be between 1 and 50 characters")
    return value


class BlogCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=3, max_length=200, pattern=SLUG_PATTERN)
    content: str = Field(..., min_length=100)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None
    status: BlogStatus = BlogStatus.DRAFT
    tags: Optional[List[str]] = None

    validate_featured_image = field_validator("featured_image")(_check_featured_image)
    validate_tags = field_validator("tags")(_check_tags)


class BlogUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=3, max_length=200, pattern=SLUG_PATTERN)
    content: Optional[str] = Field(default=None, min_length=100)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None
    status: Optional[BlogStatus] = None
    tags: Optional[List[str]] = None

    validate_featured_image = field_validator("featured_image")(_check_featured_image)
    validate_tags = field_validator("tags")(_check_tags)


class BlogStatusUpdate(CamelModel):
    status: BlogStatus


class BlogAuthor(CamelModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None


class BlogResponse(ORMResponse):
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: str
    author: Optional[BlogAuthor] = None
    status: str
    tags: List[str] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    views: int = 0
