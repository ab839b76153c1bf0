# backend/pkasla/schemas/template.py
"""Template marketplace schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import CamelModel, ORMResponse
from .user import UserResponse

_NAME_PATTERN = r"^[a-z0-9-]+$"


class TemplateAssets(CamelModel):
    images: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    fonts: Optional[List[str]] = None


class TemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, pattern=_NAME_PATTERN)
    title: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, max_length=50)
    price: Optional[float] = Field(default=None, ge=0)
    is_premium: bool = False
    preview_image: Optional[str] = Field(default=None, max_length=1000)
    slug: Optional[str] = Field(default=None, max_length=100, pattern=_NAME_PATTERN)
    variables: Optional[List[str]] = None
    assets: Optional[TemplateAssets] = None


class TemplateUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100, pattern=_NAME_PATTERN)
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, max_length=50)
    price: Optional[float] = Field(default=None, ge=0)
    is_premium: Optional[bool] = None
    preview_image: Optional[str] = Field(default=None, max_length=1000)
    slug: Optional[str] = Field(default=None, max_length=100, pattern=_NAME_PATTERN)
    variables: Optional[List[str]] = None
    assets: Optional[TemplateAssets] = None


class TemplateResponse(ORMResponse):
    name: str
    title: str
    category: Optional[str] = None
    price: Optional[float] = None
    is_premium: bool = False
    preview_image: Optional[str] = None
    slug: Optional[str] = None
    variables: Optional[List[Any]] = None
    assets: Optional[Dict[str, Any]] = None


class TemplatePurchaseCreate(CamelModel):
    template_id: str = Field(..., min_length=1)
    payment_method: Optional[str] = Field(default=None, max_length=30)
    transaction_id: Optional[str] = Field(default=None, max_length=255)


class TemplatePurchaseResponse(ORMResponse):
    user_id: str
    template_id: str
    template: Optional[TemplateResponse] = None
    price: float = 0
    purchase_date: datetime
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None


class AdminTemplatePurchaseResponse(TemplatePurchaseResponse):
    user: Optional[UserResponse] = None
