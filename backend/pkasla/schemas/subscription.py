# backend/pkasla/schemas/subscription.py
"""Subscription plan and user subscription schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models.subscription import BillingCycle
from .base import CamelModel, ORMResponse


class SubscriptionPlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    billing_cycle: BillingCycle
    max_events: Optional[int] = Field(default=None, ge=0)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, v: str) -> str:
        return v.strip().lower()


class SubscriptionPlanUpdate(CamelModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    max_events: Optional[int] = Field(default=None, ge=0)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None


class SubscriptionPlanResponse(ORMResponse):
    name: str
    display_name: str
    description: Optional[str] = None
    price: float
    billing_cycle: str
    max_events: Optional[int] = None
    features: List[str] = Field(default_factory=list)
    is_active: bool = True


class SubscribeRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)
    payment_method: Optional[str] = Field(default=None, max_length=30)
    transaction_id: Optional[str] = Field(default=None, max_length=255)
    auto_renew: Optional[bool] = None


class ChangeSubscriptionRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)
    payment_method: Optional[str] = Field(default=None, max_length=30)
    transaction_id: Optional[str] = Field(default=None, max_length=255)


class UserSubscriptionResponse(ORMResponse):
    user_id: str
    plan_id: str
    plan: Optional[SubscriptionPlanResponse] = None
    status: str
    start_date: datetime
    end_date: datetime
    auto_renew: bool = False
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
