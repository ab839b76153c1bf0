# backend/pkasla/schemas/gift.py
"""Gift schemas."""

from typing import Dict, Optional

from pydantic import Field

from ..models.gift import GiftCurrency, GiftPaymentMethod
from .base import CamelModel, ORMResponse


class GiftCreate(CamelModel):
    guest_id: str = Field(..., min_length=1)
    payment_method: GiftPaymentMethod
    currency: GiftCurrency
    amount: float = Field(..., ge=0)
    note: Optional[str] = Field(default=None, max_length=1000)
    receipt_image: Optional[str] = Field(default=None, max_length=1000)


class GiftUpdate(CamelModel):
    payment_method: Optional[GiftPaymentMethod] = None
    currency: Optional[GiftCurrency] = None
    amount: Optional[float] = Field(default=None, ge=0)
    note: Optional[str] = Field(default=None, max_length=1000)
    receipt_image: Optional[str] = Field(default=None, max_length=1000)


class GiftResponse(ORMResponse):
    guest_id: str
    event_id: str
    payment_method: str
    currency: str
    amount: float
    note: Optional[str] = None
    receipt_image: Optional[str] = None
    created_by: Optional[str] = None


class EventGiftTotals(CamelModel):
    totals: Dict[str, float]
