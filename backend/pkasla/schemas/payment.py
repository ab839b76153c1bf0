# backend/pkasla/schemas/payment.py
"""Payment request/response schemas for Stripe intents, Bakong KHQR and payment logs."""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import Field

from .base import CamelModel, ORMResponse


class SubscriptionPaymentRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)


class TemplatePaymentRequest(CamelModel):
    template_id: str = Field(..., min_length=1)


class BakongSubscriptionPaymentRequest(SubscriptionPaymentRequest):
    currency: Literal["USD", "KHR"] = "USD"


class BakongTemplatePaymentRequest(TemplatePaymentRequest):
    currency: Literal["USD", "KHR"] = "USD"


class PaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str


class BakongPaymentResponse(CamelModel):
    qr_code: str
    qr_code_data: str
    transaction_id: str
    merchant_account_id: str
    amount: float
    currency: str
    expires_at: Optional[str] = None


class BakongTransactionStatus(CamelModel):
    transaction_id: str
    status: str
    amount: float = 0
    currency: str = "KHR"
    timestamp: Optional[str] = None
    payer_account_id: Optional[str] = None
    payer_name: Optional[str] = None


class PaymentLogResponse(ORMResponse):
    user_id: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_type: Optional[str] = None
    event_type: str
    status: str
    amount: Optional[float] = None
    currency: Optional[str] = None
    plan_id: Optional[str] = None
    template_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="metadata_json")
    error: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentLogStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    by_payment_method: Dict[str, int]
    by_payment_type: Dict[str, int]
    by_event_type: Dict[str, int]
    total_amount: float
