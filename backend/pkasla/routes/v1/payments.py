# backend/pkasla/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /webhook/stripe                          → Stripe webhook (signed)
    POST /webhook/bakong                          → Bakong webhook (HMAC signed)
    POST /subscription/intent                     → Stripe intent for a plan
    POST /template/intent                         → Stripe intent for a template
    POST /bakong/subscription                     → KHQR payment for a plan
    POST /bakong/template                         → KHQR payment for a template
    GET  /bakong/transaction/{transaction_id}/status
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import (
    get_audit_service,
    get_bakong_service,
    get_payment_webhook_service,
    get_stripe_service,
    get_subscription_plan_service,
    get_template_purchase_service,
    get_template_service,
)
from ...core.exceptions import ConflictException, ValidationException
from ...models.audit_log import AuditAction
from ...models.payment_log import PaymentMethod
from ...models.template import Template
from ...models.user import User
from ...schemas.base import build_success_response
from ...schemas.payment import (
    BakongSubscriptionPaymentRequest,
    BakongTemplatePaymentRequest,
    SubscriptionPaymentRequest,
    TemplatePaymentRequest,
)
from ...services.audit_service import AuditService
from ...services.bakong_service import BakongService
from ...services.payment_webhook_service import PaymentWebhookService
from ...services.stripe_service import StripeService
from ...services.subscription_service import SubscriptionPlanService
from ...services.template_service import TemplatePurchaseService, TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])

WEBHOOK_FAILED_BODY = {"error": "Webhook processing failed"}


def _payable_template(
    template_id: str,
    user: User,
    templates: TemplateService,
    purchases: TemplatePurchaseService,
) -> Template:
    template = templates.get_template(template_id)
    if not template.price or template.price <= 0:
        raise ValidationException("This template is free and does not require payment")
    if purchases.has_purchased(user.id, template.id):
        raise ConflictException("You have already purchased this template")
    return template


def _process_webhook(
    webhooks: PaymentWebhookService, payment_method: str, event: Dict[str, Any]
) -> JSONResponse:
    try:
        if payment_method == PaymentMethod.STRIPE.value:
            result = webhooks.handle_stripe_event(event)
        else:
            result = webhooks.handle_bakong_event(event)
    except Exception as exc:
        logger.exception(f"{payment_method} webhook processing failed")
        webhooks.record_failure(payment_method, str(exc))
        return JSONResponse(WEBHOOK_FAILED_BODY, status_code=500)
    return JSONResponse(result)


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(get_stripe_service),
    webhooks: PaymentWebhookService = Depends(get_payment_webhook_service),
):
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise ValidationException("Missing stripe-signature header")
    payload = await request.body()
    event = stripe_service.verify_webhook_signature(payload, signature)
    return _process_webhook(webhooks, PaymentMethod.STRIPE.value, event)


@router.post("/webhook/bakong")
async def bakong_webhook(
    request: Request,
    bakong: BakongService = Depends(get_bakong_service),
    webhooks: PaymentWebhookService = Depends(get_payment_webhook_service),
):
    signature = request.headers.get("x-bakong-signature")
    if not signature:
        raise ValidationException("Missing x-bakong-signature header")
    payload = await request.body()
    if not bakong.verify_webhook_signature(payload, signature):
        raise ValidationException("Invalid webhook signature")
    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationException("Invalid webhook payload")
    if not isinstance(event, dict):
        raise ValidationException("Invalid webhook payload")
    return _process_webhook(webhooks, PaymentMethod.BAKONG.value, event)


@router.post("/subscription/intent")
def create_subscription_intent(
    payload: SubscriptionPaymentRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
    stripe_service: StripeService = Depends(get_stripe_service),
    audit: AuditService = Depends(get_audit_service),
):
    plan = plans.get_plan(payload.plan_id)
    intent = stripe_service.create_subscription_payment_intent(
        user_id=current_user.id,
        plan_id=plan.id,
        plan_name=plan.display_name,
        amount=plan.price,
        billing_cycle=plan.billing_cycle,
    )
    audit.log(
        AuditAction.PAYMENT.value,
        "subscription",
        actor=current_user,
        resource_id=plan.id,
        description="Stripe payment intent created",
        metadata={"paymentIntentId": intent.payment_intent_id, "amount": plan.price},
        request=request,
    )
    return build_success_response(intent, "Payment intent created")


@router.post("/template/intent")
def create_template_intent(
    payload: TemplatePaymentRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    templates: TemplateService = Depends(get_template_service),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
    stripe_service: StripeService = Depends(get_stripe_service),
    audit: AuditService = Depends(get_audit_service),
):
    template = _payable_template(payload.template_id, current_user, templates, purchases)
    intent = stripe_service.create_template_payment_intent(
        user_id=current_user.id,
        template_id=template.id,
        template_name=template.title or template.name,
        amount=template.price,
    )
    audit.log(
        AuditAction.PAYMENT.value,
        "template",
        actor=current_user,
        resource_id=template.id,
        description="Stripe payment intent created",
        metadata={"paymentIntentId": intent.payment_intent_id, "amount": template.price},
        request=request,
    )
    return build_success_response(intent, "Payment intent created")


@router.post("/bakong/subscription")
def create_bakong_subscription_payment(
    payload: BakongSubscriptionPaymentRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
    bakong: BakongService = Depends(get_bakong_service),
    audit: AuditService = Depends(get_audit_service),
):
    plan = plans.get_plan(payload.plan_id)
    payment = bakong.create_subscription_payment(
        user_id=current_user.id,
        amount=plan.price,
        currency=payload.currency,
        metadata={
            "userId": current_user.id,
            "planId": plan.id,
            "planName": plan.display_name,
            "billingCycle": plan.billing_cycle,
        },
        description=f"Subscription: {plan.display_name}",
    )
    audit.log(
        AuditAction.PAYMENT.value,
        "subscription",
        actor=current_user,
        resource_id=plan.id,
        description="Bakong KHQR payment created",
        metadata={"transactionId": payment.transaction_id, "amount": payment.amount},
        request=request,
    )
    return build_success_response(payment, "KHQR payment created")


@router.post("/bakong/template")
def create_bakong_template_payment(
    payload: BakongTemplatePaymentRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    templates: TemplateService = Depends(get_template_service),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
    bakong: BakongService = Depends(get_bakong_service),
    audit: AuditService = Depends(get_audit_service),
):
    template = _payable_template(payload.template_id, current_user, templates, purchases)
    template_name = template.title or template.name
    payment = bakong.create_template_payment(
        user_id=current_user.id,
        amount=template.price,
        currency=payload.currency,
        metadata={
            "userId": current_user.id,
            "templateId": template.id,
            "templateName": template_name,
        },
        description=f"Template: {template_name}",
    )
    audit.log(
        AuditAction.PAYMENT.value,
        "template",
        actor=current_user,
        resource_id=template.id,
        description="Bakong KHQR payment created",
        metadata={"transactionId": payment.transaction_id, "amount": payment.amount},
        request=request,
    )
    return build_success_response(payment, "KHQR payment created")


@router.get("/bakong/transaction/{transaction_id}/status")
def get_bakong_transaction_status(
    transaction_id: str,
    _user: User = Depends(get_current_user),
    bakong: BakongService = Depends(get_bakong_service),
):
    return build_success_response(bakong.get_transaction_status(transaction_id))
