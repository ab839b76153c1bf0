# backend/pkasla/services/stripe_service.py
"""
Stripe Service for the PKASLA platform

Creates payment intents for subscription plans and template purchases,
verifies webhook signatures and wraps the customer/subscription calls.
"""

import json
import logging
from typing import Any, Dict, Optional

import stripe

from ..core.config import settings
from ..core.exceptions import ServiceException, ServiceUnavailableException, ValidationException
from ..models.payment_log import PaymentEventType, PaymentLogStatus, PaymentMethod, PaymentType
from ..schemas.payment import PaymentIntentResponse
from .base import BaseService
from .payment_log_service import PaymentLogService

logger = logging.getLogger(__name__)


class StripeService(BaseService):
    """Thin wrapper around the Stripe API with payment-log bookkeeping."""

    def __init__(self, payment_logs: Optional[PaymentLogService] = None):
        super().__init__(None)
        self.payment_logs = payment_logs
        self.stripe_configured = False
        secret = settings.stripe_secret_key.get_secret_value()
        if secret:
            stripe.api_key = secret
            stripe.max_network_retries = 1
            self.stripe_configured = True
        else:
            self.logger.warning("Stripe secret key not configured. Payment features will not work.")

    def _check_stripe_configured(self) -> None:
        if not self.stripe_configured:
            raise ServiceUnavailableException("Stripe is not configured")

    def _create_intent(
        self,
        *,
        amount: float,
        currency: str,
        metadata: Dict[str, str],
        description: str,
    ) -> Any:
        self._check_stripe_configured()
        try:
            return stripe.PaymentIntent.create(
                amount=int(round(amount * 100)),
                currency=currency,
                metadata=metadata,
                description=description,
            )
        except stripe.StripeError as e:
            self.logger.error(f"Failed to create Stripe payment intent: {e}")
            raise ServiceException(f"Failed to create payment intent: {e}")

    @BaseService.measure_operation("stripe_subscription_intent")
    def create_subscription_payment_intent(
        self,
        *,
        user_id: str,
        plan_id: str,
        plan_name: str,
        amount: float,
        billing_cycle: str,
        currency: str = "usd",
    ) -> PaymentIntentResponse:
        intent = self._create_intent(
            amount=amount,
            currency=currency,
            metadata={
                "userId": user_id,
                "planId": plan_id,
                "planName": plan_name,
                "billingCycle": billing_cycle,
                "type": PaymentType.SUBSCRIPTION.value,
            },
            description=f"Subscription: {plan_name} ({billing_cycle})",
        )
        self.logger.info(f"Stripe subscription payment intent {intent.id} created for user {user_id}")

        if self.payment_logs:
            self.payment_logs.log_payment_event(
                PaymentEventType.PAYMENT_INTENT_CREATED.value,
                PaymentLogStatus.PENDING.value,
                user_id=user_id,
                transaction_id=intent.id,
                payment_method=PaymentMethod.STRIPE.value,
                payment_type=PaymentType.SUBSCRIPTION.value,
                amount=amount,
                currency=currency,
                plan_id=plan_id,
                metadata={"planName": plan_name, "billingCycle": billing_cycle},
            )
        return PaymentIntentResponse(client_secret=intent.client_secret, payment_intent_id=intent.id)

    @BaseService.measure_operation("stripe_template_intent")
    def create_template_payment_intent(
        self,
        *,
        user_id: str,
        template_id: str,
        template_name: str,
        amount: float,
        currency: str = "usd",
    ) -> PaymentIntentResponse:
        intent = self._create_intent(
            amount=amount,
            currency=currency,
            metadata={
                "userId": user_id,
                "templateId": template_id,
                "templateName": template_name,
                "type": PaymentType.TEMPLATE.value,
            },
            description=f"Template Purchase: {template_name}",
        )
        self.logger.info(f"Stripe template payment intent {intent.id} created for user {user_id}")

        if self.payment_logs:
            self.payment_logs.log_payment_event(
                PaymentEventType.PAYMENT_INTENT_CREATED.value,
                PaymentLogStatus.PENDING.value,
                user_id=user_id,
                transaction_id=intent.id,
                payment_method=PaymentMethod.STRIPE.value,
                payment_type=PaymentType.TEMPLATE.value,
                amount=amount,
                currency=currency,
                template_id=template_id,
                metadata={"templateName": template_name},
            )
        return PaymentIntentResponse(client_secret=intent.client_secret, payment_intent_id=intent.id)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Verify a webhook payload and return the event as a plain dict.

        Raises:
            ValidationException: If the secret is missing or the signature is invalid
        """
        self._check_stripe_configured()
        webhook_secret = settings.stripe_webhook_secret.get_secret_value()
        if not webhook_secret:
            self.logger.error("Stripe webhook secret not configured")
            raise ValidationException(
                "Webhook signature verification failed: Stripe webhook secret not configured"
            )
        try:
            stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except (stripe.SignatureVerificationError, ValueError) as e:
            self.logger.warning(f"Invalid Stripe webhook signature: {e}")
            raise ValidationException(f"Webhook signature verification failed: {e}")
        event = json.loads(payload)
        self.logger.info(f"Stripe webhook {event.get('id')} ({event.get('type')}) verified")
        return event

    def get_payment_intent(self, payment_intent_id: str) -> Any:
        self._check_stripe_configured()
        try:
            return stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            self.logger.error(f"Failed to retrieve payment intent {payment_intent_id}: {e}")
            raise ServiceException(f"Failed to retrieve payment intent: {e}")

    def create_customer(
        self, email: str, name: Optional[str] = None, metadata: Optional[Dict[str, str]] = None
    ) -> Any:
        self._check_stripe_configured()
        try:
            customer = stripe.Customer.create(email=email, name=name, metadata=metadata or {})
        except stripe.StripeError as e:
            self.logger.error(f"Failed to create Stripe customer for {email}: {e}")
            raise ServiceException(f"Failed to create customer: {e}")
        self.logger.info(f"Stripe customer {customer.id} created")
        return customer

    def create_subscription(
        self, customer_id: str, price_id: str, metadata: Optional[Dict[str, str]] = None
    ) -> Any:
        self._check_stripe_configured()
        try:
            return stripe.Subscription.create(
                customer=customer_id, items=[{"price": price_id}], metadata=metadata or {}
            )
        except stripe.StripeError as e:
            self.logger.error(f"Failed to create Stripe subscription for {customer_id}: {e}")
            raise ServiceException(f"Failed to create subscription: {e}")

    def cancel_subscription(self, subscription_id: str) -> Any:
        self._check_stripe_configured()
        try:
            return stripe.Subscription.cancel(subscription_id)
        except stripe.StripeError as e:
            self.logger.error(f"Failed to cancel Stripe subscription {subscription_id}: {e}")
            raise ServiceException(f"Failed to cancel subscription: {e}")
