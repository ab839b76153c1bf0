# backend/pkasla/services/payment_webhook_service.py
"""
Payment webhook processing.

Turns verified Stripe and Bakong webhook events into subscriptions and
template purchases. Events are handled idempotently: a replayed success
event for an already fulfilled transaction is a no-op.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException
from ..models.payment_log import PaymentEventType, PaymentLogStatus, PaymentMethod, PaymentType
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .payment_log_service import PaymentLogService
from .subscription_service import UserSubscriptionService
from .template_service import TemplatePurchaseService

logger = logging.getLogger(__name__)

BAKONG_COMPLETED_EVENTS = {"payment.completed", "transaction.completed"}
BAKONG_FAILED_EVENTS = {"payment.failed", "transaction.failed"}
BAKONG_EXPIRED_EVENTS = {"payment.expired", "transaction.expired"}


class PaymentWebhookService(BaseService):
    def __init__(self, db: Session, payment_logs: Optional[PaymentLogService] = None):
        super().__init__(db)
        self.subscriptions = UserSubscriptionService(db)
        self.purchases = TemplatePurchaseService(db)
        self.subscription_repository = RepositoryFactory.create_user_subscription_repository(db)
        self.payment_logs = payment_logs or PaymentLogService(db)

    @BaseService.measure_operation("stripe_webhook")
    def handle_stripe_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        event_type = event.get("type")
        payload = (event.get("data") or {}).get("object") or {}
        self.logger.info(f"Processing Stripe webhook {event.get('id')} ({event_type})")

        if event_type == "payment_intent.succeeded":
            self.fulfil(
                payload.get("metadata") or {},
                payload.get("id"),
                PaymentMethod.STRIPE.value,
                amount=_cents_to_amount(payload.get("amount")),
                currency=payload.get("currency"),
            )
        elif event_type == "payment_intent.payment_failed":
            metadata = payload.get("metadata") or {}
            error = (payload.get("last_payment_error") or {}).get("message")
            self.logger.error(f"Stripe payment intent {payload.get('id')} failed: {error}")
            self._log_outcome(
                PaymentEventType.PAYMENT_FAILED.value,
                PaymentLogStatus.FAILED.value,
                PaymentMethod.STRIPE.value,
                metadata,
                payload.get("id"),
                amount=_cents_to_amount(payload.get("amount")),
                currency=payload.get("currency"),
                error=error,
            )
        elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
            self.logger.info(f"Stripe subscription {payload.get('id')} is {payload.get('status')}")
        elif event_type == "customer.subscription.deleted":
            self.logger.info(f"Stripe subscription {payload.get('id')} deleted")
        else:
            self.logger.debug(f"Unhandled Stripe webhook event type: {event_type}")
        return {"received": True}

    @BaseService.measure_operation("bakong_webhook")
    def handle_bakong_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        event_type = event.get("type") or event.get("eventType")
        data = event.get("data") or event
        metadata = data.get("metadata") or {}
        transaction_id = data.get("transactionId") or data.get("id")
        self.logger.info(f"Processing Bakong webhook {event_type} for transaction {transaction_id}")

        if event_type in BAKONG_COMPLETED_EVENTS:
            self.fulfil(
                metadata,
                transaction_id,
                PaymentMethod.BAKONG.value,
                amount=data.get("amount"),
                currency=data.get("currency"),
            )
        elif event_type in BAKONG_FAILED_EVENTS:
            error = data.get("error") or data.get("message") or data.get("failureReason")
            self.logger.error(f"Bakong payment {transaction_id} failed: {error}")
            self._log_outcome(
                PaymentEventType.PAYMENT_FAILED.value,
                PaymentLogStatus.FAILED.value,
                PaymentMethod.BAKONG.value,
                metadata,
                transaction_id,
                amount=data.get("amount"),
                currency=data.get("currency"),
                error=error,
            )
        elif event_type in BAKONG_EXPIRED_EVENTS:
            self.logger.info(f"Bakong payment {transaction_id} expired")
            self._log_outcome(
                PaymentEventType.PAYMENT_EXPIRED.value,
                PaymentLogStatus.EXPIRED.value,
                PaymentMethod.BAKONG.value,
                metadata,
                transaction_id,
                amount=data.get("amount"),
                currency=data.get("currency"),
            )
        else:
            self.logger.debug(f"Unhandled Bakong webhook event type: {event_type}")
        return {"received": True}

    def fulfil(
        self,
        metadata: Dict[str, Any],
        transaction_id: Optional[str],
        payment_method: str,
        *,
        amount: Optional[float] = None,
        currency: Optional[str] = None,
    ) -> Optional[Any]:
        """Create the subscription or template purchase a successful payment paid for."""
        payment_type = metadata.get("type")
        user_id = metadata.get("userId")
        result: Optional[Any] = None

        if payment_type == PaymentType.SUBSCRIPTION.value:
            existing = (
                self.subscription_repository.find_one_by(transaction_id=transaction_id)
                if transaction_id
                else None
            )
            if existing:
                self.logger.info(f"Subscription for transaction {transaction_id} already exists")
                return existing
            result = self.subscriptions.subscribe(
                user_id,
                metadata.get("planId"),
                payment_method=payment_method,
                transaction_id=transaction_id,
                auto_renew=True,
            )
        elif payment_type == PaymentType.TEMPLATE.value:
            try:
                result = self.purchases.purchase(
                    user_id,
                    metadata.get("templateId"),
                    payment_method=payment_method,
                    transaction_id=transaction_id,
                )
            except ConflictException:
                self.logger.info(
                    f"Template {metadata.get('templateId')} already purchased by user {user_id}"
                )
                return None
        else:
            self.logger.warning(f"Unknown payment type {payment_type!r} for transaction {transaction_id}")
            return None

        self._log_outcome(
            PaymentEventType.PAYMENT_SUCCEEDED.value,
            PaymentLogStatus.COMPLETED.value,
            payment_method,
            metadata,
            transaction_id,
            amount=amount,
            currency=currency,
        )
        return result

    def record_failure(self, payment_method: str, error: str, transaction_id: Optional[str] = None) -> None:
        self.payment_logs.log_payment_event(
            PaymentEventType.WEBHOOK_FAILED.value,
            PaymentLogStatus.FAILED.value,
            payment_method=payment_method,
            transaction_id=transaction_id,
            error=error,
        )

    def _log_outcome(
        self,
        event_type: str,
        status: str,
        payment_method: str,
        metadata: Dict[str, Any],
        transaction_id: Optional[str],
        **fields: Any,
    ) -> None:
        self.payment_logs.log_payment_event(
            event_type,
            status,
            user_id=metadata.get("userId"),
            transaction_id=transaction_id,
            payment_method=payment_method,
            payment_type=metadata.get("type"),
            plan_id=metadata.get("planId"),
            template_id=metadata.get("templateId"),
            metadata=dict(metadata) or None,
            **fields,
        )


def _cents_to_amount(value: Any) -> Optional[float]:
    if value is None:
        return None
    return round(float(value) / 100, 2)
