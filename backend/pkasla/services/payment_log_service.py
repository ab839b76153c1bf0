# backend/pkasla/services/payment_log_service.py
"""
Payment log service.

Writes the append-only payment event log used by the Stripe and Bakong
flows, and serves the admin listing and statistics endpoints.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.payment_log import PaymentLog
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.base import page_meta
from .base import BaseService

logger = logging.getLogger(__name__)


class PaymentLogService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_payment_log_repository(db)

    def create(self, **fields: Any) -> PaymentLog:
        metadata = fields.pop("metadata", None)
        with self.transaction():
            entry = self.repository.create(metadata_json=metadata, **fields)
        return entry

    def log_payment_event(
        self,
        event_type: str,
        status: str,
        *,
        user_id: Optional[str] = None,
        transaction_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        payment_type: Optional[str] = None,
        amount: Optional[float] = None,
        currency: Optional[str] = None,
        plan_id: Optional[str] = None,
        template_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[PaymentLog]:
        """
        Record a payment event.

        Errors are logged and swallowed; a failed log write never interrupts
        the payment flow that triggered it.
        """
        prometheus_metrics.record_payment_event(payment_method or "unknown", event_type, status)
        try:
            return self.create(
                event_type=event_type,
                status=status,
                user_id=user_id,
                transaction_id=transaction_id,
                payment_method=payment_method,
                payment_type=payment_type,
                amount=amount,
                currency=currency,
                plan_id=plan_id,
                template_id=template_id,
                metadata=metadata,
                error=error,
                ip_address=ip_address,
                user_agent=user_agent[:500] if user_agent else None,
            )
        except Exception as exc:
            self.logger.error(
                f"Failed to log payment event {event_type} for transaction {transaction_id}: {exc}"
            )
            return None

    def get_log(self, log_id: str) -> PaymentLog:
        entry = self.repository.get_by_id(log_id)
        if not entry:
            raise NotFoundException("Payment log not found")
        return entry

    @BaseService.measure_operation("list_payment_logs")
    def list_logs(self, filters: Dict[str, Any], page: int = 1, limit: int = 20) -> Dict[str, Any]:
        items, total = self.repository.list_logs(filters, skip=(page - 1) * limit, limit=limit)
        return {"items": items, **page_meta(page, limit, total)}

    def get_stats(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.repository.stats(filters or {})
