# backend/pkasla/repositories/payment_log_repository.py
"""
Payment Log Repository

Filtered listing and aggregate statistics over the payment event log.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.payment_log import PaymentLog, PaymentLogStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentLogRepository(BaseRepository[PaymentLog]):
    def __init__(self, db: Session):
        super().__init__(db, PaymentLog)

    def _filtered(self, filters: Dict[str, Any]):
        query = self._build_query()
        if filters.get("user_id"):
            query = query.filter(PaymentLog.user_id == filters["user_id"])
        if filters.get("transaction_id"):
            query = query.filter(
                PaymentLog.transaction_id.icontains(filters["transaction_id"], autoescape=True)
            )
        for field in ("payment_method", "payment_type", "event_type", "status"):
            if filters.get(field):
                query = query.filter(getattr(PaymentLog, field) == filters[field])
        start: Optional[datetime] = filters.get("start_date")
        end: Optional[datetime] = filters.get("end_date")
        if start:
            query = query.filter(PaymentLog.created_at >= start)
        if end:
            query = query.filter(PaymentLog.created_at <= end)
        if filters.get("search"):
            term = filters["search"].strip()
            query = query.filter(
                or_(
                    PaymentLog.transaction_id.icontains(term, autoescape=True),
                    PaymentLog.error.icontains(term, autoescape=True),
                )
            )
        return query

    def list_logs(self, filters: Dict[str, Any], skip: int, limit: int) -> Tuple[List[PaymentLog], int]:
        query = self._filtered(filters).order_by(PaymentLog.created_at.desc())
        return self._paginate(query, skip, limit)

    def list_for_transaction(self, transaction_id: str) -> List[PaymentLog]:
        return self._execute_query(
            self._build_query()
            .filter(PaymentLog.transaction_id == transaction_id)
            .order_by(PaymentLog.created_at.asc())
        )

    def stats(self, filters: Dict[str, Any]) -> Dict[str, Any]:
        """Grouped counts plus the summed amount of completed entries."""
        base = self._filtered(filters)
        total = base.order_by(None).count()

        def grouped(column) -> Dict[str, int]:
            rows = self._execute_query(
                base.with_entities(column, func.count(PaymentLog.id)).order_by(None).group_by(column)
            )
            return {(value or "unknown"): count for value, count in rows}

        completed_amount = self._execute_scalar(
            base.with_entities(func.coalesce(func.sum(PaymentLog.amount), 0))
            .order_by(None)
            .filter(PaymentLog.status == PaymentLogStatus.COMPLETED.value)
        )
        return {
            "total": total,
            "by_status": grouped(PaymentLog.status),
            "by_payment_method": grouped(PaymentLog.payment_method),
            "by_payment_type": grouped(PaymentLog.payment_type),
            "by_event_type": grouped(PaymentLog.event_type),
            "total_amount": float(completed_amount or 0),
        }
