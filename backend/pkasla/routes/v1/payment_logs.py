# backend/pkasla/routes/v1/payment_logs.py
"""Payment log routes - API v1, admin only."""

from datetime import datetime
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import get_payment_log_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.payment import PaymentLogResponse, PaymentLogStats
from ...services.payment_log_service import PaymentLogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payment-logs"])


def log_filters(
    user_id: Optional[str] = Query(None, alias="userId"),
    transaction_id: Optional[str] = Query(None, alias="transactionId"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    payment_type: Optional[str] = Query(None, alias="paymentType"),
    event_type: Optional[str] = Query(None, alias="eventType"),
    status: Optional[str] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "transaction_id": transaction_id,
        "payment_method": payment_method,
        "payment_type": payment_type,
        "event_type": event_type,
        "status": status,
        "start_date": start_date,
        "end_date": end_date,
        "search": search,
    }


@router.get("")
def list_payment_logs(
    filters: Dict[str, Any] = Depends(log_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _admin: User = Depends(require_admin),
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
):
    result = payment_logs.list_logs(filters, page=page, limit=limit)
    result["items"] = dump(PaymentLogResponse, result["items"])
    return build_success_response(result)


@router.get("/stats")
def payment_log_stats(
    filters: Dict[str, Any] = Depends(log_filters),
    _admin: User = Depends(require_admin),
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
):
    return build_success_response(PaymentLogStats(**payment_logs.get_stats(filters)))


@router.get("/{log_id}")
def get_payment_log(
    log_id: str,
    _admin: User = Depends(require_admin),
    payment_logs: PaymentLogService = Depends(get_payment_log_service),
):
    return build_success_response(PaymentLogResponse.model_validate(payment_logs.get_log(log_id)))
