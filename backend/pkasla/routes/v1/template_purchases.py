# backend/pkasla/routes/v1/template_purchases.py
"""
Template purchase routes - API v1

    GET  /me                      → Purchases of the current user
    GET  /check/{template_id}     → {hasPurchased}
    POST /                        → Record a purchase
    GET  /revenue                 → Total revenue (admin)
    GET  /                        → All purchases (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_user, require_admin
from ...api.dependencies.services import get_template_purchase_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.template import (
    AdminTemplatePurchaseResponse,
    TemplatePurchaseCreate,
    TemplatePurchaseResponse,
)
from ...services.template_service import TemplatePurchaseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["template-purchases"])


@router.get("/me")
def list_my_purchases(
    current_user: User = Depends(get_current_user),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
):
    items = purchases.list_for_user(current_user.id)
    return build_success_response(dump(TemplatePurchaseResponse, items))


@router.get("/check/{template_id}")
def check_purchase(
    template_id: str,
    current_user: User = Depends(get_current_user),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
):
    return build_success_response(
        {"hasPurchased": purchases.has_purchased(current_user.id, template_id)}
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def purchase_template(
    payload: TemplatePurchaseCreate,
    current_user: User = Depends(get_current_user),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
):
    purchase = purchases.purchase(
        current_user.id,
        payload.template_id,
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
    )
    return build_success_response(
        TemplatePurchaseResponse.model_validate(purchase), "Template purchased"
    )


@router.get("/revenue")
def total_revenue(
    _admin: User = Depends(require_admin),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
):
    return build_success_response({"totalRevenue": purchases.total_revenue()})


@router.get("")
def list_all_purchases(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    _admin: User = Depends(require_admin),
    purchases: TemplatePurchaseService = Depends(get_template_purchase_service),
):
    result = purchases.list_all(search=search, page=page, page_size=page_size)
    result["items"] = dump(AdminTemplatePurchaseResponse, result["items"])
    return build_success_response(result)
