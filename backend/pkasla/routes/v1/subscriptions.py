# backend/pkasla/routes/v1/subscriptions.py
"""
User subscription routes - API v1

Endpoints:
    GET  /me                       → Subscription history of the current user
    GET  /me/active                → Active subscription or null
    POST /                         → Subscribe (cancels the current one)
    POST /change                   → Switch plan
    POST /{subscription_id}/cancel
    GET  /user/{user_id}           → Admin view of one user's subscriptions
    GET  /admin/all                → Admin listing
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_user, require_admin
from ...api.dependencies.services import get_user_subscription_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.subscription import (
    ChangeSubscriptionRequest,
    SubscribeRequest,
    UserSubscriptionResponse,
)
from ...services.subscription_service import UserSubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscriptions"])


@router.get("/me")
def list_my_subscriptions(
    current_user: User = Depends(get_current_user),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    items = subscriptions.list_for_user(current_user.id)
    return build_success_response(dump(UserSubscriptionResponse, items))


@router.get("/me/active")
def get_my_active_subscription(
    current_user: User = Depends(get_current_user),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    active = subscriptions.get_active(current_user.id)
    return build_success_response(dump(UserSubscriptionResponse, active))


@router.post("", status_code=status.HTTP_201_CREATED)
def subscribe(
    payload: SubscribeRequest,
    current_user: User = Depends(get_current_user),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    subscription = subscriptions.subscribe(
        current_user.id,
        payload.plan_id,
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
        auto_renew=payload.auto_renew,
    )
    return build_success_response(
        UserSubscriptionResponse.model_validate(subscription), "Subscription created"
    )


@router.post("/change")
def change_subscription(
    payload: ChangeSubscriptionRequest,
    current_user: User = Depends(get_current_user),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    subscription = subscriptions.change_subscription(
        current_user.id,
        payload.plan_id,
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
    )
    return build_success_response(
        UserSubscriptionResponse.model_validate(subscription), "Subscription changed"
    )


@router.post("/{subscription_id}/cancel")
def cancel_subscription(
    subscription_id: str,
    current_user: User = Depends(get_current_user),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    subscription = subscriptions.cancel(subscription_id, current_user.id)
    return build_success_response(
        UserSubscriptionResponse.model_validate(subscription), "Subscription cancelled"
    )


@router.get("/user/{user_id}")
def list_user_subscriptions(
    user_id: str,
    _admin: User = Depends(require_admin),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    return build_success_response(
        dump(UserSubscriptionResponse, subscriptions.list_for_user(user_id))
    )


@router.get("/admin/all")
def list_all_subscriptions(
    subscription_status: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    _admin: User = Depends(require_admin),
    subscriptions: UserSubscriptionService = Depends(get_user_subscription_service),
):
    result = subscriptions.list_all(status=subscription_status, page=page, limit=limit)
    result["items"] = dump(UserSubscriptionResponse, result["items"])
    return build_success_response(result)
