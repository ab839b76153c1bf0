# backend/pkasla/routes/v1/subscription_plans.py
"""Subscription plan routes - API v1. Listing is public, changes are admin-only."""

import logging

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import get_subscription_plan_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.subscription import (
    SubscriptionPlanCreate,
    SubscriptionPlanResponse,
    SubscriptionPlanUpdate,
)
from ...services.subscription_service import SubscriptionPlanService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscription-plans"])


@router.get("")
def list_plans(
    active_only: bool = Query(False, alias="activeOnly"),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
):
    return build_success_response(dump(SubscriptionPlanResponse, plans.list_plans(active_only)))


@router.get("/{plan_id}")
def get_plan(plan_id: str, plans: SubscriptionPlanService = Depends(get_subscription_plan_service)):
    return build_success_response(SubscriptionPlanResponse.model_validate(plans.get_plan(plan_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: SubscriptionPlanCreate,
    _admin: User = Depends(require_admin),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
):
    plan = plans.create_plan(payload)
    return build_success_response(
        SubscriptionPlanResponse.model_validate(plan), "Subscription plan created"
    )


@router.patch("/{plan_id}")
def update_plan(
    plan_id: str,
    payload: SubscriptionPlanUpdate,
    _admin: User = Depends(require_admin),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
):
    plan = plans.update_plan(plan_id, payload.model_dump(exclude_unset=True))
    return build_success_response(
        SubscriptionPlanResponse.model_validate(plan), "Subscription plan updated"
    )


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: str,
    _admin: User = Depends(require_admin),
    plans: SubscriptionPlanService = Depends(get_subscription_plan_service),
):
    plans.delete_plan(plan_id)
    return build_success_response(None, "Subscription plan deleted")
