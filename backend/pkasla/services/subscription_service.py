# backend/pkasla/services/subscription_service.py
"""
Subscription Service for the PKASLA platform

Plans are admin-managed; a user holds at most one active subscription,
whose plan caps the number of events the user may host.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, ForbiddenException, NotFoundException
from ..models.subscription import (
    BillingCycle,
    SubscriptionPlan,
    SubscriptionStatus,
    UserSubscription,
)
from ..repositories.factory import RepositoryFactory
from ..schemas.subscription import SubscriptionPlanCreate
from ..utils.time_utils import add_months, utcnow
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)

# Event cap for users without an active subscription
DEFAULT_MAX_EVENTS = 5


class SubscriptionPlanService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_subscription_plan_repository(db)

    @BaseService.measure_operation("create_plan")
    def create_plan(self, data: SubscriptionPlanCreate) -> SubscriptionPlan:
        if self.repository.get_by_name(data.name):
            raise ConflictException("Subscription plan name already exists")
        with self.transaction():
            plan = self.repository.create(**data.model_dump())
        self.logger.info(f"Created subscription plan {plan.name}")
        return plan

    def get_plan(self, plan_id: str) -> SubscriptionPlan:
        plan = self.repository.get_by_id(plan_id)
        if not plan:
            raise NotFoundException("Subscription plan not found")
        return plan

    @BaseService.measure_operation("update_plan")
    def update_plan(self, plan_id: str, changes: Dict[str, Any]) -> SubscriptionPlan:
        plan = self.get_plan(plan_id)
        with self.transaction():
            for key, value in changes.items():
                setattr(plan, key, value)
        return plan

    @BaseService.measure_operation("delete_plan")
    def delete_plan(self, plan_id: str) -> None:
        with self.transaction():
            if not self.repository.delete(plan_id):
                raise NotFoundException("Subscription plan not found")

    def list_plans(self, active_only: bool = False) -> List[SubscriptionPlan]:
        return self.repository.list_plans(active_only=active_only)


class UserSubscriptionService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_user_subscription_repository(db)
        self.plan_repository = RepositoryFactory.create_subscription_plan_repository(db)

    @BaseService.measure_operation("subscribe")
    def subscribe(
        self,
        user_id: str,
        plan_id: str,
        *,
        payment_method: Optional[str] = None,
        transaction_id: Optional[str] = None,
        auto_renew: Optional[bool] = None,
    ) -> UserSubscription:
        """
        Start a subscription on ``plan_id``.

        Any active subscription the user holds is cancelled first. The end
        date is one billing cycle after the start.
        """
        plan = self.plan_repository.get_by_id(plan_id)
        if not plan:
            raise NotFoundException("Subscription plan not found")

        now = utcnow()
        if plan.billing_cycle == BillingCycle.MONTHLY.value:
            end_date = add_months(now, 1)
        else:
            end_date = add_months(now, 12)

        with self.transaction():
            for current in self.repository.list_active_for_user(user_id):
                current.status = SubscriptionStatus.CANCELLED.value
                current.cancelled_at = now
            subscription = self.repository.create(
                user_id=user_id,
                plan_id=plan.id,
                status=SubscriptionStatus.ACTIVE.value,
                start_date=now,
                end_date=end_date,
                auto_renew=True if auto_renew is None else auto_renew,
                payment_method=payment_method,
                transaction_id=transaction_id,
            )
        self.logger.info(f"User {user_id} subscribed to plan {plan.name}")
        return subscription

    @BaseService.measure_operation("change_subscription")
    def change_subscription(
        self,
        user_id: str,
        plan_id: str,
        *,
        payment_method: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> UserSubscription:
        return self.subscribe(
            user_id,
            plan_id,
            payment_method=payment_method,
            transaction_id=transaction_id,
            auto_renew=True,
        )

    @BaseService.measure_operation("cancel_subscription")
    def cancel(self, subscription_id: str, user_id: str) -> UserSubscription:
        subscription = self.repository.get_by_id(subscription_id)
        if not subscription:
            raise NotFoundException("Subscription not found")
        if subscription.user_id != user_id:
            raise ForbiddenException("You can only cancel your own subscription")
        with self.transaction():
            subscription.status = SubscriptionStatus.CANCELLED.value
            subscription.cancelled_at = utcnow()
            subscription.auto_renew = False
        return subscription

    def get_active(self, user_id: str) -> Optional[UserSubscription]:
        return self.repository.get_active_for_user(user_id, utcnow())

    def list_for_user(self, user_id: str) -> List[UserSubscription]:
        return self.repository.list_for_user(user_id)

    def list_all(self, *, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        items, total = self.repository.list_all(status=status, skip=(page - 1) * limit, limit=limit)
        return {"items": items, "total": total, "page": page, "pageSize": limit}

    def get_max_events_for_user(self, user_id: str) -> Optional[int]:
        """Event cap for ``user_id``; None means unlimited."""
        active = self.get_active(user_id)
        if active is None:
            return DEFAULT_MAX_EVENTS
        plan = active.plan or self.plan_repository.get_by_id(active.plan_id)
        if plan is None:
            return DEFAULT_MAX_EVENTS
        return plan.max_events
