# backend/pkasla/repositories/subscription_repository.py
"""
Subscription plan and user subscription repositories.
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.subscription import SubscriptionPlan, SubscriptionStatus, UserSubscription
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan]):
    def __init__(self, db: Session):
        super().__init__(db, SubscriptionPlan)

    def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        return self.find_one_by(name=name.strip().lower())

    def list_plans(self, active_only: bool = False) -> List[SubscriptionPlan]:
        query = self._build_query()
        if active_only:
            query = query.filter(SubscriptionPlan.is_active.is_(True))
        return self._execute_query(query.order_by(SubscriptionPlan.price.asc()))


class UserSubscriptionRepository(BaseRepository[UserSubscription]):
    def __init__(self, db: Session):
        super().__init__(db, UserSubscription)

    def get_active_for_user(self, user_id: str, now: datetime) -> Optional[UserSubscription]:
        """The user's current subscription: status active and not past its end date."""
        return (
            self._build_query()
            .filter(
                UserSubscription.user_id == user_id,
                UserSubscription.status == SubscriptionStatus.ACTIVE.value,
                UserSubscription.end_date > now,
            )
            .order_by(UserSubscription.created_at.desc())
            .first()
        )

    def list_active_for_user(self, user_id: str) -> List[UserSubscription]:
        return self._execute_query(
            self._build_query().filter(
                UserSubscription.user_id == user_id,
                UserSubscription.status == SubscriptionStatus.ACTIVE.value,
            )
        )

    def list_for_user(self, user_id: str) -> List[UserSubscription]:
        return self._execute_query(
            self._build_query()
            .filter(UserSubscription.user_id == user_id)
            .order_by(UserSubscription.created_at.desc())
        )

    def list_all(
        self, *, status: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> Tuple[List[UserSubscription], int]:
        query = self._build_query()
        if status:
            query = query.filter(UserSubscription.status == status)
        return self._paginate(query.order_by(UserSubscription.created_at.desc()), skip, limit)
