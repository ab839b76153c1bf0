# backend/pkasla/services/user_service.py
"""
User Service for the PKASLA platform

Profile updates for the current user and user administration.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..models.user import User, UserRole, UserStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_user_repository(db)

    def get_user(self, user_id: str) -> User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    @BaseService.measure_operation("update_profile")
    def update_profile(self, user: User, changes: Dict[str, Any]) -> User:
        phone = changes.get("phone")
        if phone and phone != user.phone:
            existing = self.repository.get_by_phone(phone)
            if existing and existing.id != user.id:
                raise ConflictException("Phone number already in use")

        with self.transaction():
            if changes.get("name"):
                user.name = changes["name"].strip()
            for field in ("phone", "avatar"):
                if field in changes:
                    setattr(user, field, changes[field] or None)
        return user

    @BaseService.measure_operation("list_users")
    def list_users(
        self,
        *,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        items, total = self.repository.list_users(
            role=role, status=status, search=search, skip=(page - 1) * limit, limit=limit
        )
        return {"items": items, "total": total, "page": page, "limit": limit}

    @BaseService.measure_operation("update_user_status")
    def update_status(self, user_id: str, status: str, acting_user: User) -> User:
        user = self.get_user(user_id)
        if user.id == acting_user.id and status != UserStatus.ACTIVE.value:
            raise ValidationException("You cannot change your own status")
        with self.transaction():
            user.status = status
        self.logger.info(f"User {user.id} status set to {status} by {acting_user.id}")
        return user

    @BaseService.measure_operation("update_user_role")
    def update_role(self, user_id: str, role: str, acting_user: User) -> User:
        user = self.get_user(user_id)
        if user.id == acting_user.id and role != UserRole.ADMIN.value:
            raise ValidationException("You cannot remove your own admin role")
        with self.transaction():
            user.role = role
        self.logger.info(f"User {user.id} role set to {role} by {acting_user.id}")
        return user

    @BaseService.measure_operation("user_analytics")
    def get_user_analytics(self) -> Dict[str, Any]:
        by_status = self.repository.count_by_status()
        by_role = self.repository.count_by_role()
        return {
            "total": self.repository.count(),
            "active": by_status.get(UserStatus.ACTIVE.value, 0),
            "pending": by_status.get(UserStatus.PENDING.value, 0),
            "suspended": by_status.get(UserStatus.SUSPENDED.value, 0),
            "byRole": {role.value: by_role.get(role.value, 0) for role in UserRole},
        }
