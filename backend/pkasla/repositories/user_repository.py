# backend/pkasla/repositories/user_repository.py
"""
User Repository for the PKASLA platform

Handles all user lookups needed by authentication and administration.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())

    def get_by_phone(self, phone: str) -> Optional[User]:
        return self.find_one_by(phone=phone)

    def get_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        return self.find_one_by(provider=provider, provider_id=provider_id)

    def list_users(
        self,
        *,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        query = self._build_query()
        if role:
            query = query.filter(User.role == role)
        if status:
            query = query.filter(User.status == status)
        if search:
            term = search.strip()
            query = query.filter(
                or_(User.name.icontains(term, autoescape=True), User.email.icontains(term, autoescape=True))
            )
        query = query.order_by(User.created_at.desc())
        return self._paginate(query, skip, limit)

    def count_by_role(self) -> Dict[str, int]:
        return self.count_grouped(User.role)

    def count_by_status(self) -> Dict[str, int]:
        return self.count_grouped(User.status)
