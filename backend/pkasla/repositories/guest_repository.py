# backend/pkasla/repositories/guest_repository.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.guest import Guest
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class GuestRepository(BaseRepository[Guest]):
    """Guest lookups, duplicate detection and filtered listing."""

    def __init__(self, db: Session):
        super().__init__(db, Guest)

    def get_by_invite_token(self, token: str) -> Optional[Guest]:
        return self.find_one_by(invite_token=token)

    def find_in_event_by_email(self, event_id: str, email: str, exclude_id: Optional[str] = None) -> Optional[Guest]:
        query = self._build_query().filter(Guest.event_id == event_id, Guest.email == email.lower())
        if exclude_id:
            query = query.filter(Guest.id != exclude_id)
        return query.first()

    def find_in_event_by_phone(self, event_id: str, phone: str, exclude_id: Optional[str] = None) -> Optional[Guest]:
        query = self._build_query().filter(Guest.event_id == event_id, Guest.phone == phone)
        if exclude_id:
            query = query.filter(Guest.id != exclude_id)
        return query.first()

    def find_in_event_by_name(self, event_id: str, name: str, exclude_id: Optional[str] = None) -> Optional[Guest]:
        query = self._build_query().filter(
            Guest.event_id == event_id, func.lower(Guest.name) == name.strip().lower()
        )
        if exclude_id:
            query = query.filter(Guest.id != exclude_id)
        return query.first()

    def list_guests(
        self,
        *,
        event_id: Optional[str] = None,
        event_ids: Optional[List[str]] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Guest], int]:
        query = self._build_query()
        if event_id:
            query = query.filter(Guest.event_id == event_id)
        if event_ids is not None:
            query = query.filter(Guest.event_id.in_(event_ids))
        if user_id:
            query = query.filter(Guest.user_id == user_id)
        if status:
            query = query.filter(Guest.status == status)
        if search:
            term = search.strip()
            query = query.filter(
                or_(
                    Guest.name.icontains(term, autoescape=True),
                    Guest.email.icontains(term, autoescape=True),
                    Guest.phone.icontains(term, autoescape=True),
                )
            )
        query = query.order_by(Guest.created_at.desc())
        return self._paginate(query, skip, limit)
