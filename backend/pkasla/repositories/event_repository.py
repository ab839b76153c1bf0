# backend/pkasla/repositories/event_repository.py
"""
Event Repository for the PKASLA platform

Filtered listing of events plus the guest counter maintained by the
guest service.
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.event import Event
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EventRepository(BaseRepository[Event]):
    def __init__(self, db: Session):
        super().__init__(db, Event)

    def get_by_qr_token(self, token: str) -> Optional[Event]:
        return self.find_one_by(qr_code_token=token)

    def count_for_host(self, host_id: str) -> int:
        return self.count(host_id=host_id)

    def list_events(
        self,
        *,
        host_id: Optional[str] = None,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Event], int]:
        query = self._build_query()
        if host_id:
            query = query.filter(Event.host_id == host_id)
        if status:
            query = query.filter(Event.status == status)
        if event_type:
            query = query.filter(Event.event_type == event_type)
        if date_from:
            query = query.filter(Event.date >= date_from)
        if date_to:
            query = query.filter(Event.date <= date_to)
        if search:
            term = search.strip()
            query = query.filter(
                or_(
                    Event.title.icontains(term, autoescape=True),
                    Event.description.icontains(term, autoescape=True),
                    Event.venue.icontains(term, autoescape=True),
                )
            )
        query = query.order_by(Event.created_at.desc())
        return self._paginate(query, skip, limit)

    def adjust_guest_count(self, event: Event, delta: int) -> Event:
        """Shift the cached guest counter, never below zero."""
        try:
            event.guest_count = max(0, (event.guest_count or 0) + delta)
            self.db.flush()
            return event
        except SQLAlchemyError as e:
            self.logger.error(f"Error adjusting guest count for event {event.id}: {str(e)}")
            raise RepositoryException(f"Failed to update guest count: {str(e)}")
