# backend/pkasla/services/event_service.py
"""
Event Service for the PKASLA platform

Events are owned by their host. Hosts are capped by their subscription
plan's event limit (admins are not), and every event can carry a public
QR token that guests use to register themselves.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException
from ..models.event import Event, EventType
from ..models.user import User, UserRole
from ..repositories.factory import RepositoryFactory
from ..schemas.event import EventCreate
from .base import BaseService
from .cache_service import CacheService
from .subscription_service import UserSubscriptionService

logger = logging.getLogger(__name__)


def generate_public_token() -> str:
    """32 random bytes, base64url without padding."""
    return secrets.token_urlsafe(32)


class EventService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_event_repository(db)
        self.subscriptions = UserSubscriptionService(db, cache)

    def get_event(self, event_id: str) -> Event:
        event = self.repository.get_by_id(event_id)
        if not event:
            raise NotFoundException("Event not found")
        return event

    def _require_host(self, event: Event, user: User, message: str) -> None:
        if event.host_id != user.id:
            raise ForbiddenException(message)

    @BaseService.measure_operation("create_event")
    def create_event(self, data: EventCreate, host: User) -> Event:
        if host.role != UserRole.ADMIN.value:
            max_events = self.subscriptions.get_max_events_for_user(host.id)
            if max_events is not None and self.repository.count_for_host(host.id) >= max_events:
                raise ForbiddenException(
                    "Event limit reached for your subscription plan",
                    details={"maxEvents": max_events},
                )

        with self.transaction():
            event = self.repository.create(host_id=host.id, guest_count=0, **data.model_dump())
        self.logger.info(f"Event {event.id} created by {host.id}")
        return event

    @BaseService.measure_operation("update_event")
    def update_event(self, event_id: str, changes: Dict[str, Any], user: User) -> Event:
        event = self.get_event(event_id)
        self._require_host(event, user, "You can only update your own events")

        if "template_slug" in changes:
            changes["template_slug"] = changes["template_slug"] or None

        with self.transaction():
            for key, value in changes.items():
                setattr(event, key, value)
        return event

    @BaseService.measure_operation("delete_event")
    def delete_event(self, event_id: str, user: User) -> None:
        event = self.get_event(event_id)
        self._require_host(event, user, "You can only delete your own events")
        with self.transaction():
            self.repository.delete(event.id)
        self.logger.info(f"Event {event_id} deleted by {user.id}")

    @BaseService.measure_operation("list_events")
    def list_events(self, *, page: int = 1, page_size: int = 10, **filters: Any) -> Dict[str, Any]:
        items, total = self.repository.list_events(
            skip=(page - 1) * page_size, limit=page_size, **filters
        )
        return {"items": items, "total": total, "page": page, "pageSize": page_size}

    def list_for_host(self, host_id: str) -> List[Event]:
        items, _ = self.repository.list_events(host_id=host_id, skip=0, limit=1000)
        return items

    def list_by_type(self, event_type: str, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        return self.list_events(page=page, page_size=page_size, event_type=event_type)

    @staticmethod
    def get_categories() -> List[str]:
        return [event_type.value for event_type in EventType]

    @BaseService.measure_operation("generate_event_qr_token")
    def generate_qr_token(self, event_id: str, user: User) -> str:
        event = self.get_event(event_id)
        self._require_host(event, user, "You can only generate QR codes for your own events")
        token = generate_public_token()
        with self.transaction():
            event.qr_code_token = token
        return token

    def get_by_qr_token(self, token: str) -> Event:
        event = self.repository.get_by_qr_token(token)
        if not event:
            raise NotFoundException("Event not found or invalid QR code")
        return event

    def adjust_guest_count(self, event: Event, delta: int) -> Event:
        """Caller owns the transaction."""
        return self.repository.adjust_guest_count(event, delta)
