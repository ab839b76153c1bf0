# backend/pkasla/services/gift_service.py
"""
Gift Service for the PKASLA platform

Gifts are recorded by the event host against one of the event's guests.
The guest's ``has_given_gift`` flag follows whether any gift remains.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException
from ..models.gift import Gift, GiftCurrency
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.gift import GiftCreate
from .base import BaseService
from .cache_service import CacheService
from .event_service import EventService

logger = logging.getLogger(__name__)


class GiftService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_gift_repository(db)
        self.guest_repository = RepositoryFactory.create_guest_repository(db)
        self.events = EventService(db, cache)

    def get_gift(self, gift_id: str) -> Gift:
        gift = self.repository.get_by_id(gift_id)
        if not gift:
            raise NotFoundException("Gift not found")
        return gift

    def _require_host(self, event_id: str, user: User, message: str) -> None:
        event = self.events.get_event(event_id)
        if event.host_id != user.id:
            raise ForbiddenException(message)

    @BaseService.measure_operation("create_gift")
    def create_gift(self, data: GiftCreate, user: User) -> Gift:
        guest = self.guest_repository.get_by_id(data.guest_id)
        if not guest:
            raise NotFoundException("Guest not found")
        self._require_host(guest.event_id, user, "You can only record gifts for your own events")

        with self.transaction():
            gift = self.repository.create(
                event_id=guest.event_id,
                created_by=user.id,
                **data.model_dump(),
            )
            guest.has_given_gift = True
        self.logger.info(f"Gift {gift.id} recorded for guest {guest.id}")
        return gift

    @BaseService.measure_operation("update_gift")
    def update_gift(self, gift_id: str, changes: Dict[str, Any], user: User) -> Gift:
        gift = self.get_gift(gift_id)
        self._require_host(gift.event_id, user, "You can only update gifts for your own events")
        with self.transaction():
            for key, value in changes.items():
                setattr(gift, key, value)
        return gift

    @BaseService.measure_operation("delete_gift")
    def delete_gift(self, gift_id: str, user: User) -> None:
        gift = self.get_gift(gift_id)
        self._require_host(gift.event_id, user, "You can only delete gifts from your own events")
        guest_id = gift.guest_id
        with self.transaction():
            self.repository.delete(gift.id)
            if self.repository.count_for_guest(guest_id) == 0:
                guest = self.guest_repository.get_by_id(guest_id)
                if guest is not None:
                    guest.has_given_gift = False

    @BaseService.measure_operation("list_gifts")
    def list_gifts(self, *, page: int = 1, page_size: int = 10, **filters: Any) -> Dict[str, Any]:
        items, total = self.repository.list_gifts(
            skip=(page - 1) * page_size, limit=page_size, **filters
        )
        return {"items": items, "total": total, "page": page, "pageSize": page_size}

    def list_for_guest(self, guest_id: str) -> List[Gift]:
        items, _ = self.repository.list_gifts(guest_id=guest_id, skip=0, limit=10000)
        return items

    def list_for_event(self, event_id: str) -> Dict[str, Any]:
        """All gifts of an event plus per-currency totals."""
        items, _ = self.repository.list_gifts(event_id=event_id, skip=0, limit=10000)
        totals = {currency.value: 0.0 for currency in GiftCurrency}
        totals.update(self.repository.totals_by_currency(event_id))
        return {"items": items, "totals": totals}
