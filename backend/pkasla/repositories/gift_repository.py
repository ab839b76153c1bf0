# backend/pkasla/repositories/gift_repository.py
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.gift import Gift
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class GiftRepository(BaseRepository[Gift]):
    def __init__(self, db: Session):
        super().__init__(db, Gift)

    def count_for_guest(self, guest_id: str) -> int:
        return self.count(guest_id=guest_id)

    def list_gifts(
        self,
        *,
        guest_id: Optional[str] = None,
        event_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        currency: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Gift], int]:
        query = self._build_query()
        if guest_id:
            query = query.filter(Gift.guest_id == guest_id)
        if event_id:
            query = query.filter(Gift.event_id == event_id)
        if payment_method:
            query = query.filter(Gift.payment_method == payment_method)
        if currency:
            query = query.filter(Gift.currency == currency)
        query = query.order_by(Gift.created_at.desc())
        return self._paginate(query, skip, limit)

    def totals_by_currency(self, event_id: str) -> Dict[str, float]:
        rows = self._execute_query(
            self.db.query(Gift.currency, func.coalesce(func.sum(Gift.amount), 0))
            .filter(Gift.event_id == event_id)
            .group_by(Gift.currency)
        )
        return {currency: float(total) for currency, total in rows}
