# backend/pkasla/repositories/audit_repository.py
"""Repository helpers for audit log persistence."""

from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AuditRepository(BaseRepository[AuditLog]):
    def __init__(self, db: Session):
        super().__init__(db, AuditLog)

    def write(self, entry: AuditLog) -> AuditLog:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_logs(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[AuditLog], int]:
        query = self._build_query()
        if user_id:
            query = query.filter(AuditLog.user_id == user_id)
        if action:
            query = query.filter(AuditLog.action == action)
        if resource:
            query = query.filter(AuditLog.resource == resource)
        if resource_id:
            query = query.filter(AuditLog.resource_id == resource_id)
        if status:
            query = query.filter(AuditLog.status == status)
        if start_date:
            query = query.filter(AuditLog.created_at >= start_date)
        if end_date:
            query = query.filter(AuditLog.created_at <= end_date)
        if search:
            term = search.strip()
            query = query.filter(
                or_(
                    AuditLog.description.icontains(term, autoescape=True),
                    AuditLog.user_email.icontains(term, autoescape=True),
                    AuditLog.user_name.icontains(term, autoescape=True),
                )
            )
        return self._paginate(query.order_by(AuditLog.created_at.desc()), skip, limit)
