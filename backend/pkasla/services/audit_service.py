# backend/pkasla/services/audit_service.py
"""Service for creating and querying audit log entries."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.audit_log import AuditLog, AuditStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = ("password", "secret", "token", "backup_code", "api_key")
_REDACTED = "[REDACTED]"


class AuditService(BaseService):
    """Create and persist audit log entries."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_audit_repository(db)

    @BaseService.measure_operation("audit_log")
    def log(
        self,
        action: str,
        resource: str,
        *,
        actor: Any | None = None,
        resource_id: str | None = None,
        description: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        status: str = AuditStatus.SUCCESS.value,
        request: Any = None,
    ) -> Optional[AuditLog]:
        """
        Create an audit log entry and commit it.

        Failures are logged and swallowed so auditing never breaks the
        audited operation.
        """
        user_agent = None
        if request is not None:
            user_agent = request.headers.get("user-agent")
            if user_agent:
                user_agent = user_agent[:500]

        entry = AuditLog(
            user_id=_first_attr(actor, ("id",)),
            user_email=_first_attr(actor, ("email",)),
            user_name=_first_attr(actor, ("name",)),
            action=action,
            resource=resource,
            resource_id=resource_id,
            description=description or f"{action} {resource}",
            ip_address=get_client_ip(request),
            user_agent=user_agent,
            status=status,
            metadata_json=_sanitize_metadata(metadata),
        )
        try:
            with self.transaction():
                self.repository.write(entry)
        except Exception as exc:
            self.logger.error(f"Failed to write audit log for {action} {resource}: {exc}")
            return None
        return entry

    def log_changes(
        self,
        action: str,
        resource: str,
        resource_id: str,
        old_values: Mapping[str, Any] | None,
        new_values: Mapping[str, Any] | None,
        **kwargs: Any,
    ) -> Optional[AuditLog]:
        """Log an update with automatic change detection; no-op when nothing changed."""
        changes = _diff_changes(old_values, new_values)
        if not changes:
            return None
        metadata = dict(kwargs.pop("metadata", None) or {})
        metadata["changes"] = changes
        return self.log(action, resource, resource_id=resource_id, metadata=metadata, **kwargs)

    @BaseService.measure_operation("list_audit_logs")
    def list_logs(self, *, page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
        items, total = self.repository.list_logs(skip=(page - 1) * limit, limit=limit, **filters)
        return {"items": items, "total": total, "page": page, "limit": limit}

    @BaseService.measure_operation("get_audit_log")
    def get_log(self, log_id: str) -> AuditLog:
        entry = self.repository.get_by_id(log_id)
        if not entry:
            raise NotFoundException("Audit log not found")
        return entry


def _sanitize_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not metadata:
        return None
    return {key: _redact(key, _normalize_value(value)) for key, value in metadata.items()}


def _redact(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(marker in lowered for marker in _SENSITIVE_KEYS):
        return _REDACTED
    if isinstance(value, dict):
        return {k: _redact(k, v) for k, v in value.items()}
    return value


def _diff_changes(
    old_values: Mapping[str, Any] | None,
    new_values: Mapping[str, Any] | None,
) -> dict[str, dict[str, Any]]:
    old_values = old_values or {}
    new_values = new_values or {}
    changes: dict[str, dict[str, Any]] = {}
    for key in set(old_values.keys()) | set(new_values.keys()):
        old_value = _normalize_value(old_values.get(key))
        new_value = _normalize_value(new_values.get(key))
        if old_value != new_value:
            changes[key] = {"old": old_value, "new": new_value}
    return changes


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


def _first_attr(obj: Any, names: tuple[str, ...]) -> Any | None:
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def get_client_ip(request: Any) -> str | None:
    """Client IP from x-forwarded-for first, then the socket peer."""
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return str(forwarded).split(",")[0].strip()
    if getattr(request, "client", None):
        host = getattr(request.client, "host", None)
        return str(host) if host is not None else None
    return None
