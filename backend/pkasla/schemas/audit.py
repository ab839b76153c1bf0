# backend/pkasla/schemas/audit.py
from typing import Any, Dict, Optional

from pydantic import Field

from .base import ORMResponse


class AuditLogResponse(ORMResponse):
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    action: str
    resource: str
    resource_id: Optional[str] = None
    description: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: str
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="metadata_json")
