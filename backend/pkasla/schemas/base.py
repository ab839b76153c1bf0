"""
Base schemas with standardized field naming for consistent API payloads.

Wire format is camelCase; snake_case is accepted on input as well.
"""

from datetime import datetime
import math
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase aliases, ORM attribute loading, enum values."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class ORMResponse(CamelModel):
    """Common identity/timestamp fields of persisted entities."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def build_success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """``{success: true, data, message}`` envelope."""
    return {"success": True, "data": data, "message": message or "Success"}


def page_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def dump(model_cls: type, obj: Any) -> Any:
    """Validate ORM objects (or lists of them) into response models."""
    if obj is None:
        return None
    if isinstance(obj, (list, tuple)):
        return [model_cls.model_validate(item) for item in obj]
    return model_cls.model_validate(obj)
