# backend/pkasla/routes/v1/templates.py
"""
Invitation template routes - API v1

Reads are public; creating, changing and removing templates is admin-only.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import get_template_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from ...services.template_service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["templates"])


@router.get("")
def list_templates(
    search: Optional[str] = None,
    category: Optional[str] = None,
    is_premium: Optional[bool] = Query(None, alias="isPremium"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    templates: TemplateService = Depends(get_template_service),
):
    result = templates.list_templates(
        search=search, category=category, is_premium=is_premium, page=page, page_size=page_size
    )
    result["items"] = dump(TemplateResponse, result["items"])
    return build_success_response(result)


@router.get("/slug/{slug}")
def get_template_by_slug(slug: str, templates: TemplateService = Depends(get_template_service)):
    return build_success_response(TemplateResponse.model_validate(templates.get_by_slug(slug)))


@router.get("/{template_id}")
def get_template(template_id: str, templates: TemplateService = Depends(get_template_service)):
    return build_success_response(
        TemplateResponse.model_validate(templates.get_template(template_id))
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreate,
    _admin: User = Depends(require_admin),
    templates: TemplateService = Depends(get_template_service),
):
    template = templates.create_template(payload)
    return build_success_response(TemplateResponse.model_validate(template), "Template created")


@router.patch("/{template_id}")
def update_template(
    template_id: str,
    payload: TemplateUpdate,
    _admin: User = Depends(require_admin),
    templates: TemplateService = Depends(get_template_service),
):
    template = templates.update_template(template_id, payload.model_dump(exclude_unset=True))
    return build_success_response(TemplateResponse.model_validate(template), "Template updated")


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    _admin: User = Depends(require_admin),
    templates: TemplateService = Depends(get_template_service),
):
    templates.delete_template(template_id)
    return build_success_response(None, "Template deleted")
