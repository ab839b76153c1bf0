# backend/pkasla/services/template_service.py
"""
Template Service for the PKASLA platform

Invitation templates (admin-managed catalogue) and the one-time purchases
users make to unlock them.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..models.template import Template, TemplatePurchase
from ..repositories.factory import RepositoryFactory
from ..schemas.template import TemplateCreate
from ..utils.time_utils import utcnow
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)


class TemplateService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_template_repository(db)

    def get_template(self, template_id: str) -> Template:
        template = self.repository.get_by_id(template_id)
        if not template:
            raise NotFoundException("Template not found")
        return template

    def get_by_slug(self, slug: str) -> Template:
        template = self.repository.get_by_slug(slug)
        if not template:
            raise NotFoundException("Template not found")
        return template

    def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[str] = None) -> None:
        if name:
            existing = self.repository.get_by_name(name)
            if existing and existing.id != exclude_id:
                raise ConflictException("Template name already exists")
        if slug:
            existing = self.repository.get_by_slug(slug)
            if existing and existing.id != exclude_id:
                raise ConflictException("Template slug already exists")

    @BaseService.measure_operation("create_template")
    def create_template(self, data: TemplateCreate) -> Template:
        self._check_unique(data.name, data.slug)
        with self.transaction():
            template = self.repository.create(**data.model_dump())
        self.logger.info(f"Template {template.name} created")
        return template

    @BaseService.measure_operation("update_template")
    def update_template(self, template_id: str, changes: Dict[str, Any]) -> Template:
        template = self.get_template(template_id)
        self._check_unique(changes.get("name"), changes.get("slug"), exclude_id=template.id)
        with self.transaction():
            for key, value in changes.items():
                setattr(template, key, value)
        return template

    @BaseService.measure_operation("delete_template")
    def delete_template(self, template_id: str) -> None:
        with self.transaction():
            if not self.repository.delete(template_id):
                raise NotFoundException("Template not found")

    @BaseService.measure_operation("list_templates")
    def list_templates(
        self,
        *,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_premium: Optional[bool] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Dict[str, Any]:
        items, total = self.repository.list_templates(
            search=search,
            category=category,
            is_premium=is_premium,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return {"items": items, "total": total, "page": page, "pageSize": page_size}


class TemplatePurchaseService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_template_purchase_repository(db)
        self.template_repository = RepositoryFactory.create_template_repository(db)

    @BaseService.measure_operation("purchase_template")
    def purchase(
        self,
        user_id: str,
        template_id: str,
        *,
        payment_method: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> TemplatePurchase:
        """Record a purchase at the template's current price (0 for free templates)."""
        template = self.template_repository.get_by_id(template_id)
        if not template:
            raise NotFoundException("Template not found")
        if self.repository.get_for_user(user_id, template_id):
            raise ConflictException("You have already purchased this template")

        with self.transaction():
            purchase = self.repository.create(
                user_id=user_id,
                template_id=template.id,
                price=template.price or 0,
                purchase_date=utcnow(),
                payment_method=payment_method,
                transaction_id=transaction_id,
            )
        self.logger.info(f"User {user_id} purchased template {template.name}")
        return purchase

    def has_purchased(self, user_id: str, template_id: str) -> bool:
        return self.repository.get_for_user(user_id, template_id) is not None

    def list_for_user(self, user_id: str) -> List[TemplatePurchase]:
        return self.repository.list_for_user(user_id)

    def list_all(self, *, search: Optional[str] = None, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        items, total = self.repository.list_all(
            search=search, skip=(page - 1) * page_size, limit=page_size
        )
        return {"items": items, "total": total, "page": page, "pageSize": page_size}

    def total_revenue(self) -> float:
        return self.repository.total_revenue()
