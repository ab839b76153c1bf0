# backend/pkasla/repositories/template_repository.py
"""
Template and TemplatePurchase repositories for the marketplace.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.template import Template, TemplatePurchase
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TemplateRepository(BaseRepository[Template]):
    def __init__(self, db: Session):
        super().__init__(db, Template)

    def get_by_name(self, name: str) -> Optional[Template]:
        return self.find_one_by(name=name)

    def get_by_slug(self, slug: str) -> Optional[Template]:
        return self.find_one_by(slug=slug)

    def list_templates(
        self,
        *,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_premium: Optional[bool] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Template], int]:
        query = self._build_query()
        if category:
            query = query.filter(Template.category == category)
        if is_premium is not None:
            query = query.filter(Template.is_premium.is_(is_premium))
        if search:
            term = search.strip()
            query = query.filter(
                or_(
                    Template.name.icontains(term, autoescape=True),
                    Template.title.icontains(term, autoescape=True),
                    Template.category.icontains(term, autoescape=True),
                )
            )
        query = query.order_by(Template.created_at.desc())
        return self._paginate(query, skip, limit)


class TemplatePurchaseRepository(BaseRepository[TemplatePurchase]):
    def __init__(self, db: Session):
        super().__init__(db, TemplatePurchase)

    def get_for_user(self, user_id: str, template_id: str) -> Optional[TemplatePurchase]:
        return self.find_one_by(user_id=user_id, template_id=template_id)

    def list_for_user(self, user_id: str) -> List[TemplatePurchase]:
        return self._execute_query(
            self._build_query()
            .filter(TemplatePurchase.user_id == user_id)
            .order_by(TemplatePurchase.purchase_date.desc())
        )

    def list_all(
        self, *, search: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> Tuple[List[TemplatePurchase], int]:
        query = self._build_query()
        if search:
            term = search.strip()
            query = (
                query.join(Template, Template.id == TemplatePurchase.template_id)
                .join(User, User.id == TemplatePurchase.user_id)
                .filter(
                    or_(
                        Template.name.icontains(term, autoescape=True),
                        Template.title.icontains(term, autoescape=True),
                        User.name.icontains(term, autoescape=True),
                        User.email.icontains(term, autoescape=True),
                    )
                )
            )
        query = query.order_by(TemplatePurchase.purchase_date.desc())
        return self._paginate(query, skip, limit)

    def total_revenue(self) -> float:
        total = self._execute_scalar(
            self.db.query(func.coalesce(func.sum(TemplatePurchase.price), 0))
        )
        return float(total or 0)
