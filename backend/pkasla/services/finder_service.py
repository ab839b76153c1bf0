# backend/pkasla/services/finder_service.py
"""
Finder base class for paginated, filtered listings.

A finder reads ``page``, ``limit``, ``sort`` and ``order`` from a query
mapping, turns the remaining keys into SQLAlchemy criteria through
``build_filter`` and returns one page in the shape::

    {data, page, limit, total, hasNextPage, hasPrevPage}
"""

from abc import ABC, abstractmethod
import json
import logging
from typing import Any, Dict, Generic, List, Mapping, Type, TypeVar

from pydantic.alias_generators import to_snake
from sqlalchemy import String, cast, inspect
from sqlalchemy.orm import Session

from ..repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGINATION_KEYS = ("page", "limit", "sort", "order")


def json_array_contains(column: Any, value: str) -> Any:
    """
    Match rows whose JSON list column holds ``value`` as an element.

    The element is compared in its JSON-encoded form so non-ASCII values
    match the ``\\uXXXX`` escapes the JSON column stores.
    """
    return cast(column, String).contains(json.dumps(value), autoescape=True)


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


class FinderService(ABC, Generic[T]):
    """Base class; subclasses supply ``build_filter`` and may override sorting."""

    DEFAULT_LIMIT = 20
    DEFAULT_SORT = "createdAt"
    DEFAULT_ORDER = "desc"

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.repository = RepositoryFactory.create_base_repository(db, model)
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def build_filter(self, query: Mapping[str, Any]) -> List[Any]:
        """Translate non-pagination query keys into SQLAlchemy criteria."""

    def sort_clause(self, sort: str, order: str) -> List[Any]:
        name = to_snake(sort)
        if name not in inspect(self.model).columns:
            name = to_snake(self.DEFAULT_SORT)
        column = getattr(self.model, name)
        return [column.desc() if order == "desc" else column.asc()]

    def serialize(self, item: T) -> Any:
        return item

    def split_query(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        page = _positive_int(query.get("page"), 1)
        limit = _positive_int(query.get("limit"), self.DEFAULT_LIMIT)
        sort = query.get("sort") or self.DEFAULT_SORT
        order = query.get("order") or self.DEFAULT_ORDER
        rest = {
            key: value
            for key, value in query.items()
            if key not in PAGINATION_KEYS and value is not None and value != ""
        }
        return {"page": page, "limit": limit, "sort": sort, "order": order, "rest": rest}

    def execute(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        parts = self.split_query(query)
        return self.run(
            criteria=self.build_filter(parts["rest"]),
            order_by=self.sort_clause(parts["sort"], parts["order"]),
            page=parts["page"],
            limit=parts["limit"],
        )

    def run(self, *, criteria: List[Any], order_by: List[Any], page: int, limit: int) -> Dict[str, Any]:
        items, total = self.repository.find_page(criteria, order_by, (page - 1) * limit, limit)
        return {
            "data": [self.serialize(item) for item in items],
            "page": page,
            "limit": limit,
            "total": total,
            "hasNextPage": page * limit < total,
            "hasPrevPage": page > 1,
        }


def data_with_meta(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    """List payload used by the per-user job board listings."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "hasNextPage": page * limit < total,
            "hasPrevPage": page > 1,
        },
    }
