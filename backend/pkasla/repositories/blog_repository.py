# backend/pkasla/repositories/blog_repository.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.blog import Blog
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BlogRepository(BaseRepository[Blog]):
    def __init__(self, db: Session):
        super().__init__(db, Blog)

    def get_by_slug(self, slug: str) -> Optional[Blog]:
        return self.find_one_by(slug=slug)

    def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = self._build_query().filter(Blog.slug == slug)
        if exclude_id:
            query = query.filter(Blog.id != exclude_id)
        return query.first() is not None

    def list_for_author(self, author_id: str) -> List[Blog]:
        return self._execute_query(
            self._build_query().filter(Blog.author_id == author_id).order_by(Blog.created_at.desc())
        )
