# backend/pkasla/services/blog_service.py
"""
Blog Service for the PKASLA platform

Blog posts are addressed by id or by a unique slug derived from the title.
Anonymous and non-admin readers only see published posts in listings.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, ForbiddenException, NotFoundException
from ..models.blog import Blog, BlogStatus
from ..models.user import User, UserRole
from ..repositories.factory import RepositoryFactory
from ..schemas.blog import BlogCreate
from ..utils.time_utils import utcnow
from .base import BaseService
from .cache_service import CacheService
from .finder_service import FinderService, json_array_contains

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 100


def generate_slug(title: str) -> str:
    """Lowercase, drop punctuation, join words with single dashes."""
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    slug = slug.strip("-")
    return slug[:SLUG_MAX_LENGTH]


class BlogFinder(FinderService[Blog]):
    DEFAULT_SORT = "publishedAt"

    def build_filter(self, query: Mapping[str, Any]) -> List[Any]:
        criteria: List[Any] = [Blog.status == (query.get("status") or BlogStatus.PUBLISHED.value)]
        if query.get("authorId"):
            criteria.append(Blog.author_id == query["authorId"])
        if query.get("tag"):
            criteria.append(json_array_contains(Blog.tags, query["tag"]))
        keyword = query.get("keyword")
        if keyword:
            criteria.append(
                or_(
                    Blog.title.icontains(keyword, autoescape=True),
                    Blog.content.icontains(keyword, autoescape=True),
                    Blog.excerpt.icontains(keyword, autoescape=True),
                )
            )
        return criteria


class BlogService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_blog_repository(db)
        self.finder = BlogFinder(db, Blog)

    def get_blog(self, blog_id: str) -> Blog:
        blog = self.repository.get_by_id(blog_id)
        if not blog:
            raise NotFoundException("Blog not found")
        return blog

    def get_by_slug(self, slug: str, *, count_view: bool = True) -> Blog:
        blog = self.repository.get_by_slug(slug)
        if not blog:
            raise NotFoundException("Blog not found")
        if count_view and blog.status == BlogStatus.PUBLISHED.value:
            with self.transaction():
                blog.views = (blog.views or 0) + 1
        return blog

    @staticmethod
    def _require_author(blog: Blog, user: User, message: str) -> None:
        if user.role == UserRole.ADMIN.value:
            return
        if blog.author_id != user.id:
            raise ForbiddenException(message)

    @BaseService.measure_operation("create_blog")
    def create_blog(self, data: BlogCreate, author: User) -> Blog:
        fields = data.model_dump()
        slug = fields.pop("slug", None) or generate_slug(data.title)
        fields["tags"] = fields.get("tags") or []
        if self.repository.slug_taken(slug):
            raise ConflictException("A blog with this slug already exists")

        published_at = utcnow() if data.status == BlogStatus.PUBLISHED.value else None
        with self.transaction():
            blog = self.repository.create(
                **fields,
                slug=slug,
                author_id=author.id,
                published_at=published_at,
            )
        self.logger.info(f"Blog {blog.id} created by {author.id}")
        return blog

    @BaseService.measure_operation("update_blog")
    def update_blog(self, blog_id: str, changes: Dict[str, Any], user: User) -> Blog:
        blog = self.get_blog(blog_id)
        self._require_author(blog, user, "You can only update your own blogs")
        changes = dict(changes)

        slug = changes.pop("slug", None)
        if slug and slug != blog.slug:
            if self.repository.slug_taken(slug, exclude_id=blog.id):
                raise ConflictException("A blog with this slug already exists")
            changes["slug"] = slug
        elif changes.get("title") and changes["title"] != blog.title:
            candidate = generate_slug(changes["title"])
            if candidate and not self.repository.slug_taken(candidate, exclude_id=blog.id):
                changes["slug"] = candidate

        with self.transaction():
            self._apply_status(blog, changes.pop("status", None))
            for field, value in changes.items():
                setattr(blog, field, value)
        return blog

    @BaseService.measure_operation("update_blog_status")
    def update_status(self, blog_id: str, status: str, user: User) -> Blog:
        blog = self.get_blog(blog_id)
        self._require_author(blog, user, "You can only update your own blogs")
        with self.transaction():
            self._apply_status(blog, status)
        return blog

    @staticmethod
    def _apply_status(blog: Blog, status: Optional[str]) -> None:
        if not status:
            return
        blog.status = status
        if status == BlogStatus.PUBLISHED.value and blog.published_at is None:
            blog.published_at = utcnow()

    @BaseService.measure_operation("delete_blog")
    def delete_blog(self, blog_id: str, user: User) -> None:
        blog = self.get_blog(blog_id)
        self._require_author(blog, user, "You can only delete your own blogs")
        with self.transaction():
            self.repository.delete(blog.id)

    def list_blogs(self, query: Mapping[str, Any], user: Optional[User] = None) -> Dict[str, Any]:
        query = dict(query)
        if user is None or user.role != UserRole.ADMIN.value:
            query["status"] = BlogStatus.PUBLISHED.value
        return self.finder.execute(query)

    def list_for_author(self, author_id: str) -> List[Blog]:
        return self.repository.list_for_author(author_id)
