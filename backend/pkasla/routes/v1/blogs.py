# backend/pkasla/routes/v1/blogs.py
"""
Blog routes - API v1

Endpoints:
    GET    /                 → Published posts (admins see every status)
    POST   /                 → Create a post
    GET    /slug/{slug}      → Post by slug; published views are counted
    GET    /my-blogs         → Posts written by the current user
    GET    /{blog_id}
    PATCH  /{blog_id}
    PATCH  /{blog_id}/status
    DELETE /{blog_id}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from ...api.dependencies.auth import get_current_user, get_current_user_optional
from ...api.dependencies.services import get_blog_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.blog import BlogCreate, BlogResponse, BlogStatusUpdate, BlogUpdate
from ...services.blog_service import BlogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blogs"])


@router.get("")
def list_blogs(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    blogs: BlogService = Depends(get_blog_service),
):
    result = blogs.list_blogs(dict(request.query_params), current_user)
    result["data"] = dump(BlogResponse, result["data"])
    return build_success_response(result)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_blog(
    payload: BlogCreate,
    current_user: User = Depends(get_current_user),
    blogs: BlogService = Depends(get_blog_service),
):
    blog = blogs.create_blog(payload, current_user)
    return build_success_response(BlogResponse.model_validate(blog), "Blog created")


@router.get("/slug/{slug}")
def get_blog_by_slug(slug: str, blogs: BlogService = Depends(get_blog_service)):
    return build_success_response(BlogResponse.model_validate(blogs.get_by_slug(slug)))


@router.get("/my-blogs")
def list_my_blogs(
    current_user: User = Depends(get_current_user),
    blogs: BlogService = Depends(get_blog_service),
):
    return build_success_response(dump(BlogResponse, blogs.list_for_author(current_user.id)))


@router.get("/{blog_id}")
def get_blog(blog_id: str, blogs: BlogService = Depends(get_blog_service)):
    return build_success_response(BlogResponse.model_validate(blogs.get_blog(blog_id)))


@router.patch("/{blog_id}/status")
def update_blog_status(
    blog_id: str,
    payload: BlogStatusUpdate,
    current_user: User = Depends(get_current_user),
    blogs: BlogService = Depends(get_blog_service),
):
    blog = blogs.update_status(blog_id, payload.status, current_user)
    return build_success_response(BlogResponse.model_validate(blog), "Blog status updated")


@router.patch("/{blog_id}")
def update_blog(
    blog_id: str,
    payload: BlogUpdate,
    current_user: User = Depends(get_current_user),
    blogs: BlogService = Depends(get_blog_service),
):
    blog = blogs.update_blog(blog_id, payload.model_dump(exclude_unset=True), current_user)
    return build_success_response(BlogResponse.model_validate(blog), "Blog updated")


@router.delete("/{blog_id}")
def delete_blog(
    blog_id: str,
    current_user: User = Depends(get_current_user),
    blogs: BlogService = Depends(get_blog_service),
):
    blogs.delete_blog(blog_id, current_user)
    return build_success_response(None, "Blog deleted")
