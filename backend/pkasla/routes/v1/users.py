# backend/pkasla/routes/v1/users.py
"""
User profile routes - API v1

    GET   /me   → Current profile
    PATCH /me   → Update name, phone or avatar
    GET   /     → All users (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import get_current_user, require_admin
from ...api.dependencies.services import get_user_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.user import UpdateProfileRequest, UserResponse
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/me")
def get_my_profile(current_user: User = Depends(get_current_user)):
    return build_success_response(UserResponse.model_validate(current_user))


@router.patch("/me")
def update_my_profile(
    payload: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    user = user_service.update_profile(current_user, payload.model_dump(exclude_unset=True))
    return build_success_response(UserResponse.model_validate(user), "Profile updated")


@router.get("")
def list_users(
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    result = user_service.list_users(
        role=role, status=status, search=search, page=page, limit=limit
    )
    result["items"] = dump(UserResponse, result["items"])
    return build_success_response(result)
