# backend/pkasla/routes/v1/upload.py
"""
File upload routes - API v1

Endpoints:
    GET    /info                    → Storage provider and limits (public)
    POST   /single                  → One file, optional folder
    POST   /avatar                  → Compressed avatar, saved on the profile
    POST   /multiple                → Up to 10 files
    GET    /my-uploads              → Current user's uploads
    GET    /signed-url/{key}        → Presigned GET URL (R2 only)
    GET    /{upload_id}
    DELETE /{upload_id}
    DELETE /key/{key}
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.forms import read_upload
from ...api.dependencies.services import get_upload_service
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.upload import UploadResponse
from ...schemas.user import UserResponse
from ...services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


@router.get("/info")
def storage_info(uploads: UploadService = Depends(get_upload_service)):
    return build_success_response(uploads.storage_info())


@router.post("/single", status_code=status.HTTP_201_CREATED)
async def upload_single(
    file: Optional[UploadFile] = File(None),
    folder: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    incoming = await read_upload(file) if file is not None else None
    record = uploads.upload_single(current_user, incoming, folder or "general")
    return build_success_response(UploadResponse.model_validate(record), "File uploaded")


@router.post("/avatar", status_code=status.HTTP_201_CREATED)
async def upload_avatar(
    file: Optional[UploadFile] = File(None),
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    source = file or avatar
    incoming = await read_upload(source) if source is not None else None
    record = uploads.upload_avatar(current_user, incoming)
    return build_success_response(
        {
            "upload": UploadResponse.model_validate(record),
            "user": UserResponse.model_validate(current_user),
        },
        "Avatar updated",
    )


@router.post("/multiple", status_code=status.HTTP_201_CREATED)
async def upload_multiple(
    files: Optional[List[UploadFile]] = File(None),
    folder: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    incoming = [await read_upload(item) for item in files or []]
    records = uploads.upload_multiple(current_user, incoming, folder or "general")
    return build_success_response(dump(UploadResponse, records), f"{len(records)} files uploaded")


@router.get("/my-uploads")
def list_my_uploads(
    folder: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    records = uploads.list_for_user(current_user, folder=folder, page=page, limit=limit)
    return build_success_response(dump(UploadResponse, records))


@router.get("/signed-url/{key:path}")
def get_signed_url(
    key: str,
    expires_in: int = Query(3600, ge=1, le=7 * 24 * 3600, alias="expiresIn"),
    _user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    return build_success_response(uploads.get_signed_url(key, expires_in))


@router.delete("/key/{key:path}")
def delete_upload_by_key(
    key: str,
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    uploads.delete_by_key(key, current_user)
    return build_success_response(None, "File deleted")


@router.get("/{upload_id}")
def get_upload(
    upload_id: str,
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    return build_success_response(
        UploadResponse.model_validate(uploads.get_upload(upload_id, current_user))
    )


@router.delete("/{upload_id}")
def delete_upload(
    upload_id: str,
    current_user: User = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
):
    uploads.delete_by_id(upload_id, current_user)
    return build_success_response(None, "File deleted")
