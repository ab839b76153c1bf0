# backend/pkasla/routes/v1/applications.py
"""
Job application routes - API v1

Candidates apply to published, approved jobs and manage their own
applications; admins and recruiters review them.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_user, require_roles
from ...api.dependencies.services import get_application_service
from ...models.user import User, UserRole
from ...schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    ApplicationUpdate,
)
from ...schemas.base import build_success_response, dump
from ...services.application_service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["applications"])

require_reviewer = require_roles(UserRole.ADMIN.value, UserRole.RECRUITER.value)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_application(
    payload: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    application = applications.create_application(payload, current_user)
    return build_success_response(
        ApplicationResponse.model_validate(application), "Application submitted"
    )


@router.get("/my-applications")
def list_my_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    result = applications.list_for_candidate(current_user.id, page=page, limit=limit)
    result["data"] = dump(ApplicationResponse, result["data"])
    return build_success_response(result)


@router.get("/stats")
def application_stats(
    _user: User = Depends(require_reviewer),
    applications: ApplicationService = Depends(get_application_service),
):
    return build_success_response(applications.get_stats())


@router.get("/job/{job_id}")
def list_job_applications(
    job_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _user: User = Depends(require_reviewer),
    applications: ApplicationService = Depends(get_application_service),
):
    result = applications.list_for_job(job_id, page=page, limit=limit)
    result["data"] = dump(ApplicationResponse, result["data"])
    return build_success_response(result)


@router.get("/{application_id}")
def get_application(
    application_id: str,
    _user: User = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    application = applications.get_application(application_id)
    return build_success_response(ApplicationResponse.model_validate(application))


@router.patch("/{application_id}/status")
def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    current_user: User = Depends(require_reviewer),
    applications: ApplicationService = Depends(get_application_service),
):
    application = applications.update_status(application_id, payload.status, current_user)
    return build_success_response(
        ApplicationResponse.model_validate(application), "Application status updated"
    )


@router.patch("/{application_id}")
def update_application(
    application_id: str,
    payload: ApplicationUpdate,
    current_user: User = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    application = applications.update_application(
        application_id, payload.model_dump(exclude_unset=True), current_user
    )
    return build_success_response(
        ApplicationResponse.model_validate(application), "Application updated"
    )


@router.delete("/{application_id}")
def delete_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    applications.delete_application(application_id, current_user)
    return build_success_response(None, "Application deleted")
