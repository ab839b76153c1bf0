# backend/pkasla/routes/v1/jobs.py
"""
Job board routes - API v1

Endpoints:
    GET    /                  → Published, approved jobs (cached finder)
    POST   /                  → Post a job; approval starts pending (admin, recruiter)
    GET    /saved-jobs        → Current user's saved jobs
    POST   /{job_id}/save
    DELETE /{job_id}/save
    GET    /{job_id}/saved    → {isSaved}
    GET    /{job_id}
    PATCH  /{job_id}          → (admin, recruiter)
    DELETE /{job_id}          → (admin, recruiter)
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from ...api.dependencies.auth import get_current_user, require_roles
from ...api.dependencies.services import get_job_service
from ...models.user import User, UserRole
from ...schemas.base import build_success_response, dump
from ...schemas.job import JobCreate, JobResponse, JobUpdate
from ...services.job_service import JobService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])

require_job_manager = require_roles(UserRole.ADMIN.value, UserRole.RECRUITER.value)


@router.get("")
def list_jobs(request: Request, jobs: JobService = Depends(get_job_service)):
    return build_success_response(jobs.list_jobs(dict(request.query_params)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    current_user: User = Depends(require_job_manager),
    jobs: JobService = Depends(get_job_service),
):
    job = jobs.create_job(payload, current_user.id)
    return build_success_response(JobResponse.model_validate(job), "Job created")


@router.get("/saved-jobs")
def list_saved_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    result = jobs.get_saved_jobs(current_user.id, page=page, limit=limit)
    result["data"] = dump(JobResponse, result["data"])
    return build_success_response(result)


@router.post("/{job_id}/save", status_code=status.HTTP_201_CREATED)
def save_job(
    job_id: str,
    current_user: User = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    jobs.save_job(current_user.id, job_id)
    return build_success_response({"jobId": job_id, "isSaved": True}, "Job saved")


@router.delete("/{job_id}/save")
def unsave_job(
    job_id: str,
    current_user: User = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    jobs.unsave_job(current_user.id, job_id)
    return build_success_response({"jobId": job_id, "isSaved": False}, "Job removed from saved")


@router.get("/{job_id}/saved")
def is_job_saved(
    job_id: str,
    current_user: User = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    return build_success_response({"isSaved": jobs.is_job_saved(current_user.id, job_id)})


@router.get("/{job_id}")
def get_job(job_id: str, jobs: JobService = Depends(get_job_service)):
    return build_success_response(JobResponse.model_validate(jobs.get_job(job_id)))


@router.patch("/{job_id}")
def update_job(
    job_id: str,
    payload: JobUpdate,
    _user: User = Depends(require_job_manager),
    jobs: JobService = Depends(get_job_service),
):
    job = jobs.update_job(job_id, payload.model_dump(exclude_unset=True))
    return build_success_response(JobResponse.model_validate(job), "Job updated")


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    _user: User = Depends(require_job_manager),
    jobs: JobService = Depends(get_job_service),
):
    jobs.delete_job(job_id)
    return build_success_response(None, "Job deleted")
