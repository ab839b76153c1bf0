# backend/pkasla/routes/v1/admin.py
"""
Admin routes - API v1

All endpoints require the admin role.

Endpoints:
    GET    /dashboard                    → Site, job and application metrics
    GET    /analytics/users              → User counts by status and role
    GET    /users                        → Paginated users
    PATCH  /users/{user_id}/status
    PATCH  /users/{user_id}/role
    POST   /cache/clear
    GET    /jobs, /jobs/pending          → Moderation queues
    PATCH  /jobs/{job_id}/approve|reject
    DELETE /jobs/{job_id}
    GET    /jobs/export/json|xml         → Job feed download
    POST   /jobs/import/json|xml         → Job feed upload (pending drafts)
    POST   /jobs/scrape                  → Scrape a listing page
    GET    /settings, PUT|PATCH /settings, GET /settings/system-info
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from ...api.dependencies.auth import require_admin
from ...api.dependencies.forms import read_json_body
from ...api.dependencies.services import (
    get_admin_analytics_service,
    get_audit_service,
    get_job_feed_service,
    get_job_scraper_service,
    get_job_service,
    get_site_settings_service,
    get_user_service,
)
from ...core.exceptions import ValidationException
from ...models.audit_log import AuditAction
from ...models.user import User
from ...schemas.base import build_success_response, dump
from ...schemas.job import JobResponse, RejectJobRequest
from ...schemas.site_settings import SiteSettingsUpdate
from ...schemas.user import UpdateUserRoleRequest, UpdateUserStatusRequest, UserResponse
from ...services.admin_service import AdminAnalyticsService
from ...services.audit_service import AuditService
from ...services.job_feed_service import JobFeedService
from ...services.job_scraper_service import JobScraperService
from ...services.job_service import JobService
from ...services.site_settings_service import SiteSettingsService
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"], dependencies=[Depends(require_admin)])

JSON_EXPORT_FILENAME = "jobs-export.json"
XML_EXPORT_FILENAME = "jobs-export.xml"


def _attachment(filename: str) -> Dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


# Dashboard and analytics


@router.get("/dashboard")
def dashboard(analytics: AdminAnalyticsService = Depends(get_admin_analytics_service)):
    return build_success_response(analytics.get_dashboard())


@router.get("/analytics/users")
def user_analytics(user_service: UserService = Depends(get_user_service)):
    return build_success_response(user_service.get_user_analytics())


@router.post("/cache/clear")
def clear_cache(
    request: Request,
    admin: User = Depends(require_admin),
    analytics: AdminAnalyticsService = Depends(get_admin_analytics_service),
    audit: AuditService = Depends(get_audit_service),
):
    result = analytics.clear_cache()
    audit.log(
        AuditAction.DELETE.value,
        "cache",
        actor=admin,
        description="Cache cleared",
        metadata=result,
        request=request,
    )
    return build_success_response(result, "Cache cleared")


# Users


@router.get("/users")
def list_users(
    role: Optional[str] = None,
    user_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_service: UserService = Depends(get_user_service),
):
    result = user_service.list_users(
        role=role, status=user_status, search=search, page=page, limit=limit
    )
    result["items"] = dump(UserResponse, result["items"])
    return build_success_response(result)


@router.patch("/users/{user_id}/status")
def update_user_status(
    user_id: str,
    payload: UpdateUserStatusRequest,
    request: Request,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
    audit: AuditService = Depends(get_audit_service),
):
    previous = user_service.get_user(user_id).status
    user = user_service.update_status(user_id, payload.status, admin)
    audit.log_changes(
        AuditAction.UPDATE.value,
        "user",
        user.id,
        {"status": previous},
        {"status": user.status},
        actor=admin,
        description="User status changed",
        request=request,
    )
    return build_success_response(UserResponse.model_validate(user), "User status updated")


@router.patch("/users/{user_id}/role")
def update_user_role(
    user_id: str,
    payload: UpdateUserRoleRequest,
    request: Request,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
    audit: AuditService = Depends(get_audit_service),
):
    previous = user_service.get_user(user_id).role
    user = user_service.update_role(user_id, payload.role, admin)
    audit.log_changes(
        AuditAction.UPDATE.value,
        "user",
        user.id,
        {"role": previous},
        {"role": user.role},
        actor=admin,
        description="User role changed",
        request=request,
    )
    return build_success_response(UserResponse.model_validate(user), "User role updated")


# Job moderation


@router.get("/jobs")
def list_jobs(
    job_status: Optional[str] = Query(None, alias="status"),
    approval_status: Optional[str] = Query(None, alias="approvalStatus"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    jobs: JobService = Depends(get_job_service),
):
    result = jobs.list_all(
        status=job_status, approval_status=approval_status, page=page, limit=limit
    )
    result["data"] = dump(JobResponse, result["data"])
    return build_success_response(result)


@router.get("/jobs/pending")
def list_pending_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    jobs: JobService = Depends(get_job_service),
):
    result = jobs.list_pending(page=page, limit=limit)
    result["data"] = dump(JobResponse, result["data"])
    return build_success_response(result)


@router.get("/jobs/export/json")
def export_jobs_json(
    job_status: Optional[str] = Query(None, alias="status"),
    approval_status: Optional[str] = Query(None, alias="approvalStatus"),
    limit: Optional[int] = Query(None, ge=1),
    feed: JobFeedService = Depends(get_job_feed_service),
):
    items = feed.export_items(status=job_status, approval_status=approval_status, limit=limit)
    return JSONResponse(
        jsonable_encoder(build_success_response(items, f"Exported {len(items)} jobs")),
        headers=_attachment(JSON_EXPORT_FILENAME),
    )


@router.get("/jobs/export/xml")
def export_jobs_xml(
    job_status: Optional[str] = Query(None, alias="status"),
    approval_status: Optional[str] = Query(None, alias="approvalStatus"),
    limit: Optional[int] = Query(None, ge=1),
    feed: JobFeedService = Depends(get_job_feed_service),
):
    document = feed.export_xml(status=job_status, approval_status=approval_status, limit=limit)
    return Response(
        content=document,
        media_type="application/xml",
        headers=_attachment(XML_EXPORT_FILENAME),
    )


@router.post("/jobs/import/json", status_code=status.HTTP_201_CREATED)
async def import_jobs_json(
    request: Request,
    admin: User = Depends(require_admin),
    feed: JobFeedService = Depends(get_job_feed_service),
    audit: AuditService = Depends(get_audit_service),
):
    body = await read_json_body(request)
    if not isinstance(body, list):
        raise ValidationException("Request body must be an array of jobs")
    result = feed.import_items(body, admin.id)
    audit.log(
        AuditAction.IMPORT.value,
        "job",
        actor=admin,
        description="Jobs imported from JSON",
        metadata={"created": result["created"], "errors": len(result["errors"])},
        request=request,
    )
    return build_success_response(result, f"Imported {result['created']} jobs")


@router.post("/jobs/import/xml", status_code=status.HTTP_201_CREATED)
async def import_jobs_xml(
    request: Request,
    admin: User = Depends(require_admin),
    feed: JobFeedService = Depends(get_job_feed_service),
    audit: AuditService = Depends(get_audit_service),
):
    raw = await request.body()
    document: Any = raw.decode("utf-8", errors="replace")
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            document = json.loads(raw) if raw else None
        except ValueError:
            document = None
    if not isinstance(document, str) or not document.strip():
        raise ValidationException("Request body must be XML string")

    result = feed.import_xml(document, admin.id)
    audit.log(
        AuditAction.IMPORT.value,
        "job",
        actor=admin,
        description="Jobs imported from XML",
        metadata={"created": result["created"], "errors": len(result["errors"])},
        request=request,
    )
    return build_success_response(result, f"Imported {result['created']} jobs")


@router.post("/jobs/scrape", status_code=status.HTTP_201_CREATED)
def scrape_jobs(
    request: Request,
    config: Dict[str, Any] = Body(...),
    admin: User = Depends(require_admin),
    scraper: JobScraperService = Depends(get_job_scraper_service),
    audit: AuditService = Depends(get_audit_service),
):
    result = scraper.scrape(config, admin.id)
    audit.log(
        AuditAction.IMPORT.value,
        "job",
        actor=admin,
        description="Jobs scraped",
        metadata={"url": config.get("url"), "created": result["created"]},
        request=request,
    )
    return build_success_response(result, f"Scraped {result['found']} jobs")


@router.patch("/jobs/{job_id}/approve")
def approve_job(
    job_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    jobs: JobService = Depends(get_job_service),
    audit: AuditService = Depends(get_audit_service),
):
    job = jobs.approve_job(job_id, admin.id)
    audit.log(
        AuditAction.APPROVE.value, "job", actor=admin, resource_id=job.id, request=request
    )
    return build_success_response(JobResponse.model_validate(job), "Job approved")


@router.patch("/jobs/{job_id}/reject")
def reject_job(
    job_id: str,
    request: Request,
    payload: Optional[RejectJobRequest] = None,
    admin: User = Depends(require_admin),
    jobs: JobService = Depends(get_job_service),
    audit: AuditService = Depends(get_audit_service),
):
    reason = payload.reason if payload else None
    job = jobs.reject_job(job_id, admin.id, reason)
    audit.log(
        AuditAction.REJECT.value,
        "job",
        actor=admin,
        resource_id=job.id,
        metadata={"reason": reason},
        request=request,
    )
    return build_success_response(JobResponse.model_validate(job), "Job rejected")


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    jobs: JobService = Depends(get_job_service),
    audit: AuditService = Depends(get_audit_service),
):
    job = jobs.delete_job(job_id)
    audit.log(
        AuditAction.DELETE.value,
        "job",
        actor=admin,
        resource_id=job_id,
        metadata={"title": job.title},
        request=request,
    )
    return build_success_response(None, "Job deleted")


# Site settings


@router.get("/settings")
def get_settings(settings_service: SiteSettingsService = Depends(get_site_settings_service)):
    return build_success_response(settings_service.get_settings())


@router.get("/settings/system-info")
def get_system_info(settings_service: SiteSettingsService = Depends(get_site_settings_service)):
    return build_success_response(settings_service.get_system_info())


@router.api_route("/settings", methods=["PUT", "PATCH"])
def update_settings(
    payload: SiteSettingsUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    audit: AuditService = Depends(get_audit_service),
):
    before = settings_service.get_settings()
    after = settings_service.update_settings(payload.model_dump(exclude_unset=True))
    audit.log_changes(
        AuditAction.UPDATE.value,
        "settings",
        after.get("id") or "site",
        before,
        after,
        actor=admin,
        description="Site settings updated",
        request=request,
    )
    return build_success_response(after, "Settings updated")
