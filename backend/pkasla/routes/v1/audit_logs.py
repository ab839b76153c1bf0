# backend/pkasla/routes/v1/audit_logs.py
"""Audit log routes - API v1, admin only."""

from datetime import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import get_audit_service
from ...schemas.audit import AuditLogResponse
from ...schemas.base import build_success_response, dump
from ...services.audit_service import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["audit-logs"], dependencies=[Depends(require_admin)])


def _page(result):
    result["items"] = dump(AuditLogResponse, result["items"])
    return build_success_response(result)


@router.get("")
def list_audit_logs(
    user_id: Optional[str] = Query(None, alias="userId"),
    action: Optional[str] = None,
    resource: Optional[str] = None,
    log_status: Optional[str] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    audit: AuditService = Depends(get_audit_service),
):
    return _page(
        audit.list_logs(
            page=page,
            limit=limit,
            user_id=user_id,
            action=action,
            resource=resource,
            status=log_status,
            start_date=start_date,
            end_date=end_date,
            search=search,
        )
    )


@router.get("/user/{user_id}")
def list_user_audit_logs(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    audit: AuditService = Depends(get_audit_service),
):
    return _page(audit.list_logs(page=page, limit=limit, user_id=user_id))


@router.get("/resource/{resource}/{resource_id}")
def list_resource_audit_logs(
    resource: str,
    resource_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    audit: AuditService = Depends(get_audit_service),
):
    return _page(
        audit.list_logs(page=page, limit=limit, resource=resource, resource_id=resource_id)
    )


@router.get("/{log_id}")
def get_audit_log(log_id: str, audit: AuditService = Depends(get_audit_service)):
    return build_success_response(AuditLogResponse.model_validate(audit.get_log(log_id)))
