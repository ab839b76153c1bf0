# backend/pkasla/services/application_service.py
"""
Application Service for the PKASLA platform

Candidates apply to published, approved jobs once per job. Recruiters and
admins review applications through ``update_status``.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.application import Application, ApplicationStatus
from ..models.job import ApprovalStatus, JobStatus
from ..models.user import User, UserRole
from ..repositories.factory import RepositoryFactory
from ..schemas.application import ApplicationCreate
from ..utils.time_utils import utcnow
from .base import BaseService
from .cache_service import CacheService
from .finder_service import data_with_meta

logger = logging.getLogger(__name__)


class ApplicationService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_application_repository(db)
        self.job_repository = RepositoryFactory.create_job_repository(db)

    def get_application(self, application_id: str) -> Application:
        application = self.repository.get_by_id(application_id)
        if not application:
            raise NotFoundException("Application not found")
        return application

    @staticmethod
    def _require_owner(application: Application, user: User, message: str) -> None:
        if user.role == UserRole.ADMIN.value:
            return
        if application.candidate_id != user.id:
            raise ForbiddenException(message)

    @BaseService.measure_operation("create_application")
    def create_application(self, data: ApplicationCreate, candidate: User) -> Application:
        job = self.job_repository.get_by_id(data.job_id)
        if not job:
            raise NotFoundException("Job not found")
        if (
            job.status != JobStatus.PUBLISHED.value
            or job.approval_status != ApprovalStatus.APPROVED.value
        ):
            raise ValidationException("Job is not available for applications")
        if self.repository.get_for_candidate(job.id, candidate.id):
            raise ConflictException("You have already applied for this job")

        with self.transaction():
            application = self.repository.create(
                candidate_id=candidate.id,
                status=ApplicationStatus.PENDING.value,
                **data.model_dump(),
            )
        self.logger.info(f"Application {application.id} submitted for job {job.id}")
        return application

    @BaseService.measure_operation("update_application")
    def update_application(
        self, application_id: str, changes: Dict[str, Any], user: User
    ) -> Application:
        application = self.get_application(application_id)
        self._require_owner(application, user, "You can only update your own applications")
        with self.transaction():
            for field, value in changes.items():
                setattr(application, field, value)
        return application

    @BaseService.measure_operation("delete_application")
    def delete_application(self, application_id: str, user: User) -> None:
        application = self.get_application(application_id)
        self._require_owner(application, user, "You can only delete your own applications")
        with self.transaction():
            self.repository.delete(application.id)

    @BaseService.measure_operation("update_application_status")
    def update_status(self, application_id: str, status: str, reviewer: User) -> Application:
        application = self.get_application(application_id)
        with self.transaction():
            application.status = status
            application.reviewed_by = reviewer.id
            application.reviewed_at = utcnow()
        self.logger.info(f"Application {application.id} set to {status} by {reviewer.id}")
        return application

    def list_for_job(self, job_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        items, total = self.repository.list_applications(
            job_id=job_id, skip=(page - 1) * limit, limit=limit
        )
        return data_with_meta(items, total, page, limit)

    def list_for_candidate(self, candidate_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        items, total = self.repository.list_applications(
            candidate_id=candidate_id, skip=(page - 1) * limit, limit=limit
        )
        return data_with_meta(items, total, page, limit)

    def get_stats(self) -> Dict[str, int]:
        counts = self.repository.count_by_status()
        stats = {status.value: counts.get(status.value, 0) for status in ApplicationStatus}
        stats["total"] = sum(counts.values())
        return stats
