# backend/pkasla/services/admin_service.py
"""
Admin analytics for the PKASLA platform.

Read-only aggregates for the admin dashboard. Everything here is a count
query; no rows are modified.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.application import ApplicationStatus
from ..models.blog import BlogStatus
from ..models.job import ApprovalStatus, EmploymentType, JobStatus
from ..models.user import UserRole, UserStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)


def _rate(numerator: int, denominator: int) -> float:
    return round(numerator / denominator, 2) if denominator else 0


class AdminAnalyticsService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.users = RepositoryFactory.create_user_repository(db)
        self.jobs = RepositoryFactory.create_job_repository(db)
        self.applications = RepositoryFactory.create_application_repository(db)
        self.events = RepositoryFactory.create_event_repository(db)
        self.blogs = RepositoryFactory.create_blog_repository(db)

    def _published_jobs(self) -> int:
        return self.jobs.count(
            status=JobStatus.PUBLISHED.value, approval_status=ApprovalStatus.APPROVED.value
        )

    @BaseService.measure_operation("site_metrics")
    def get_site_metrics(self) -> Dict[str, Any]:
        published_jobs = self._published_jobs()
        total_applications = self.applications.count()
        active_users = self.users.count(status=UserStatus.ACTIVE.value)
        return {
            "totalUsers": self.users.count(),
            "activeUsers": active_users,
            "totalJobSeekers": self.users.count(role=UserRole.JOB_SEEKER.value),
            "totalRecruiters": self.users.count(role=UserRole.RECRUITER.value),
            "totalJobs": self.jobs.count(),
            "publishedJobs": published_jobs,
            "pendingJobApprovals": self.jobs.count(approval_status=ApprovalStatus.PENDING.value),
            "totalApplications": total_applications,
            "applicationRate": _rate(total_applications, published_jobs),
            "totalEvents": self.events.count(),
            "totalBlogs": self.blogs.count(),
            "publishedBlogs": self.blogs.count(status=BlogStatus.PUBLISHED.value),
        }

    @BaseService.measure_operation("job_metrics")
    def get_job_metrics(self) -> Dict[str, Any]:
        by_status = self.jobs.count_by_status()
        by_approval = self.jobs.count_by_approval()
        by_type = self.jobs.count_by_employment_type()
        return {
            "total": sum(by_status.values()),
            "published": by_status.get(JobStatus.PUBLISHED.value, 0),
            "draft": by_status.get(JobStatus.DRAFT.value, 0),
            "archived": by_status.get(JobStatus.ARCHIVED.value, 0),
            "pendingApproval": by_approval.get(ApprovalStatus.PENDING.value, 0),
            "approved": by_approval.get(ApprovalStatus.APPROVED.value, 0),
            "rejected": by_approval.get(ApprovalStatus.REJECTED.value, 0),
            "byEmploymentType": {kind.value: by_type.get(kind.value, 0) for kind in EmploymentType},
            "byLocation": [
                {"location": location, "count": count}
                for location, count in self.jobs.top_locations(10)
            ],
        }

    @BaseService.measure_operation("application_metrics")
    def get_application_metrics(self) -> Dict[str, Any]:
        by_status = self.applications.count_by_status()
        total = sum(by_status.values())
        return {
            "total": total,
            "byStatus": {status.value: by_status.get(status.value, 0) for status in ApplicationStatus},
            "averageApplicationsPerJob": _rate(total, self._published_jobs()),
        }

    def get_dashboard(self) -> Dict[str, Any]:
        return {
            "site": self.get_site_metrics(),
            "jobs": self.get_job_metrics(),
            "applications": self.get_application_metrics(),
        }

    def clear_cache(self) -> Dict[str, int]:
        cleared = self.cache.clear_all() if self.cache else 0
        self.logger.info(f"Admin cache clear removed {cleared} keys")
        return {"cleared": cleared}
