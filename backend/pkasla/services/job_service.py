# backend/pkasla/services/job_service.py
"""
Job Service for the PKASLA platform

Job postings, the public cached job finder and saved jobs. New postings
always wait for admin approval; the public listing only shows approved
jobs.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..models.job import ApprovalStatus, Job, JobStatus
from ..repositories.factory import RepositoryFactory
from ..schemas.job import JobCreate, JobResponse, salary_columns
from ..utils.time_utils import utcnow
from .base import BaseService
from .cache_service import CacheKeyBuilder, CacheService
from .finder_service import FinderService, data_with_meta, json_array_contains

logger = logging.getLogger(__name__)

JOB_CACHE_PATTERN = "job:*"
JOB_LIST_TTL_SECONDS = 300
MAX_PAGE_SIZE = 100

SORT_BY_MAP = {
    "newest_first": ("created_at", "desc"),
    "oldest_first": ("created_at", "asc"),
    "salary_high_to_low": ("salary_max", "desc"),
    "salary_low_to_high": ("salary_max", "asc"),
    "company_a_to_z": ("company", "asc"),
    "company_z_to_a": ("company", "desc"),
    "title_a_to_z": ("title", "asc"),
    "title_z_to_a": ("title", "desc"),
}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value:
        return value.lower() == "true"
    return None


def _split_tags(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        raw = value
    else:
        raw = str(value).split(",")
    return [tag.strip() for tag in raw if tag and str(tag).strip()]


def job_to_dict(job: Job) -> Dict[str, Any]:
    return JobResponse.model_validate(job).model_dump(by_alias=True, mode="json")


class JobFinder(FinderService[Job]):
    """Public job listing, cached per query for five minutes."""

    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, Job)
        self.cache = cache

    def build_filter(self, query: Mapping[str, Any]) -> List[Any]:
        criteria: List[Any] = [
            Job.status == (query.get("status") or JobStatus.PUBLISHED.value),
            Job.approval_status == ApprovalStatus.APPROVED.value,
        ]
        keyword = query.get("keyword")
        if keyword:
            criteria.append(
                or_(
                    Job.title.icontains(keyword, autoescape=True),
                    Job.company.icontains(keyword, autoescape=True),
                    Job.description.icontains(keyword, autoescape=True),
                )
            )
        if query.get("location"):
            criteria.append(Job.location.icontains(query["location"], autoescape=True))
        if query.get("tags"):
            for tag in _split_tags(query["tags"]):
                criteria.append(json_array_contains(Job.tags, tag))
        is_remote = _as_bool(query.get("isRemote"))
        if is_remote is not None:
            criteria.append(Job.is_remote == is_remote)
        if query.get("employmentType"):
            criteria.append(Job.employment_type == query["employmentType"])
        return criteria

    def serialize(self, item: Job) -> Dict[str, Any]:
        return job_to_dict(item)

    def cache_key(self, query: Mapping[str, Any]) -> str:
        normalized = {key: value for key, value in query.items() if value not in (None, "")}
        return CacheKeyBuilder.build("job", "list", CacheKeyBuilder.hash_complex_key(normalized))

    def execute(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        key = self.cache_key(query)
        if self.cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        parts = self.split_query(query)
        limit = min(parts["limit"], MAX_PAGE_SIZE)
        sort_by = parts["rest"].pop("sortBy", None)
        if sort_by:
            column_name, order = SORT_BY_MAP.get(sort_by, ("created_at", "desc"))
            column = getattr(Job, column_name)
            order_by = [column.desc() if order == "desc" else column.asc()]
        else:
            order_by = self.sort_clause(parts["sort"], parts["order"])

        result = self.run(
            criteria=self.build_filter(parts["rest"]),
            order_by=order_by,
            page=parts["page"],
            limit=limit,
        )
        if self.cache:
            self.cache.set(key, result, ttl=JOB_LIST_TTL_SECONDS)
        return result


class JobService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_job_repository(db)
        self.saved_repository = RepositoryFactory.create_saved_job_repository(db)
        self.finder = JobFinder(db, cache)

    def get_job(self, job_id: str) -> Job:
        job = self.repository.get_by_id(job_id)
        if not job:
            raise NotFoundException("Job not found")
        return job

    def invalidate_job_cache(self) -> None:
        self.invalidate_pattern(JOB_CACHE_PATTERN)

    @BaseService.measure_operation("create_job")
    def create_job(
        self,
        data: JobCreate,
        posted_by: str,
        *,
        status: Optional[str] = None,
    ) -> Job:
        """Create a posting; approval always starts as pending."""
        fields = data.model_dump(exclude={"salary_range"})
        fields.update(salary_columns(data.salary_range.model_dump() if data.salary_range else None))
        if status:
            fields["status"] = status
        with self.transaction():
            job = self.repository.create(
                **fields,
                approval_status=ApprovalStatus.PENDING.value,
                posted_by=posted_by,
            )
        self.invalidate_job_cache()
        self.logger.info(f"Job {job.id} created by {posted_by}")
        return job

    @BaseService.measure_operation("update_job")
    def update_job(self, job_id: str, changes: Dict[str, Any]) -> Job:
        job = self.get_job(job_id)
        if "salary_range" in changes:
            changes = dict(changes)
            changes.update(salary_columns(changes.pop("salary_range")))
        with self.transaction():
            for field, value in changes.items():
                setattr(job, field, value)
        self.invalidate_job_cache()
        return job

    @BaseService.measure_operation("delete_job")
    def delete_job(self, job_id: str) -> Job:
        job = self.get_job(job_id)
        with self.transaction():
            self.repository.delete(job.id)
        self.invalidate_job_cache()
        return job

    def list_jobs(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self.finder.execute(query)

    @BaseService.measure_operation("save_job")
    def save_job(self, user_id: str, job_id: str):
        self.get_job(job_id)
        if self.saved_repository.get_for_user(user_id, job_id):
            raise ConflictException("Job already saved")
        with self.transaction():
            saved = self.saved_repository.create(user_id=user_id, job_id=job_id)
        return saved

    def unsave_job(self, user_id: str, job_id: str):
        saved = self.saved_repository.get_for_user(user_id, job_id)
        if not saved:
            raise NotFoundException("Saved job not found")
        with self.transaction():
            self.saved_repository.delete(saved.id)
        return saved

    def is_job_saved(self, user_id: str, job_id: str) -> bool:
        return self.saved_repository.get_for_user(user_id, job_id) is not None

    def get_saved_jobs(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        """Saved jobs newest-saved first, as ``{data, meta}``."""
        saved, total = self.saved_repository.list_for_user(user_id, (page - 1) * limit, limit)
        jobs = [entry.job for entry in saved if entry.job is not None]
        return data_with_meta(jobs, total, page, limit)

    # Moderation

    @BaseService.measure_operation("approve_job")
    def approve_job(self, job_id: str, admin_id: str) -> Job:
        """Approve a posting; drafts are published on approval."""
        job = self.get_job(job_id)
        with self.transaction():
            job.approval_status = ApprovalStatus.APPROVED.value
            job.approved_by = admin_id
            job.approved_at = utcnow()
            job.rejection_reason = None
            if job.status == JobStatus.DRAFT.value:
                job.status = JobStatus.PUBLISHED.value
        self.invalidate_job_cache()
        self.logger.info(f"Job {job.id} approved by {admin_id}")
        return job

    @BaseService.measure_operation("reject_job")
    def reject_job(self, job_id: str, admin_id: str, reason: Optional[str] = None) -> Job:
        job = self.get_job(job_id)
        with self.transaction():
            job.approval_status = ApprovalStatus.REJECTED.value
            job.approved_by = admin_id
            job.approved_at = utcnow()
            job.rejection_reason = reason
        self.invalidate_job_cache()
        self.logger.info(f"Job {job.id} rejected by {admin_id}")
        return job

    def list_all(
        self,
        *,
        status: Optional[str] = None,
        approval_status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        items, total = self.repository.list_jobs(
            status=status, approval_status=approval_status, skip=(page - 1) * limit, limit=limit
        )
        return data_with_meta(items, total, page, limit)

    def list_pending(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.list_all(approval_status=ApprovalStatus.PENDING.value, page=page, limit=limit)
