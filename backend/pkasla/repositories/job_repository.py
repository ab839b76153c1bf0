# backend/pkasla/repositories/job_repository.py
"""
Job board repositories: jobs and saved jobs.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.job import Job, SavedJob
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class JobRepository(BaseRepository[Job]):
    def __init__(self, db: Session):
        super().__init__(db, Job)

    def list_jobs(
        self,
        *,
        status: Optional[str] = None,
        approval_status: Optional[str] = None,
        posted_by: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Job], int]:
        query = self._build_query()
        if status:
            query = query.filter(Job.status == status)
        if approval_status:
            query = query.filter(Job.approval_status == approval_status)
        if posted_by:
            query = query.filter(Job.posted_by == posted_by)
        return self._paginate(query.order_by(Job.created_at.desc()), skip, limit)

    def list_for_feed(self, *, status: str, approval_status: str, limit: int) -> List[Job]:
        return self._execute_query(
            self._build_query()
            .filter(Job.status == status, Job.approval_status == approval_status)
            .order_by(Job.created_at.desc())
            .limit(limit)
        )

    def find_by_title_company(self, title: str, company: str) -> Optional[Job]:
        return (
            self._build_query()
            .filter(
                func.lower(Job.title) == title.strip().lower(),
                func.lower(Job.company) == company.strip().lower(),
            )
            .first()
        )

    def count_by_status(self) -> Dict[str, int]:
        return self.count_grouped(Job.status)

    def count_by_approval(self) -> Dict[str, int]:
        return self.count_grouped(Job.approval_status)

    def count_by_employment_type(self) -> Dict[str, int]:
        return self.count_grouped(Job.employment_type)

    def top_locations(self, limit: int = 10) -> List[Tuple[str, int]]:
        count_col = func.count(Job.id)
        return [
            (location, count)
            for location, count in self._execute_query(
                self.db.query(Job.location, count_col)
                .group_by(Job.location)
                .order_by(count_col.desc(), Job.location.asc())
                .limit(limit)
            )
        ]


class SavedJobRepository(BaseRepository[SavedJob]):
    def __init__(self, db: Session):
        super().__init__(db, SavedJob)

    def get_for_user(self, user_id: str, job_id: str) -> Optional[SavedJob]:
        return self.find_one_by(user_id=user_id, job_id=job_id)

    def list_for_user(self, user_id: str, skip: int, limit: int) -> Tuple[List[SavedJob], int]:
        query = self._build_query().filter(SavedJob.user_id == user_id).order_by(SavedJob.created_at.desc())
        return self._paginate(query, skip, limit)
