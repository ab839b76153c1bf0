# backend/pkasla/repositories/application_repository.py
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.application import Application
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationRepository(BaseRepository[Application]):
    def __init__(self, db: Session):
        super().__init__(db, Application)

    def get_for_candidate(self, job_id: str, candidate_id: str) -> Optional[Application]:
        return self.find_one_by(job_id=job_id, candidate_id=candidate_id)

    def list_applications(
        self,
        *,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Application], int]:
        query = self._build_query()
        if job_id:
            query = query.filter(Application.job_id == job_id)
        if candidate_id:
            query = query.filter(Application.candidate_id == candidate_id)
        if status:
            query = query.filter(Application.status == status)
        return self._paginate(query.order_by(Application.created_at.desc()), skip, limit)

    def count_by_status(self) -> Dict[str, int]:
        return self.count_grouped(Application.status)
