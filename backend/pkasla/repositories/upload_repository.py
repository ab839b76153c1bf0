# backend/pkasla/repositories/upload_repository.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.upload import Upload
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UploadRepository(BaseRepository[Upload]):
    def __init__(self, db: Session):
        super().__init__(db, Upload)

    def get_by_key(self, key: str) -> Optional[Upload]:
        return self.find_one_by(key=key)

    def list_for_user(
        self, user_id: str, *, folder: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Upload], int]:
        query = self._build_query().filter(Upload.user_id == user_id)
        if folder:
            query = query.filter(Upload.folder == folder)
        return self._paginate(query.order_by(Upload.created_at.desc()), skip, limit)
