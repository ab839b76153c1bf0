# backend/pkasla/repositories/site_settings_repository.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.site_settings import SiteSettings
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SiteSettingsRepository(BaseRepository[SiteSettings]):
    def __init__(self, db: Session):
        super().__init__(db, SiteSettings)

    def get_current(self) -> Optional[SiteSettings]:
        """The singleton settings row (oldest wins if duplicates ever exist)."""
        return self._build_query().order_by(SiteSettings.created_at.asc()).first()
