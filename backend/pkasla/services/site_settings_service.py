# backend/pkasla/services/site_settings_service.py
"""
Site settings service.

Settings live in a single database row. The maintenance flag is read on
every request by middleware, so it is cached and invalidated on update.
"""

import logging
import platform
import sys
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import settings as app_settings
from ..core.exceptions import ValidationException
from ..models.site_settings import SiteSettings
from ..repositories.factory import RepositoryFactory
from ..schemas.site_settings import MASK, SECRET_FIELDS, SiteSettingsResponse
from ..utils.time_utils import to_iso, utcnow
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)

SETTINGS_CACHE_KEY = "settings:site"


class SiteSettingsService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_site_settings_repository(db)

    def _load(self) -> SiteSettings:
        row = self.repository.get_current()
        if row is not None:
            return row
        with self.transaction():
            row = self.repository.create()
        self.logger.info("Created default site settings")
        return row

    @BaseService.measure_operation("get_site_settings")
    def get_settings(self) -> Dict[str, Any]:
        """Settings with secrets masked, as a camelCase-ready dict."""
        if self.cache:
            cached = self.cache.get(SETTINGS_CACHE_KEY)
            if cached is not None:
                return cached
        payload = self._serialize(self._load())
        if self.cache:
            self.cache.set(SETTINGS_CACHE_KEY, payload, tier="hot")
        return payload

    def get_raw(self) -> SiteSettings:
        """Unmasked settings row, for in-process consumers only."""
        return self._load()

    def is_maintenance_mode(self) -> bool:
        return bool(self.get_settings().get("maintenanceMode"))

    def is_registration_allowed(self) -> bool:
        return bool(self.get_settings().get("allowRegistration", True))

    @BaseService.measure_operation("update_site_settings")
    def update_settings(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update.

        ``changes`` is keyed by model attribute name. Masked secrets are
        ignored so a client can round-trip what it read.
        """
        row = self._load()
        updates = {
            key: value
            for key, value in changes.items()
            if not (key in SECRET_FIELDS and value == MASK)
        }
        self._validate(row, updates)

        with self.transaction():
            for key, value in updates.items():
                if hasattr(row, key):
                    setattr(row, key, value)

        self.invalidate_cache(SETTINGS_CACHE_KEY)
        self.logger.info(f"Site settings updated: {sorted(updates.keys())}")
        return self._serialize(row)

    def _validate(self, row: SiteSettings, updates: Dict[str, Any]) -> None:
        def effective(name: str) -> Any:
            return updates[name] if name in updates else getattr(row, name)

        if effective("storage_provider") == "r2" and (
            not effective("r2_account_id") or not effective("r2_bucket_name")
        ):
            raise ValidationException("R2 Account ID and Bucket Name are required when using R2 storage")
        if effective("email_enabled") and (not effective("email_from") or not effective("email_host")):
            raise ValidationException("Email From and Host are required when email is enabled")

    def _serialize(self, row: SiteSettings) -> Dict[str, Any]:
        data = SiteSettingsResponse.model_validate(row).model_dump(by_alias=True, mode="json")
        for field in SECRET_FIELDS:
            alias = SiteSettingsResponse.model_fields[field].alias or field
            data[alias] = MASK if getattr(row, field) else ""
        return data

    @BaseService.measure_operation("get_system_info")
    def get_system_info(self) -> Dict[str, Any]:
        return {
            "environment": app_settings.environment,
            "pythonVersion": sys.version.split()[0],
            "platform": platform.platform(),
            "storageProvider": app_settings.storage_provider,
            "redisEnabled": app_settings.redis_enabled,
            "cacheBackend": "redis" if self.cache and self.cache.redis is not None else "memory",
            "stripeConfigured": bool(app_settings.stripe_secret_key.get_secret_value()),
            "bakongConfigured": bool(app_settings.bakong_access_token.get_secret_value()),
            "serverTime": to_iso(utcnow()),
        }
