# backend/pkasla/middleware/maintenance.py
"""
Maintenance mode gate.

While ``maintenanceMode`` is on in site settings, API requests other than
auth, admin and health return 503 so admins can still sign in and turn it
off again.
"""

import logging
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.exceptions import RepositoryException, ServiceException
from ..database import SessionLocal
from ..services.cache_service import get_cache_service
from ..services.site_settings_service import SiteSettingsService

logger = logging.getLogger(__name__)

MAINTENANCE_MESSAGE = "Service is under maintenance. Please try again later."
ALLOWED_PREFIXES = ("/api/v1/auth", "/api/v1/admin", "/api/v1/health")


def is_maintenance_mode() -> bool:
    db = SessionLocal()
    try:
        return SiteSettingsService(db, get_cache_service()).is_maintenance_mode()
    except (SQLAlchemyError, RepositoryException, ServiceException) as e:
        logger.warning(f"Could not read maintenance flag: {e}")
        return False
    finally:
        db.close()


class MaintenanceModeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not path.startswith("/api/v1") or path.startswith(ALLOWED_PREFIXES):
            return await call_next(request)

        if await run_in_threadpool(is_maintenance_mode):
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"success": False, "message": MAINTENANCE_MESSAGE},
            )
        return await call_next(request)
