# backend/pkasla/routes/v1/health.py
"""Health check route - API v1"""

import logging

from fastapi import APIRouter

from ...core.config import settings
from ...utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def health_payload() -> dict:
    return {"status": "ok", "timestamp": to_iso(utcnow()), "environment": settings.environment}


@router.get("/health")
def health_check():
    return health_payload()
