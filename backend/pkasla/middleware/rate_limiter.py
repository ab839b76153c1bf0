# backend/pkasla/middleware/rate_limiter.py
"""
Rate limiting middleware for the PKASLA API.

Sliding-window limits kept in Redis sorted sets, one key per client IP and
window. Auth endpoints that accept credentials get a stricter window than
the rest of ``/api/v1``. Without Redis the limiter lets everything through.
"""

import hashlib
import logging
import time
from typing import Callable, Optional, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..services.cache_service import CacheService, get_cache_service

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
EXEMPT_PATHS = {"/api/v1/health"}
AUTH_LIMITED_PATHS = {"/api/v1/auth/login", "/api/v1/auth/register", "/api/v1/auth/refresh"}
RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class RateLimiter:
    """Core sliding-window check backed by the cache service's Redis client."""

    def __init__(self, cache_service: Optional[CacheService] = None):
        self.cache = cache_service or get_cache_service()
        self.enabled = settings.rate_limit_enabled

    def _get_cache_key(self, identifier: str, window_name: str) -> str:
        if len(identifier) > 32:
            identifier = hashlib.md5(identifier.encode()).hexdigest()[:16]
        return f"rate_limit:{window_name}:{identifier}"

    def check_rate_limit(
        self, identifier: str, limit: int, window_seconds: int, window_name: Optional[str] = None
    ) -> Tuple[bool, int, int]:
        """
        Check a request against a sliding window.

        Returns:
            Tuple of (allowed, requests_made, retry_after_seconds)
        """
        if not self.enabled:
            return True, 0, 0

        if not self.cache.redis:
            logger.debug("Rate limiting bypassed - cache unavailable")
            return True, 0, 0

        window_name = window_name or f"{limit}per{window_seconds}s"
        cache_key = self._get_cache_key(identifier, window_name)

        try:
            pipe = self.cache.redis.pipeline()
            now = time.time()
            pipe.zremrangebyscore(cache_key, 0, now - window_seconds)
            pipe.zcard(cache_key)
            pipe.zadd(cache_key, {str(now): now})
            pipe.expire(cache_key, window_seconds + 60)
            results = pipe.execute()

            # count before the current request was added
            requests_in_window = results[1]

            if requests_in_window >= limit:
                oldest = self.cache.redis.zrange(cache_key, 0, 0, withscores=True)
                if oldest:
                    retry_after = max(1, int(oldest[0][1] + window_seconds - now))
                else:
                    retry_after = window_seconds
                self.cache.redis.zrem(cache_key, str(now))
                return False, requests_in_window, retry_after

            return True, requests_in_window + 1, 0

        except Exception as e:
            logger.error(f"Rate limit check failed: {e}")
            return True, 0, 0


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",")[0].strip()
        if candidate:
            return candidate
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the general or auth window to every ``/api/v1`` request."""

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter or RateLimiter()

    @staticmethod
    def _window_for(path: str) -> Tuple[str, int, int]:
        if path in AUTH_LIMITED_PATHS:
            return "auth", settings.rate_limit_auth_max, settings.rate_limit_auth_window_ms // 1000
        return "general", settings.rate_limit_max, settings.rate_limit_window_ms // 1000

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if (
            not settings.rate_limit_enabled
            or request.method == "OPTIONS"
            or not path.startswith(API_PREFIX)
            or path in EXEMPT_PATHS
        ):
            return await call_next(request)

        window_name, limit, window_seconds = self._window_for(path)
        client_ip = get_client_ip(request)
        allowed, requests_made, retry_after = self.rate_limiter.check_rate_limit(
            identifier=client_ip,
            limit=limit,
            window_seconds=window_seconds,
            window_name=window_name,
        )

        if not allowed:
            prometheus_metrics.record_rate_limit_rejection(window_name)
            logger.warning(f"Rate limit exceeded for {client_ip} on {path} ({window_name})")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"success": False, "message": RATE_LIMIT_MESSAGE, "retryAfter": retry_after},
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(time.time()) + retry_after),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - requests_made))
        response.headers["X-RateLimit-Reset"] = str(int(time.time()) + window_seconds)
        return response
