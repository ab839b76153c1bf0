# backend/pkasla/services/cache_service.py
"""
Dedicated Cache Service for the PKASLA platform

Centralizes caching with key management, invalidation patterns and a
circuit breaker around Redis. When Redis is disabled or unreachable the
service keeps working against an in-process dictionary.
"""

from datetime import datetime, timedelta
from enum import Enum
import fnmatch
import hashlib
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, TypeVar

import redis
from redis import Redis
from redis.exceptions import RedisError

from ..core.config import settings
from .base import BaseService

logger = logging.getLogger(__name__)


T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """
    Circuit breaker pattern implementation for cache resilience.

    Prevents cascading failures when cache is unavailable.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: type[BaseException] = RedisError,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self._failure_count: int = 0
        self._last_failure_time: Optional[datetime] = None
        self._state: CircuitState = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            if self._state == CircuitState.OPEN and self._last_failure_time:
                time_since_failure = (datetime.now() - self._last_failure_time).total_seconds()
                if time_since_failure >= self.recovery_timeout:
                    self._state = CircuitState.HALF_OPEN
            return self._state

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        """
        Execute function with circuit breaker protection.

        Returns None if the circuit is open; re-raises failures while the
        circuit is still closed.
        """
        if self.state == CircuitState.OPEN:
            logger.warning(f"Circuit breaker is OPEN, skipping {func.__name__}")
            return None

        try:
            result = func(*args, **kwargs)
            self._on_success()
            return result
        except self.expected_exception:
            self._on_failure()
            if self.state == CircuitState.CLOSED:
                raise
            return None

    def _on_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit breaker recovered, closing circuit")

    def _on_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = datetime.now()

            if self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.warning(f"Circuit breaker opened after {self._failure_count} failures")


class CacheKeyBuilder:
    """Builds namespaced cache keys such as ``job:list:<hash>``."""

    @staticmethod
    def build(*parts: Any) -> str:
        return ":".join(str(part) for part in parts if part is not None and part != "")

    @staticmethod
    def hash_complex_key(data: Dict[str, Any]) -> str:
        """Stable short hash of a query/filter mapping."""
        payload = json.dumps(data, sort_keys=True, default=str)
        return hashlib.md5(payload.encode()).hexdigest()


class CacheService(BaseService):
    """
    Centralized caching service.

    Features:
    - Automatic JSON serialization
    - TTL management with different tiers
    - Invalidation patterns
    - Performance monitoring
    """

    # TTL Tiers (in seconds)
    TTL_TIERS = {
        "hot": 300,  # 5 minutes - frequently accessed
        "warm": 3600,  # 1 hour - moderate access
        "cold": 86400,  # 24 hours - infrequent access
        "static": 604800,  # 7 days - rarely changes
    }

    def __init__(self, redis_client: Optional[Redis] = None, connect: bool = True):
        super().__init__(None)
        self.logger = logging.getLogger(__name__)

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=5, recovery_timeout=60, expected_exception=RedisError
        )
        self.key_builder = CacheKeyBuilder()

        # In-memory fallbacks
        self._memory_cache: Dict[str, Any] = {}
        self._memory_expiry: Dict[str, datetime] = {}
        self._memory_lock = threading.Lock()

        self.redis: Optional[Redis] = redis_client
        if self.redis is None and connect:
            self._setup_redis_connection()

        self._stats: Dict[str, int] = self._initialize_stats()

    def _setup_redis_connection(self) -> None:
        """Setup Redis connection with fallback to in-memory cache."""
        if not settings.redis_enabled:
            logger.info("Redis disabled, using in-memory cache")
            return
        try:
            self.redis = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_keepalive=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            self.redis.ping()
            logger.info("Connected to Redis")
        except (RedisError, ConnectionError) as e:
            logger.warning(f"Redis not available: {e}. Using in-memory fallback.")
            self.redis = None

    def _initialize_stats(self) -> Dict[str, int]:
        return {"hits": 0, "misses": 0, "sets": 0, "deletes": 0, "errors": 0}

    @property
    def is_redis_available(self) -> bool:
        return self.redis is not None and self.circuit_breaker.state != CircuitState.OPEN

    # Core Cache Operations

    @BaseService.measure_operation("cache_get")
    def get(self, key: str) -> Optional[Any]:
        """Get value from cache with circuit breaker protection."""
        redis_client = self.redis

        def _get_from_redis() -> Optional[Any]:
            value = redis_client.get(key)
            if value is not None:
                return json.loads(value)
            return None

        try:
            if redis_client is not None:
                if self.circuit_breaker.state != CircuitState.OPEN:
                    value = self.circuit_breaker.call(_get_from_redis)
                    if value is not None:
                        self._stats["hits"] += 1
                        return value
            else:
                with self._memory_lock:
                    if key in self._memory_cache:
                        expires_at = self._memory_expiry.get(key)
                        if expires_at is None or datetime.now() < expires_at:
                            self._stats["hits"] += 1
                            return self._memory_cache[key]
                        self._memory_cache.pop(key, None)
                        self._memory_expiry.pop(key, None)

            self._stats["misses"] += 1
            return None

        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            self._stats["errors"] += 1
            return None

    @BaseService.measure_operation("cache_set")
    def set(self, key: str, value: Any, ttl: Optional[int] = None, tier: str = "warm") -> bool:
        """Set value in cache with circuit breaker protection."""
        redis_client = self.redis
        if ttl is None:
            ttl = self.TTL_TIERS.get(tier, self.TTL_TIERS["warm"])

        try:
            serialized = json.dumps(value, default=str)

            if redis_client is not None:
                if self.circuit_breaker.state == CircuitState.OPEN:
                    return False
                result = self.circuit_breaker.call(lambda: redis_client.setex(key, ttl, serialized))
                if result:
                    self._stats["sets"] += 1
                    return True
                return False

            with self._memory_lock:
                # Round-trip so memory hits return the same shapes Redis would
                self._memory_cache[key] = json.loads(serialized)
                self._memory_expiry[key] = datetime.now() + timedelta(seconds=ttl)
            self._stats["sets"] += 1
            return True

        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete")
    def delete(self, key: str) -> bool:
        """Delete a key from cache with circuit breaker protection."""
        redis_client = self.redis

        try:
            if redis_client is not None:
                if self.circuit_breaker.state == CircuitState.OPEN:
                    return False
                result = bool(self.circuit_breaker.call(lambda: redis_client.delete(key)))
            else:
                with self._memory_lock:
                    result = key in self._memory_cache
                    self._memory_cache.pop(key, None)
                    self._memory_expiry.pop(key, None)
            if result:
                self._stats["deletes"] += 1
            return result

        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete_pattern")
    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern."""
        try:
            if self.redis is not None:
                count = self._delete_pattern_redis(pattern)
            else:
                count = self._delete_pattern_memory(pattern)

            self._stats["deletes"] += count
            logger.info(f"Deleted {count} keys matching pattern: {pattern}")
            return count

        except Exception as e:
            logger.error(f"Cache delete pattern error: {e}")
            self._stats["errors"] += 1
            return 0

    def _delete_pattern_redis(self, pattern: str) -> int:
        """Delete pattern from Redis using SCAN."""
        count = 0
        for key in self.redis.scan_iter(match=pattern):
            if self.redis.delete(key):
                count += 1
        return count

    def _delete_pattern_memory(self, pattern: str) -> int:
        with self._memory_lock:
            keys_to_delete = [k for k in self._memory_cache if fnmatch.fnmatch(k, pattern)]
            for key in keys_to_delete:
                self._memory_cache.pop(key, None)
                self._memory_expiry.pop(key, None)
        return len(keys_to_delete)

    @BaseService.measure_operation("cache_clear_all")
    def clear_all(self) -> int:
        """Drop every cached entry."""
        return self.delete_pattern("*")

    def get_stats(self) -> Dict[str, Any]:
        """Cache performance statistics including circuit breaker state."""
        total_requests = self._stats["hits"] + self._stats["misses"]
        hit_rate = (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0
        stats: Dict[str, Any] = {
            **self._stats,
            "hit_rate": f"{hit_rate:.2f}%",
            "total_requests": total_requests,
            "backend": "redis" if self.redis is not None else "memory",
            "circuit_breaker": {
                "state": self.circuit_breaker.state.value,
                "failure_count": self.circuit_breaker._failure_count,
                "threshold": self.circuit_breaker.failure_threshold,
            },
        }
        if self.redis is not None and self.circuit_breaker.state != CircuitState.OPEN:
            try:
                info = self.redis.info()
                stats["redis"] = {
                    "used_memory_human": info.get("used_memory_human"),
                    "connected_clients": info.get("connected_clients"),
                }
            except RedisError:
                pass
        return stats


_cache_service: Optional[CacheService] = None
_cache_lock = threading.Lock()


def get_cache_service() -> CacheService:
    """
    Process-wide cache service for dependency injection.

    One instance is shared so the in-memory fallback is visible to every
    request.
    """
    global _cache_service
    if _cache_service is None:
        with _cache_lock:
            if _cache_service is None:
                _cache_service = CacheService()
    return _cache_service


def reset_cache_service(instance: Optional[CacheService] = None) -> None:
    """Replace the shared cache instance (used by tests and app shutdown)."""
    global _cache_service
    with _cache_lock:
        _cache_service = instance
