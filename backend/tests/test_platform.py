# backend/tests/test_platform.py
"""
Test cross-cutting pieces: health, metrics, maintenance mode, rate limiting,
the cache service and audit log queries.
"""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from pkasla.middleware.rate_limiter import RateLimiter
from pkasla.models.user import User
from pkasla.monitoring.prometheus_metrics import prometheus_metrics
from pkasla.services.audit_service import AuditService
from pkasla.services.base import BaseService
from pkasla.services.cache_service import CacheKeyBuilder, CacheService


class TestHealth:
    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.json() == {"message": "PKASLA API is running", "version": "1.0.0"}

    @pytest.mark.parametrize("path", ["/health", "/api/v1/health"])
    def test_health(self, client: TestClient, path: str):
        data = client.get(path).json()

        assert data["status"] == "ok"
        assert data["environment"] == "test"
        assert data["timestamp"]

    def test_prometheus_metrics(self, client: TestClient):
        client.get("/api/v1/health")

        response = client.get("/metrics/prometheus", params={"refresh": "1"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "pkasla_http_requests_total" in response.text
        assert response.headers["cache-control"].startswith("no-cache")


class TestMeasureOperation:
    class _Service(BaseService):
        @BaseService.measure_operation("ok_op")
        def ok(self, value):
            return value * 2

        @BaseService.measure_operation("failing_op")
        def fail(self):
            raise ValueError("boom")

    def test_records_success_and_error(self, db: Session):
        service = self._Service(db)

        with patch.object(prometheus_metrics, "record_service_operation") as record:
            assert service.ok(21) == 42
            with pytest.raises(ValueError, match="boom"):
                service.fail()

        first, second = record.call_args_list
        assert first.kwargs["operation"] == "ok_op"
        assert first.kwargs["status"] == "success"
        assert second.kwargs["service"] == "_Service"
        assert second.kwargs["status"] == "error"
        assert second.kwargs["error_type"] == "ValueError"
        assert service.ok.__name__ == "ok"


class TestMaintenanceMode:
    def test_blocks_public_api_but_not_auth_or_admin(
        self, client: TestClient, admin_headers: dict
    ):
        client.patch("/api/v1/admin/settings", json={"maintenanceMode": True}, headers=admin_headers)

        blocked = client.get("/api/v1/templates")
        assert blocked.status_code == 503
        assert blocked.json() == {
            "success": False,
            "message": "Service is under maintenance. Please try again later.",
        }

        assert client.get("/api/v1/health").status_code == 200
        assert client.get("/api/v1/admin/settings", headers=admin_headers).status_code == 200
        assert client.post("/api/v1/auth/login", json={}).status_code != 503

        client.patch(
            "/api/v1/admin/settings", json={"maintenanceMode": False}, headers=admin_headers
        )
        assert client.get("/api/v1/templates").status_code == 200


class TestRateLimiter:
    def _limiter(self, count_in_window: int) -> RateLimiter:
        redis = MagicMock()
        redis.pipeline.return_value.execute.return_value = [0, count_in_window, 1, True]
        redis.zrange.return_value = [("1", 1000.0)]
        limiter = RateLimiter(CacheService(redis_client=redis, connect=False))
        limiter.enabled = True
        return limiter

    def test_allows_under_limit(self):
        allowed, made, retry_after = self._limiter(2).check_rate_limit("1.2.3.4", 5, 60, "general")

        assert allowed is True
        assert made == 3
        assert retry_after == 0

    def test_rejects_at_limit(self):
        allowed, made, retry_after = self._limiter(5).check_rate_limit("1.2.3.4", 5, 60, "general")

        assert allowed is False
        assert made == 5
        assert retry_after >= 1

    def test_bypassed_without_redis(self):
        limiter = RateLimiter(CacheService(connect=False))
        limiter.enabled = True

        assert limiter.check_rate_limit("1.2.3.4", 1, 60) == (True, 0, 0)


class TestCacheService:
    def test_memory_round_trip_and_patterns(self):
        cache = CacheService(connect=False)

        cache.set("job:list:a", {"total": 1})
        cache.set("job:list:b", [1, 2])
        cache.set("settings:site", {"siteName": "PKASLA"})

        assert cache.get("job:list:a") == {"total": 1}
        assert cache.delete_pattern("job:*") == 2
        assert cache.get("job:list:b") is None
        assert cache.get("settings:site") == {"siteName": "PKASLA"}

        stats = cache.get_stats()
        assert stats["backend"] == "memory"
        assert stats["hits"] == 2

    def test_expired_entries_miss(self):
        cache = CacheService(connect=False)

        cache.set("k", "v", ttl=-1)

        assert cache.get("k") is None

    def test_key_builder(self):
        first = CacheKeyBuilder.hash_complex_key({"b": 1, "a": 2})
        second = CacheKeyBuilder.hash_complex_key({"a": 2, "b": 1})

        assert first == second
        assert CacheKeyBuilder.build("job", "list", None, first) == f"job:list:{first}"


class TestAuditLogs:
    def test_sensitive_metadata_is_redacted(self, db: Session, test_user: User):
        entry = AuditService(db).log(
            "update",
            "user",
            actor=test_user,
            metadata={"password": "hunter2", "nested": {"api_key": "k", "name": "ok"}},
        )

        assert entry.metadata_json == {
            "password": "[REDACTED]",
            "nested": {"api_key": "[REDACTED]", "name": "ok"},
        }
        assert entry.user_email == "host@example.com"
        assert entry.description == "update user"

    def test_log_changes_skips_noop(self, db: Session):
        service = AuditService(db)

        assert service.log_changes("update", "user", "u1", {"a": 1}, {"a": 1}) is None

    def test_query_routes(
        self, client: TestClient, db: Session, admin_headers: dict, test_user: User
    ):
        audit = AuditService(db)
        first = audit.log("create", "event", actor=test_user, resource_id="ev1")
        audit.log("delete", "event", actor=test_user, resource_id="ev2")

        everything = client.get("/api/v1/audit-logs", headers=admin_headers).json()["data"]
        assert everything["total"] == 2

        deletes = client.get(
            "/api/v1/audit-logs", params={"action": "delete"}, headers=admin_headers
        ).json()["data"]
        assert [item["resourceId"] for item in deletes["items"]] == ["ev2"]

        by_user = client.get(
            f"/api/v1/audit-logs/user/{test_user.id}", headers=admin_headers
        ).json()["data"]
        assert by_user["total"] == 2

        by_resource = client.get(
            "/api/v1/audit-logs/resource/event/ev1", headers=admin_headers
        ).json()["data"]
        assert [item["id"] for item in by_resource["items"]] == [first.id]

        single = client.get(f"/api/v1/audit-logs/{first.id}", headers=admin_headers)
        assert single.json()["data"]["action"] == "create"

        missing = client.get("/api/v1/audit-logs/nope", headers=admin_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Audit log not found"

    def test_admin_only(self, client: TestClient, auth_headers: dict):
        assert client.get("/api/v1/audit-logs", headers=auth_headers).status_code == 403
