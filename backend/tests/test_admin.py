# backend/tests/test_admin.py
"""
Test admin endpoints: dashboard, user management, job moderation, feeds and settings.
"""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pkasla.models.audit_log import AuditLog
from pkasla.models.job import Job
from pkasla.models.user import User
from tests.helpers.api import approve_job, create_event, post_job

LISTING_HTML = """
<html><body>
  <div class="job">
    <h2 class="title">QA Engineer</h2>
    <span class="company">Mekong Soft</span>
    <p class="desc">Own the regression suite for our mobile apps.</p>
    <span class="location">Remote</span>
    <span class="type">Part-time</span>
    <span class="salary">$800 - $1,200</span>
    <a class="tag">qa</a><a class="tag">mobile</a>
  </div>
  <div class="job">
    <h2 class="title">Backend Engineer</h2>
    <span class="company">Angkor Labs</span>
    <p class="desc">Build and run the APIs behind our booking products.</p>
  </div>
</body></html>
"""

SELECTORS = {
    "jobContainer": "div.job",
    "title": ".title",
    "company": ".company",
    "description": ".desc",
    "location": ".location",
    "employmentType": ".type",
    "salary": ".salary",
    "tags": ".tag",
}


class TestAccess:
    def test_admin_role_required(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/v1/admin/dashboard", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions"

    def test_anonymous_rejected(self, client: TestClient):
        assert client.get("/api/v1/admin/users").status_code == 401


class TestDashboard:
    def test_counts(
        self,
        client: TestClient,
        admin_headers: dict,
        auth_headers: dict,
        recruiter_headers: dict,
        test_job_seeker: User,
    ):
        create_event(client, auth_headers)
        job = post_job(client, recruiter_headers)
        post_job(client, recruiter_headers, title="Second Role")
        approve_job(client, admin_headers, job["id"])

        data = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()["data"]

        assert data["site"]["totalUsers"] == 4
        assert data["site"]["totalJobSeekers"] == 1
        assert data["site"]["publishedJobs"] == 1
        assert data["site"]["pendingJobApprovals"] == 1
        assert data["site"]["totalEvents"] == 1
        assert data["jobs"]["byEmploymentType"]["full_time"] == 2
        assert data["jobs"]["byLocation"] == [{"location": "Phnom Penh", "count": 2}]
        assert data["applications"]["total"] == 0

    def test_user_analytics(self, client: TestClient, admin_headers: dict, test_user: User):
        data = client.get("/api/v1/admin/analytics/users", headers=admin_headers).json()["data"]

        assert data["total"] == 2
        assert data["byRole"]["admin"] == 1
        assert data["byRole"]["user"] == 1

    def test_cache_clear(self, client: TestClient, admin_headers: dict):
        response = client.post("/api/v1/admin/cache/clear", headers=admin_headers)

        assert response.status_code == 200
        assert "cleared" in response.json()["data"]


class TestUserManagement:
    def test_list_and_search(self, client: TestClient, admin_headers: dict, test_user: User):
        data = client.get(
            "/api/v1/admin/users", params={"search": "host"}, headers=admin_headers
        ).json()["data"]

        assert data["total"] == 1
        assert data["items"][0]["email"] == "host@example.com"

    def test_suspend_user_is_audited(
        self, client: TestClient, db: Session, admin_headers: dict, test_user: User
    ):
        response = client.patch(
            f"/api/v1/admin/users/{test_user.id}/status",
            json={"status": "suspended"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "suspended"
        entry = db.query(AuditLog).filter_by(resource="user", resource_id=test_user.id).one()
        assert entry.metadata_json["changes"] == {
            "status": {"old": "active", "new": "suspended"}
        }

    def test_cannot_suspend_self(self, client: TestClient, admin_headers: dict, test_admin: User):
        response = client.patch(
            f"/api/v1/admin/users/{test_admin.id}/status",
            json={"status": "suspended"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot change your own status"

    def test_role_change(
        self, client: TestClient, admin_headers: dict, test_admin: User, test_user: User
    ):
        promoted = client.patch(
            f"/api/v1/admin/users/{test_user.id}/role",
            json={"role": "recruiter"},
            headers=admin_headers,
        )
        assert promoted.json()["data"]["role"] == "recruiter"

        demote_self = client.patch(
            f"/api/v1/admin/users/{test_admin.id}/role",
            json={"role": "user"},
            headers=admin_headers,
        )
        assert demote_self.status_code == 400
        assert demote_self.json()["message"] == "You cannot remove your own admin role"

        unknown = client.patch(
            "/api/v1/admin/users/missing/role", json={"role": "user"}, headers=admin_headers
        )
        assert unknown.status_code == 404


class TestJobModeration:
    def test_pending_queue_and_reject(
        self, client: TestClient, admin_headers: dict, recruiter_headers: dict
    ):
        job = post_job(client, recruiter_headers)

        pending = client.get("/api/v1/admin/jobs/pending", headers=admin_headers).json()["data"]
        assert [j["id"] for j in pending["data"]] == [job["id"]]

        rejected = client.patch(
            f"/api/v1/admin/jobs/{job['id']}/reject",
            json={"reason": "Missing salary details"},
            headers=admin_headers,
        ).json()["data"]
        assert rejected["approvalStatus"] == "rejected"
        assert rejected["rejectionReason"] == "Missing salary details"

        queue = client.get("/api/v1/admin/jobs/pending", headers=admin_headers).json()["data"]
        assert queue["meta"]["total"] == 0

    def test_admin_delete(self, client: TestClient, db: Session, admin_headers: dict, recruiter_headers: dict):
        job = post_job(client, recruiter_headers)

        response = client.delete(f"/api/v1/admin/jobs/{job['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert db.query(Job).count() == 0


class TestJobFeeds:
    def test_export_json(self, client: TestClient, admin_headers: dict, recruiter_headers: dict):
        job = post_job(client, recruiter_headers)
        approve_job(client, admin_headers, job["id"])
        post_job(client, recruiter_headers, title="Still Pending")

        response = client.get("/api/v1/admin/jobs/export/json", headers=admin_headers)

        assert response.status_code == 200
        assert "jobs-export.json" in response.headers["content-disposition"]
        items = response.json()["data"]
        assert [item["id"] for item in items] == [job["id"]]
        assert items[0]["salaryRange"] == {"min": 1000, "max": 2000, "currency": "USD"}

    def test_export_xml(self, client: TestClient, admin_headers: dict, recruiter_headers: dict):
        job = post_job(client, recruiter_headers, company="Tea & Co")
        approve_job(client, admin_headers, job["id"])

        response = client.get("/api/v1/admin/jobs/export/xml", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert "<company>Tea &amp; Co</company>" in response.text
        assert "<tag>python</tag>" in response.text

    def test_import_json_collects_errors(
        self, client: TestClient, db: Session, admin_headers: dict
    ):
        items = [
            {
                "id": "ignored",
                "title": "Data Analyst",
                "company": "Angkor Labs",
                "description": "Turn event data into weekly reports.",
                "location": "Phnom Penh",
                "url": "https://jobs.example.com/1",
            },
            {"title": "Broken", "company": "X"},
        ]

        response = client.post("/api/v1/admin/jobs/import/json", json=items, headers=admin_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["created"] == 1
        assert data["errors"][0].startswith('Failed to import job "Broken"')
        imported = db.query(Job).one()
        assert imported.status == "draft"
        assert imported.approval_status == "pending"

    def test_import_json_requires_array(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/admin/jobs/import/json", json={"title": "x"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Request body must be an array of jobs"

    def test_import_xml(self, client: TestClient, db: Session, admin_headers: dict):
        document = """<?xml version="1.0"?>
<jobs>
  <job>
    <title>Support Lead</title>
    <company>Mekong Soft</company>
    <description><![CDATA[Lead the <b>support</b> team across two shifts.]]></description>
    <employmentType>part_time</employmentType>
    <location>Battambang</location>
    <isRemote>true</isRemote>
    <tags><tag>support</tag></tags>
  </job>
</jobs>"""

        response = client.post(
            "/api/v1/admin/jobs/import/xml",
            content=document.encode("utf-8"),
            headers={**admin_headers, "content-type": "application/xml"},
        )

        assert response.status_code == 201, response.text
        assert response.json()["data"]["created"] == 1
        job = db.query(Job).one()
        assert job.is_remote is True
        assert job.tags == ["support"]
        assert "<b>support</b>" in job.description

    def test_import_bad_xml(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/admin/jobs/import/xml",
            json="<jobs><job>",
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["created"] == 0
        assert response.json()["data"]["errors"][0].startswith("Failed to parse XML")

    def test_scrape(self, client: TestClient, db: Session, admin_headers: dict, recruiter_headers: dict):
        post_job(client, recruiter_headers)
        page = MagicMock(text=LISTING_HTML)
        page.raise_for_status.return_value = None

        with patch("pkasla.services.job_scraper_service.requests.get", return_value=page):
            response = client.post(
                "/api/v1/admin/jobs/scrape",
                json={"url": "https://jobs.example.com", "selectors": SELECTORS},
                headers=admin_headers,
            )

        assert response.status_code == 201, response.text
        assert response.json()["data"] == {"found": 2, "created": 1, "skipped": 1, "errors": []}
        scraped = db.query(Job).filter_by(title="QA Engineer").one()
        assert scraped.employment_type == "part_time"
        assert scraped.is_remote is True
        assert scraped.salary_range == {"min": 800, "max": 1200, "currency": "USD"}

    def test_scrape_config_validation(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/admin/jobs/scrape",
            json={"url": "https://jobs.example.com", "selectors": {"title": ".t"}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Invalid scraping config: Job container selector is required, "
            "Company selector is required, Description selector is required"
        )


class TestSettings:
    def test_defaults_created_on_read(self, client: TestClient, admin_headers: dict):
        data = client.get("/api/v1/admin/settings", headers=admin_headers).json()["data"]

        assert data["maintenanceMode"] is False
        assert data["allowRegistration"] is True
        assert data["stripeSecretKey"] == ""

    def test_secrets_are_masked(self, client: TestClient, admin_headers: dict):
        client.patch(
            "/api/v1/admin/settings",
            json={"stripeSecretKey": "sk_live_123", "siteName": "PKASLA"},
            headers=admin_headers,
        )

        round_trip = client.put(
            "/api/v1/admin/settings",
            json={"stripeSecretKey": "********", "siteName": "Pkasla"},
            headers=admin_headers,
        ).json()["data"]

        assert round_trip["stripeSecretKey"] == "********"
        assert round_trip["siteName"] == "Pkasla"

    def test_r2_requires_bucket(self, client: TestClient, admin_headers: dict):
        response = client.patch(
            "/api/v1/admin/settings", json={"storageProvider": "r2"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "R2 Account ID and Bucket Name are required when using R2 storage"
        )

    def test_system_info(self, client: TestClient, admin_headers: dict):
        data = client.get("/api/v1/admin/settings/system-info", headers=admin_headers).json()["data"]

        assert data["storageProvider"] == "local"
        assert data["cacheBackend"] == "memory"
