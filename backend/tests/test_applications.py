# backend/tests/test_applications.py
"""
Test job applications: eligibility, one application per job and review.
"""

from fastapi.testclient import TestClient
import pytest

from tests.helpers.api import approve_job, post_job


@pytest.fixture
def open_job(client: TestClient, recruiter_headers: dict, admin_headers: dict) -> dict:
    job = post_job(client, recruiter_headers)
    return approve_job(client, admin_headers, job["id"])


def apply(client: TestClient, headers: dict, job_id: str, **fields):
    payload = {"jobId": job_id, "coverLetter": "I would love to join the team."}
    payload.update(fields)
    return client.post("/api/v1/applications", json=payload, headers=headers)


class TestApply:
    def test_apply_to_open_job(self, client: TestClient, open_job: dict, seeker_headers: dict):
        response = apply(
            client, seeker_headers, open_job["id"], resumeUrl="https://cdn.example.com/cv.pdf"
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["resumeUrl"] == "https://cdn.example.com/cv.pdf"

    def test_only_once_per_job(self, client: TestClient, open_job: dict, seeker_headers: dict):
        apply(client, seeker_headers, open_job["id"])

        again = apply(client, seeker_headers, open_job["id"])

        assert again.status_code == 409
        assert again.json()["message"] == "You have already applied for this job"

    def test_pending_job_rejects_applications(
        self, client: TestClient, recruiter_headers: dict, seeker_headers: dict
    ):
        job = post_job(client, recruiter_headers, status="published")

        response = apply(client, seeker_headers, job["id"])

        assert response.status_code == 400
        assert response.json()["message"] == "Job is not available for applications"

    def test_unknown_job(self, client: TestClient, seeker_headers: dict):
        response = apply(client, seeker_headers, "missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Job not found"

    def test_invalid_url(self, client: TestClient, open_job: dict, seeker_headers: dict):
        response = apply(client, seeker_headers, open_job["id"], portfolioUrl="not-a-url")

        assert response.status_code == 400
        assert "portfolioUrl" in response.json()["errors"]["fieldErrors"]


class TestReview:
    def test_reviewer_updates_status(
        self,
        client: TestClient,
        open_job: dict,
        seeker_headers: dict,
        recruiter_headers: dict,
        test_recruiter,
    ):
        application = apply(client, seeker_headers, open_job["id"]).json()["data"]

        denied = client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "shortlisted"},
            headers=seeker_headers,
        )
        assert denied.status_code == 403

        reviewed = client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "shortlisted"},
            headers=recruiter_headers,
        ).json()["data"]
        assert reviewed["status"] == "shortlisted"
        assert reviewed["reviewedBy"] == test_recruiter.id
        assert reviewed["reviewedAt"] is not None

        by_job = client.get(
            f"/api/v1/applications/job/{open_job['id']}", headers=recruiter_headers
        ).json()["data"]
        assert by_job["meta"]["total"] == 1

        stats = client.get("/api/v1/applications/stats", headers=recruiter_headers).json()["data"]
        assert stats["shortlisted"] == 1
        assert stats["total"] == 1

    def test_candidate_manages_own_application(
        self,
        client: TestClient,
        open_job: dict,
        seeker_headers: dict,
        other_headers: dict,
    ):
        application = apply(client, seeker_headers, open_job["id"]).json()["data"]

        mine = client.get("/api/v1/applications/my-applications", headers=seeker_headers)
        assert mine.json()["data"]["data"][0]["job"]["id"] == open_job["id"]

        denied = client.patch(
            f"/api/v1/applications/{application['id']}",
            json={"status": "withdrawn"},
            headers=other_headers,
        )
        assert denied.status_code == 403
        assert denied.json()["message"] == "You can only update your own applications"

        withdrawn = client.patch(
            f"/api/v1/applications/{application['id']}",
            json={"status": "withdrawn"},
            headers=seeker_headers,
        )
        assert withdrawn.json()["data"]["status"] == "withdrawn"

        deleted = client.delete(f"/api/v1/applications/{application['id']}", headers=seeker_headers)
        assert deleted.status_code == 200
        missing = client.get(f"/api/v1/applications/{application['id']}", headers=seeker_headers)
        assert missing.status_code == 404
