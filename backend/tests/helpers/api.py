# backend/tests/helpers/api.py
"""Request builders shared by the route tests."""

import io
from typing import Any, Dict

from fastapi.testclient import TestClient
from PIL import Image


def png_bytes(size=(40, 30), color=(200, 30, 90)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def event_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "title": "Sophea & Dara Wedding",
        "eventType": "wedding",
        "date": "2026-12-20T10:00:00Z",
        "venue": "Sokha Hotel, Phnom Penh",
    }
    payload.update(overrides)
    return payload


def create_event(client: TestClient, headers: dict, **overrides: Any) -> Dict[str, Any]:
    response = client.post("/api/v1/events", json=event_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def add_guest(client: TestClient, headers: dict, event_id: str, **fields: Any) -> Dict[str, Any]:
    payload = {"name": "Guest One", "eventId": event_id}
    payload.update(fields)
    response = client.post("/api/v1/guests", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_template(client: TestClient, admin_headers: dict, **overrides: Any) -> Dict[str, Any]:
    payload = {"name": "golden-lotus", "title": "Golden Lotus", "category": "wedding"}
    payload.update(overrides)
    response = client.post("/api/v1/templates", json=payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_plan(client: TestClient, admin_headers: dict, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "name": "premium",
        "displayName": "Premium",
        "price": 9.99,
        "billingCycle": "monthly",
        "maxEvents": 20,
        "features": ["Unlimited guests"],
    }
    payload.update(overrides)
    response = client.post("/api/v1/subscription-plans", json=payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def job_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "title": "Backend Engineer",
        "company": "Angkor Labs",
        "description": "Build and run the APIs behind our booking products.",
        "location": "Phnom Penh",
        "employmentType": "full_time",
        "tags": ["python", "api"],
        "salaryRange": {"min": 1000, "max": 2000, "currency": "USD"},
    }
    payload.update(overrides)
    return payload


def post_job(client: TestClient, headers: dict, **overrides: Any) -> Dict[str, Any]:
    response = client.post("/api/v1/jobs", json=job_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def approve_job(client: TestClient, admin_headers: dict, job_id: str) -> Dict[str, Any]:
    response = client.patch(f"/api/v1/admin/jobs/{job_id}/approve", headers=admin_headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]
