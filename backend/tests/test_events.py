# backend/tests/test_events.py
"""
Test event routes: creation limits, ownership, filters and public QR tokens.
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pkasla.models.event import Event
from pkasla.models.user import User
from pkasla.services.subscription_service import DEFAULT_MAX_EVENTS
from tests.helpers.api import create_event, event_payload, png_bytes


class TestCreateEvent:
    def test_create_event_defaults(self, client: TestClient, test_user: User, auth_headers: dict):
        data = create_event(client, auth_headers)

        assert data["hostId"] == test_user.id
        assert data["status"] == "draft"
        assert data["guestCount"] == 0
        assert data["qrCodeToken"] is None

    def test_create_requires_auth(self, client: TestClient):
        response = client.post("/api/v1/events", json=event_payload())

        assert response.status_code == 401

    def test_invalid_event_type(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/events", json=event_payload(eventType="funeral"), headers=auth_headers
        )

        assert response.status_code == 400
        assert "eventType" in response.json()["errors"]["fieldErrors"]

    def test_cover_image_must_be_url_or_upload_path(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/events", json=event_payload(coverImage="ftp://x/y.png"), headers=auth_headers
        )

        assert response.status_code == 400

        ok = create_event(client, auth_headers, coverImage="/uploads/events/a.png")
        assert ok["coverImage"] == "/uploads/events/a.png"

    def test_free_users_hit_event_limit(self, client: TestClient, auth_headers: dict):
        for idx in range(DEFAULT_MAX_EVENTS):
            create_event(client, auth_headers, title=f"Event {idx}")

        response = client.post("/api/v1/events", json=event_payload(), headers=auth_headers)

        assert response.status_code == 403
        body = response.json()
        assert body["message"] == "Event limit reached for your subscription plan"
        assert body["errors"] == {"maxEvents": DEFAULT_MAX_EVENTS}

    def test_admin_is_not_limited(self, client: TestClient, admin_headers: dict):
        for idx in range(DEFAULT_MAX_EVENTS + 1):
            create_event(client, admin_headers, title=f"Admin event {idx}")

    def test_multipart_create_stores_cover_image(
        self, client: TestClient, auth_headers: dict, db: Session
    ):
        response = client.post(
            "/api/v1/events",
            data=event_payload(),
            files={"coverImage": ("cover.png", png_bytes(), "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        cover = response.json()["data"]["coverImage"]
        assert "/uploads/events/" in cover


class TestEventOwnership:
    def test_only_host_can_update(
        self, client: TestClient, auth_headers: dict, other_headers: dict
    ):
        event = create_event(client, auth_headers)

        denied = client.patch(
            f"/api/v1/events/{event['id']}", json={"title": "Hijack"}, headers=other_headers
        )
        assert denied.status_code == 403
        assert denied.json()["message"] == "You can only update your own events"

        allowed = client.patch(
            f"/api/v1/events/{event['id']}",
            json={"title": "Renamed", "status": "published"},
            headers=auth_headers,
        )
        assert allowed.status_code == 200
        assert allowed.json()["data"]["title"] == "Renamed"
        assert allowed.json()["data"]["status"] == "published"

    def test_update_template_config(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)

        response = client.patch(
            f"/api/v1/events/{event['id']}",
            json={
                "templateSlug": "golden-lotus",
                "userTemplateConfig": {"colors": {"primary": "#aa0000"}},
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["templateSlug"] == "golden-lotus"
        assert data["userTemplateConfig"]["colors"] == {"primary": "#aa0000"}

    def test_only_host_can_delete(
        self, client: TestClient, db: Session, auth_headers: dict, other_headers: dict
    ):
        event = create_event(client, auth_headers)

        assert client.delete(f"/api/v1/events/{event['id']}", headers=other_headers).status_code == 403
        assert client.delete(f"/api/v1/events/{event['id']}", headers=auth_headers).status_code == 200
        assert db.query(Event).count() == 0

    def test_missing_event(self, client: TestClient):
        response = client.get("/api/v1/events/01HZZZZZZZZZZZZZZZZZZZZZZZ")

        assert response.status_code == 404
        assert response.json()["message"] == "Event not found"


class TestEventListing:
    def test_filters_and_pagination(
        self, client: TestClient, test_user: User, auth_headers: dict, other_headers: dict
    ):
        create_event(client, auth_headers, title="Garden Wedding")
        create_event(client, auth_headers, title="Birthday Bash", eventType="birthday")
        create_event(client, other_headers, title="Another Wedding")

        by_host = client.get("/api/v1/events", params={"hostId": test_user.id}).json()["data"]
        assert by_host["total"] == 2

        by_type = client.get("/api/v1/events/type/birthday").json()["data"]
        assert [e["title"] for e in by_type["items"]] == ["Birthday Bash"]

        search = client.get("/api/v1/events", params={"search": "wedding"}).json()["data"]
        assert search["total"] == 2

        paged = client.get("/api/v1/events", params={"page": 2, "pageSize": 2}).json()["data"]
        assert paged["page"] == 2
        assert paged["pageSize"] == 2
        assert len(paged["items"]) == 1

    def test_my_events(self, client: TestClient, auth_headers: dict, other_headers: dict):
        create_event(client, auth_headers)
        create_event(client, other_headers)

        response = client.get("/api/v1/events/my", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    def test_categories(self, client: TestClient):
        response = client.get("/api/v1/events/categories")

        assert response.status_code == 200
        assert "hand-cutting" in response.json()["data"]


class TestEventQrToken:
    def test_generate_and_resolve(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)

        generated = client.post(
            f"/api/v1/events/{event['id']}/qr-code/generate", headers=auth_headers
        ).json()["data"]
        assert generated["eventId"] == event["id"]
        assert len(generated["token"]) >= 40

        resolved = client.get(f"/api/v1/events/qr/{generated['token']}")
        assert resolved.status_code == 200
        assert resolved.json()["data"]["id"] == event["id"]

    def test_regenerating_invalidates_old_token(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        url = f"/api/v1/events/{event['id']}/qr-code/generate"
        first = client.post(url, headers=auth_headers).json()["data"]["token"]
        client.post(url, headers=auth_headers)

        response = client.get(f"/api/v1/events/qr/{first}")

        assert response.status_code == 404
        assert response.json()["message"] == "Event not found or invalid QR code"

    def test_only_host_generates(self, client: TestClient, auth_headers: dict, other_headers: dict):
        event = create_event(client, auth_headers)

        response = client.post(
            f"/api/v1/events/{event['id']}/qr-code/generate", headers=other_headers
        )

        assert response.status_code == 403
