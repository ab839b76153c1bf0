# backend/tests/test_guests.py
"""
Test guest routes: duplicates, bulk import, invite tokens and QR joins.
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pkasla.models.event import Event
from pkasla.models.user import User
from pkasla.services.guest_service import parse_guest_csv
from tests.helpers.api import add_guest, create_event


class TestCreateGuest:
    def test_create_guest_updates_counter(
        self, client: TestClient, db: Session, auth_headers: dict
    ):
        event = create_event(client, auth_headers)

        guest = add_guest(client, auth_headers, event["id"], email="Guest@Example.com")

        assert guest["email"] == "guest@example.com"
        assert guest["status"] == "pending"
        assert guest["inviteToken"]
        assert db.get(Event, event["id"]).guest_count == 1

    def test_only_host_adds_guests(
        self, client: TestClient, auth_headers: dict, other_headers: dict
    ):
        event = create_event(client, auth_headers)

        response = client.post(
            "/api/v1/guests", json={"name": "X", "eventId": event["id"]}, headers=other_headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You can only add guests to your own events"

    def test_duplicate_email_and_phone(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        add_guest(client, auth_headers, event["id"], email="a@example.com", phone="012345678")

        same_email = client.post(
            "/api/v1/guests",
            json={"name": "B", "eventId": event["id"], "email": "A@example.com"},
            headers=auth_headers,
        )
        assert same_email.status_code == 409
        assert same_email.json()["message"] == "Guest with this email already exists for this event"

        same_phone = client.post(
            "/api/v1/guests",
            json={"name": "C", "eventId": event["id"], "phone": "012345678"},
            headers=auth_headers,
        )
        assert same_phone.status_code == 409

    def test_duplicate_names_only_when_restricted(self, client: TestClient, auth_headers: dict):
        open_event = create_event(client, auth_headers, title="Open")
        strict_event = create_event(
            client, auth_headers, title="Strict", restrictDuplicateNames=True
        )

        add_guest(client, auth_headers, open_event["id"], name="Sok")
        add_guest(client, auth_headers, open_event["id"], name="Sok")

        add_guest(client, auth_headers, strict_event["id"], name="Sok")
        response = client.post(
            "/api/v1/guests",
            json={"name": "sok", "eventId": strict_event["id"]},
            headers=auth_headers,
        )
        assert response.status_code == 409
        assert response.json()["message"] == "Guest with this name already exists for this event"


class TestGuestAccess:
    def test_list_is_scoped_to_own_events(
        self, client: TestClient, auth_headers: dict, other_headers: dict, admin_headers: dict
    ):
        mine = create_event(client, auth_headers)
        theirs = create_event(client, other_headers)
        add_guest(client, auth_headers, mine["id"], name="Mine")
        add_guest(client, other_headers, theirs["id"], name="Theirs")

        own = client.get("/api/v1/guests", headers=auth_headers).json()["data"]
        assert [g["name"] for g in own["items"]] == ["Mine"]

        everything = client.get("/api/v1/guests", headers=admin_headers).json()["data"]
        assert everything["total"] == 2

    def test_event_guest_list_requires_host(
        self, client: TestClient, auth_headers: dict, other_headers: dict
    ):
        event = create_event(client, auth_headers)
        add_guest(client, auth_headers, event["id"])

        response = client.get(f"/api/v1/guests/event/{event['id']}", headers=other_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You can only view guests of your own events"

    def test_update_and_delete(self, client: TestClient, db: Session, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        updated = client.patch(
            f"/api/v1/guests/{guest['id']}",
            json={"status": "confirmed", "hasGivenGift": True},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "confirmed"
        assert updated.json()["data"]["hasGivenGift"] is True

        deleted = client.delete(f"/api/v1/guests/{guest['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert db.get(Event, event["id"]).guest_count == 0


class TestInvitations:
    def test_invite_link_is_public(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        response = client.get(f"/api/v1/guests/invite/{guest['inviteToken']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == guest["id"]
        assert data["event"]["title"] == event["title"]

    def test_regenerated_token_replaces_old(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        fresh = client.post(
            f"/api/v1/guests/{guest['id']}/regenerate-token", headers=auth_headers
        ).json()["data"]["inviteToken"]

        assert fresh != guest["inviteToken"]
        assert client.get(f"/api/v1/guests/invite/{guest['inviteToken']}").status_code == 404
        assert client.get(f"/api/v1/guests/invite/{fresh}").status_code == 200

    def test_join_by_qr_links_logged_in_user(
        self,
        client: TestClient,
        db: Session,
        auth_headers: dict,
        other_user: User,
        other_headers: dict,
    ):
        event = create_event(client, auth_headers)
        token = client.post(
            f"/api/v1/events/{event['id']}/qr-code/generate", headers=auth_headers
        ).json()["data"]["token"]

        joined = client.post(
            f"/api/v1/guests/qr/{token}/join",
            json={"name": "Walk In", "email": ""},
            headers=other_headers,
        )
        assert joined.status_code == 201
        assert joined.json()["data"]["userId"] == other_user.id
        assert joined.json()["data"]["email"] is None

        mine = client.get("/api/v1/guests/my", headers=other_headers).json()["data"]
        assert [g["event"]["id"] for g in mine] == [event["id"]]

    def test_join_with_bad_token(self, client: TestClient):
        response = client.post("/api/v1/guests/qr/nope/join", json={"name": "Anon"})

        assert response.status_code == 404
        assert response.json()["message"] == "Invalid or expired QR code"


class TestBulkGuests:
    def test_parse_guest_csv(self):
        rows = parse_guest_csv("\ufeffName,EMAIL,Unknown\nSok,sok@example.com,x\n,,\nDara,,\n")

        assert rows == [{"name": "Sok", "email": "sok@example.com"}, {"name": "Dara"}]

    def test_json_bulk_collects_row_errors(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)

        response = client.post(
            "/api/v1/guests/bulk",
            json={
                "eventId": event["id"],
                "guests": [
                    {"name": "Sok", "email": "sok@example.com"},
                    {"name": "Dupe", "email": "sok@example.com"},
                    {"name": ""},
                ],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["count"] == 1
        assert len(data["errors"]) == 2
        assert data["errors"][0].startswith("Row 2:")

    def test_json_bulk_all_rows_fail(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)

        response = client.post(
            "/api/v1/guests/bulk",
            json={"eventId": event["id"], "guests": [{"name": ""}]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Failed to create guests:")

    def test_csv_bulk(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        csv_body = "name,email,phone\nSok,sok@example.com,011111111\nDara,dara@example.com,\n"

        response = client.post(
            "/api/v1/guests/bulk",
            data={"eventId": event["id"]},
            files={"file": ("guests.csv", csv_body.encode("utf-8"), "text/csv")},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        assert response.json()["data"]["count"] == 2

    def test_csv_bulk_requires_event(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/guests/bulk",
            files={"file": ("guests.csv", b"name\nSok\n", "text/csv")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "eventId is required"

    def test_csv_bulk_rejects_non_utf8(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)

        response = client.post(
            "/api/v1/guests/bulk",
            data={"eventId": event["id"]},
            files={"file": ("guests.csv", "name\nSéa\n".encode("latin-1"), "text/csv")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "CSV file must be UTF-8 encoded"
