# backend/tests/test_gifts.py
"""
Test gift routes: host-only recording, guest flags and per-currency totals.
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pkasla.models.guest import Guest
from tests.helpers.api import add_guest, create_event, png_bytes


def record_gift(client: TestClient, headers: dict, guest_id: str, **fields) -> dict:
    payload = {"guestId": guest_id, "paymentMethod": "cash", "currency": "usd", "amount": 50}
    payload.update(fields)
    response = client.post("/api/v1/guests/gifts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestGifts:
    def test_recording_gift_flags_guest(self, client: TestClient, db: Session, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        gift = record_gift(client, auth_headers, guest["id"])

        assert gift["eventId"] == event["id"]
        assert gift["amount"] == 50
        assert db.get(Guest, guest["id"]).has_given_gift is True

    def test_unknown_guest(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/guests/gifts",
            json={"guestId": "missing", "paymentMethod": "cash", "currency": "usd", "amount": 1},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Guest not found"

    def test_only_host_records(self, client: TestClient, auth_headers: dict, other_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        response = client.post(
            "/api/v1/guests/gifts",
            json={"guestId": guest["id"], "paymentMethod": "khqr", "currency": "khr", "amount": 1},
            headers=other_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You can only record gifts for your own events"

    def test_event_totals_by_currency(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        first = add_guest(client, auth_headers, event["id"], name="A")
        second = add_guest(client, auth_headers, event["id"], name="B")
        record_gift(client, auth_headers, first["id"], amount=50)
        record_gift(client, auth_headers, second["id"], amount=25.5)
        record_gift(client, auth_headers, second["id"], currency="khr", amount=40000)

        response = client.get(f"/api/v1/guests/gifts/event/{event['id']}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["items"]) == 3
        assert data["totals"] == {"khr": 40000, "usd": 75.5}

    def test_deleting_last_gift_clears_flag(
        self, client: TestClient, db: Session, auth_headers: dict
    ):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])
        one = record_gift(client, auth_headers, guest["id"])
        two = record_gift(client, auth_headers, guest["id"], amount=10)

        client.delete(f"/api/v1/guests/gifts/{one['id']}", headers=auth_headers)
        db.expire_all()
        assert db.get(Guest, guest["id"]).has_given_gift is True

        client.delete(f"/api/v1/guests/gifts/{two['id']}", headers=auth_headers)
        db.expire_all()
        assert db.get(Guest, guest["id"]).has_given_gift is False

    def test_update_gift(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])
        gift = record_gift(client, auth_headers, guest["id"])

        response = client.patch(
            f"/api/v1/guests/gifts/{gift['id']}",
            json={"amount": 80, "note": "Thank you"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["amount"] == 80
        assert response.json()["data"]["note"] == "Thank you"

    def test_multipart_receipt_upload(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        guest = add_guest(client, auth_headers, event["id"])

        response = client.post(
            "/api/v1/guests/gifts",
            data={"guestId": guest["id"], "paymentMethod": "khqr", "currency": "usd", "amount": "20"},
            files={"receiptImage": ("receipt.png", png_bytes(), "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        assert "/uploads/receipts/" in response.json()["data"]["receiptImage"]

    def test_guest_filter(self, client: TestClient, auth_headers: dict):
        event = create_event(client, auth_headers)
        first = add_guest(client, auth_headers, event["id"], name="A")
        second = add_guest(client, auth_headers, event["id"], name="B")
        record_gift(client, auth_headers, first["id"])
        record_gift(client, auth_headers, second["id"])

        response = client.get(f"/api/v1/guests/gifts/guest/{first['id']}", headers=auth_headers)

        assert [g["guestId"] for g in response.json()["data"]] == [first["id"]]
