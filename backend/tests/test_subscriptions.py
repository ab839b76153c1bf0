# backend/tests/test_subscriptions.py
"""
Test subscription plans, user subscriptions and the event cap they control.
"""

from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pkasla.models.subscription import UserSubscription
from pkasla.models.user import User
from pkasla.services.subscription_service import DEFAULT_MAX_EVENTS, UserSubscriptionService
from pkasla.utils.time_utils import add_months
from tests.helpers.api import create_event, create_plan


class TestPlans:
    def test_plan_crud(self, client: TestClient, admin_headers: dict):
        plan = create_plan(client, admin_headers, name="  Premium ")
        assert plan["name"] == "premium"
        assert plan["features"] == ["Unlimited guests"]

        dupe = client.post(
            "/api/v1/subscription-plans",
            json={"name": "premium", "displayName": "P", "price": 1, "billingCycle": "yearly"},
            headers=admin_headers,
        )
        assert dupe.status_code == 409
        assert dupe.json()["message"] == "Subscription plan name already exists"

        updated = client.patch(
            f"/api/v1/subscription-plans/{plan['id']}",
            json={"isActive": False},
            headers=admin_headers,
        )
        assert updated.json()["data"]["isActive"] is False

        active = client.get("/api/v1/subscription-plans", params={"activeOnly": "true"})
        assert active.json()["data"] == []
        assert len(client.get("/api/v1/subscription-plans").json()["data"]) == 1

        client.delete(f"/api/v1/subscription-plans/{plan['id']}", headers=admin_headers)
        missing = client.get(f"/api/v1/subscription-plans/{plan['id']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "Subscription plan not found"

    def test_invalid_billing_cycle(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/subscription-plans",
            json={"name": "x", "displayName": "X", "price": 1, "billingCycle": "weekly"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestUserSubscriptions:
    def test_subscribe_sets_one_cycle(
        self, client: TestClient, admin_headers: dict, auth_headers: dict
    ):
        plan = create_plan(client, admin_headers, billingCycle="yearly")

        response = client.post(
            "/api/v1/subscriptions", json={"planId": plan["id"]}, headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "active"
        assert data["autoRenew"] is True
        start = datetime.fromisoformat(data["startDate"].replace("Z", "+00:00"))
        end = datetime.fromisoformat(data["endDate"].replace("Z", "+00:00"))
        assert end.replace(tzinfo=None) == add_months(start, 12).replace(tzinfo=None)

    def test_new_subscription_cancels_previous(
        self, client: TestClient, admin_headers: dict, auth_headers: dict
    ):
        basic = create_plan(client, admin_headers, name="basic", price=1)
        premium = create_plan(client, admin_headers, name="premium")
        first = client.post(
            "/api/v1/subscriptions", json={"planId": basic["id"]}, headers=auth_headers
        ).json()["data"]

        changed = client.post(
            "/api/v1/subscriptions/change", json={"planId": premium["id"]}, headers=auth_headers
        )
        assert changed.status_code == 200

        history = client.get("/api/v1/subscriptions/me", headers=auth_headers).json()["data"]
        statuses = {s["id"]: s["status"] for s in history}
        assert statuses[first["id"]] == "cancelled"

        active = client.get("/api/v1/subscriptions/me/active", headers=auth_headers)
        assert active.json()["data"]["planId"] == premium["id"]

    def test_no_active_subscription(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/v1/subscriptions/me/active", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] is None

    def test_cancel_own_only(
        self, client: TestClient, admin_headers: dict, auth_headers: dict, other_headers: dict
    ):
        plan = create_plan(client, admin_headers)
        sub = client.post(
            "/api/v1/subscriptions", json={"planId": plan["id"]}, headers=auth_headers
        ).json()["data"]

        denied = client.post(f"/api/v1/subscriptions/{sub['id']}/cancel", headers=other_headers)
        assert denied.status_code == 403
        assert denied.json()["message"] == "You can only cancel your own subscription"

        ok = client.post(f"/api/v1/subscriptions/{sub['id']}/cancel", headers=auth_headers)
        assert ok.json()["data"]["status"] == "cancelled"
        assert ok.json()["data"]["autoRenew"] is False

        missing = client.post("/api/v1/subscriptions/nope/cancel", headers=auth_headers)
        assert missing.status_code == 404

    def test_admin_views(
        self, client: TestClient, admin_headers: dict, auth_headers: dict, test_user: User
    ):
        plan = create_plan(client, admin_headers)
        client.post("/api/v1/subscriptions", json={"planId": plan["id"]}, headers=auth_headers)

        by_user = client.get(f"/api/v1/subscriptions/user/{test_user.id}", headers=admin_headers)
        assert len(by_user.json()["data"]) == 1

        everything = client.get("/api/v1/subscriptions/admin/all", headers=admin_headers)
        assert everything.json()["data"]["total"] == 1

        assert client.get("/api/v1/subscriptions/admin/all", headers=auth_headers).status_code == 403


class TestEventCap:
    def test_plan_raises_event_limit(
        self, client: TestClient, admin_headers: dict, auth_headers: dict
    ):
        plan = create_plan(client, admin_headers, maxEvents=DEFAULT_MAX_EVENTS + 1)
        client.post("/api/v1/subscriptions", json={"planId": plan["id"]}, headers=auth_headers)

        for idx in range(DEFAULT_MAX_EVENTS + 1):
            create_event(client, auth_headers, title=f"Event {idx}")

        blocked = client.post(
            "/api/v1/events",
            json={
                "title": "One too many",
                "eventType": "wedding",
                "date": "2026-12-20T10:00:00Z",
                "venue": "Home",
            },
            headers=auth_headers,
        )
        assert blocked.status_code == 403

    def test_unlimited_plan(
        self, db: Session, client: TestClient, admin_headers: dict, test_user: User
    ):
        plan = create_plan(client, admin_headers, maxEvents=None)
        service = UserSubscriptionService(db)

        assert service.get_max_events_for_user(test_user.id) == DEFAULT_MAX_EVENTS
        service.subscribe(test_user.id, plan["id"])
        assert service.get_max_events_for_user(test_user.id) is None

    def test_expired_subscription_falls_back(
        self, db: Session, client: TestClient, admin_headers: dict, test_user: User
    ):
        plan = create_plan(client, admin_headers, maxEvents=50)
        service = UserSubscriptionService(db)
        subscription = service.subscribe(test_user.id, plan["id"])
        subscription.end_date = datetime(2000, 1, 1)
        db.commit()

        assert db.query(UserSubscription).count() == 1
        assert service.get_max_events_for_user(test_user.id) == DEFAULT_MAX_EVENTS
