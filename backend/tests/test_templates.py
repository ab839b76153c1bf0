# backend/tests/test_templates.py
"""
Test the template marketplace and one-time template purchases.
"""

from fastapi.testclient import TestClient

from tests.helpers.api import create_template


class TestTemplates:
    def test_admin_only_creation(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/templates",
            json={"name": "golden-lotus", "title": "Golden Lotus"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions"

    def test_create_and_fetch_by_slug(self, client: TestClient, admin_headers: dict):
        template = create_template(
            client,
            admin_headers,
            slug="golden-lotus",
            price=12.5,
            isPremium=True,
            assets={"colors": ["#ffd700"]},
        )

        assert template["isPremium"] is True
        assert template["assets"]["colors"] == ["#ffd700"]

        by_slug = client.get("/api/v1/templates/slug/golden-lotus")
        assert by_slug.status_code == 200
        assert by_slug.json()["data"]["id"] == template["id"]

    def test_name_must_be_slug_like(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/templates",
            json={"name": "Golden Lotus", "title": "Golden Lotus"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "name" in response.json()["errors"]["fieldErrors"]

    def test_duplicate_name(self, client: TestClient, admin_headers: dict):
        create_template(client, admin_headers)

        response = client.post(
            "/api/v1/templates",
            json={"name": "golden-lotus", "title": "Again"},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Template name already exists"

    def test_list_filters(self, client: TestClient, admin_headers: dict):
        create_template(client, admin_headers, name="a-wed", title="Red Wedding", isPremium=True)
        create_template(client, admin_headers, name="b-bday", title="Balloons", category="birthday")

        premium = client.get("/api/v1/templates", params={"isPremium": "true"}).json()["data"]
        assert [t["name"] for t in premium["items"]] == ["a-wed"]

        birthday = client.get("/api/v1/templates", params={"category": "birthday"}).json()["data"]
        assert birthday["total"] == 1

        search = client.get("/api/v1/templates", params={"search": "balloon"}).json()["data"]
        assert [t["name"] for t in search["items"]] == ["b-bday"]

    def test_update_and_delete(self, client: TestClient, admin_headers: dict):
        template = create_template(client, admin_headers)

        updated = client.patch(
            f"/api/v1/templates/{template['id']}", json={"price": 3}, headers=admin_headers
        )
        assert updated.json()["data"]["price"] == 3

        assert client.delete(
            f"/api/v1/templates/{template['id']}", headers=admin_headers
        ).status_code == 200
        missing = client.get(f"/api/v1/templates/{template['id']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "Template not found"


class TestTemplatePurchases:
    def test_purchase_uses_template_price(
        self, client: TestClient, admin_headers: dict, auth_headers: dict
    ):
        template = create_template(client, admin_headers, price=15)

        response = client.post(
            "/api/v1/template-purchases",
            json={"templateId": template["id"], "paymentMethod": "cash"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["price"] == 15

        check = client.get(
            f"/api/v1/template-purchases/check/{template['id']}", headers=auth_headers
        )
        assert check.json()["data"] == {"hasPurchased": True}

        mine = client.get("/api/v1/template-purchases/me", headers=auth_headers).json()["data"]
        assert mine[0]["template"]["id"] == template["id"]

    def test_free_template_costs_nothing(
        self, client: TestClient, admin_headers: dict, auth_headers: dict
    ):
        template = create_template(client, admin_headers)

        response = client.post(
            "/api/v1/template-purchases", json={"templateId": template["id"]}, headers=auth_headers
        )

        assert response.json()["data"]["price"] == 0

    def test_cannot_buy_twice(self, client: TestClient, admin_headers: dict, auth_headers: dict):
        template = create_template(client, admin_headers, price=5)
        body = {"templateId": template["id"]}
        client.post("/api/v1/template-purchases", json=body, headers=auth_headers)

        again = client.post("/api/v1/template-purchases", json=body, headers=auth_headers)

        assert again.status_code == 409
        assert again.json()["message"] == "You have already purchased this template"

    def test_unknown_template(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/template-purchases", json={"templateId": "missing"}, headers=auth_headers
        )

        assert response.status_code == 404

    def test_admin_revenue_and_listing(
        self,
        client: TestClient,
        admin_headers: dict,
        auth_headers: dict,
        other_headers: dict,
    ):
        template = create_template(client, admin_headers, price=7.5)
        for headers in (auth_headers, other_headers):
            client.post(
                "/api/v1/template-purchases", json={"templateId": template["id"]}, headers=headers
            )

        revenue = client.get("/api/v1/template-purchases/revenue", headers=admin_headers)
        assert revenue.json()["data"] == {"totalRevenue": 15}

        listing = client.get("/api/v1/template-purchases", headers=admin_headers).json()["data"]
        assert listing["total"] == 2
        assert {p["user"]["email"] for p in listing["items"]} == {
            "host@example.com",
            "other@example.com",
        }

        forbidden = client.get("/api/v1/template-purchases/revenue", headers=auth_headers)
        assert forbidden.status_code == 403
