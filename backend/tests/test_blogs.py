# backend/tests/test_blogs.py
"""
Test blog posts: slugs, publication rules and author permissions.
"""

from fastapi.testclient import TestClient

from pkasla.services.blog_service import generate_slug

CONTENT = (
    "Planning a Khmer wedding starts months ahead. Families agree on a date, "
    "book the venue and send invitations to every relative and friend."
)


def write_blog(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {"title": "Wedding Planning 101", "content": CONTENT, "tags": ["wedding"]}
    payload.update(overrides)
    response = client.post("/api/v1/blogs", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestSlugs:
    def test_generate_slug(self):
        assert generate_slug("  Hello, World!  ") == "hello-world"
        assert generate_slug("Tips & Tricks -- 2026") == "tips-tricks-2026"
        assert len(generate_slug("word " * 50)) == 100

    def test_slug_from_title(self, client: TestClient, auth_headers: dict):
        blog = write_blog(client, auth_headers)

        assert blog["slug"] == "wedding-planning-101"
        assert blog["status"] == "draft"
        assert blog["publishedAt"] is None

    def test_duplicate_slug(self, client: TestClient, auth_headers: dict):
        write_blog(client, auth_headers)

        response = client.post(
            "/api/v1/blogs",
            json={"title": "Wedding Planning 101", "content": CONTENT},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "A blog with this slug already exists"

    def test_content_minimum(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/v1/blogs", json={"title": "Short", "content": "Too short"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert "content" in response.json()["errors"]["fieldErrors"]


class TestPublication:
    def test_listing_shows_only_published(
        self, client: TestClient, auth_headers: dict, admin_headers: dict
    ):
        write_blog(client, auth_headers, title="Draft Post")
        write_blog(client, auth_headers, title="Live Post", status="published")

        public = client.get("/api/v1/blogs", params={"status": "draft"}).json()["data"]
        assert [b["title"] for b in public["data"]] == ["Live Post"]
        assert public["total"] == 1

        admin = client.get(
            "/api/v1/blogs", params={"status": "draft"}, headers=admin_headers
        ).json()["data"]
        assert [b["title"] for b in admin["data"]] == ["Draft Post"]

    def test_publishing_sets_date(self, client: TestClient, auth_headers: dict):
        blog = write_blog(client, auth_headers)

        response = client.patch(
            f"/api/v1/blogs/{blog['id']}/status", json={"status": "published"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["publishedAt"] is not None

    def test_slug_views_count_published_only(self, client: TestClient, auth_headers: dict):
        write_blog(client, auth_headers, title="Draft Post")
        write_blog(client, auth_headers, title="Live Post", status="published")

        client.get("/api/v1/blogs/slug/live-post")
        live = client.get("/api/v1/blogs/slug/live-post").json()["data"]
        draft = client.get("/api/v1/blogs/slug/draft-post").json()["data"]

        assert live["views"] == 2
        assert draft["views"] == 0
        assert client.get("/api/v1/blogs/slug/nope").status_code == 404

    def test_tag_and_keyword_filters(self, client: TestClient, auth_headers: dict):
        write_blog(client, auth_headers, title="Flowers Guide", status="published", tags=["decor"])
        write_blog(client, auth_headers, title="Music Guide", status="published", tags=["music"])

        by_tag = client.get("/api/v1/blogs", params={"tag": "decor"}).json()["data"]
        assert [b["title"] for b in by_tag["data"]] == ["Flowers Guide"]

        by_keyword = client.get("/api/v1/blogs", params={"keyword": "music"}).json()["data"]
        assert [b["title"] for b in by_keyword["data"]] == ["Music Guide"]

    def test_khmer_tag_filter(self, client: TestClient, auth_headers: dict):
        write_blog(
            client, auth_headers, title="Khmer Ceremony", status="published", tags=["អាពាហ៍ពិពាហ៍"]
        )
        write_blog(client, auth_headers, title="Decor Ideas", status="published", tags=["decor"])

        listing = client.get("/api/v1/blogs", params={"tag": "អាពាហ៍ពិពាហ៍"}).json()["data"]

        assert [b["title"] for b in listing["data"]] == ["Khmer Ceremony"]
        assert listing["data"][0]["tags"] == ["អាពាហ៍ពិពាហ៍"]

    def test_like_wildcards_match_literally(self, client: TestClient, auth_headers: dict):
        write_blog(client, auth_headers, title="Alphabet Soup", status="published", tags=["abc"])
        write_blog(client, auth_headers, title="A 100% Khmer Menu", status="published")

        def titles(**params):
            data = client.get("/api/v1/blogs", params=params).json()["data"]
            return [b["title"] for b in data["data"]]

        assert titles(tag="a_c") == []
        assert titles(tag="%") == []
        assert titles(keyword="100%") == ["A 100% Khmer Menu"]
        assert titles(keyword="Alpha_et") == []


class TestAuthorship:
    def test_title_change_regenerates_slug(self, client: TestClient, auth_headers: dict):
        blog = write_blog(client, auth_headers)

        updated = client.patch(
            f"/api/v1/blogs/{blog['id']}", json={"title": "Budget Planning"}, headers=auth_headers
        ).json()["data"]

        assert updated["slug"] == "budget-planning"

    def test_only_author_or_admin_edits(
        self, client: TestClient, auth_headers: dict, other_headers: dict, admin_headers: dict
    ):
        blog = write_blog(client, auth_headers)

        denied = client.patch(
            f"/api/v1/blogs/{blog['id']}", json={"excerpt": "x"}, headers=other_headers
        )
        assert denied.status_code == 403
        assert denied.json()["message"] == "You can only update your own blogs"

        admin = client.patch(
            f"/api/v1/blogs/{blog['id']}", json={"excerpt": "Edited"}, headers=admin_headers
        )
        assert admin.json()["data"]["excerpt"] == "Edited"

        forbidden_delete = client.delete(f"/api/v1/blogs/{blog['id']}", headers=other_headers)
        assert forbidden_delete.json()["message"] == "You can only delete your own blogs"

        assert client.delete(f"/api/v1/blogs/{blog['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/v1/blogs/{blog['id']}").status_code == 404

    def test_my_blogs(self, client: TestClient, auth_headers: dict, other_headers: dict):
        write_blog(client, auth_headers, title="Mine")
        write_blog(client, other_headers, title="Theirs")

        mine = client.get("/api/v1/blogs/my-blogs", headers=auth_headers).json()["data"]

        assert [b["title"] for b in mine] == ["Mine"]
