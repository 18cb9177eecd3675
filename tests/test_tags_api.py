# Tests for the tag endpoints.

import pytest


class TestListTags:
    """Tests for GET /api/tags."""

    def test_empty_table(self, client, store):
        resp = client.get("/api/tags")
        assert resp.status_code == 200
        assert resp.json() == {"tags": []}

    def test_lists_in_storage_order(self, client, store):
        store.add_tag("Python", "python", "The language")
        store.add_tag("SQL", "sql")

        resp = client.get("/api/tags")

        assert resp.status_code == 200
        assert resp.json() == {
            "tags": [
                {"id": "1", "name": "Python", "description": "The language", "slug": "python"},
                {"id": "2", "name": "SQL", "description": "", "slug": "sql"},
            ]
        }

    def test_database_down_is_not_an_empty_list(self, client, store):
        store.down = True
        resp = client.get("/api/tags")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Database unavailable"}


class TestCreateTag:
    """Tests for POST /api/tags."""

    def test_create(self, client, store):
        resp = client.post(
            "/api/tags",
            json={"name": "Rust", "description": "Systems language", "slug": "rust"},
        )
        assert resp.status_code == 200
        tag = resp.json()["tag"]
        assert tag == {"id": "1", "name": "Rust", "description": "Systems language", "slug": "rust"}
        assert client.get("/api/tags").json()["tags"] == [tag]

    def test_description_is_optional(self, client, store):
        resp = client.post("/api/tags", json={"name": "Rust", "slug": "rust"})
        assert resp.status_code == 200
        assert resp.json()["tag"]["description"] == ""

    def test_duplicate_slug(self, client, store):
        store.add_tag("Rust", "rust")
        resp = client.post("/api/tags", json={"name": "Rust again", "slug": "rust"})
        assert resp.status_code == 409
        assert resp.json() == {"error": "Tag slug already exists"}

    def test_missing_fields(self, client, store):
        resp = client.post("/api/tags", json={"name": "Rust"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}

    @pytest.mark.parametrize("slug", ["has space", "slash/y", ""])
    def test_invalid_slug(self, client, store, slug):
        resp = client.post("/api/tags", json={"name": "Rust", "slug": slug})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid tag request"}
        assert store.tags == {}

    def test_malformed_json(self, client, store):
        resp = client.post("/api/tags", content=b"{", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON format"}
