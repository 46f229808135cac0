"""Tests for /health, / and /robots.txt endpoints."""

from tests.conftest import make_file, make_folder


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["db"] == "ok"
        assert "uptime_seconds" in data
        assert data["version"] == "1.0.0"
        assert data["asset_count"] == 0

    def test_asset_count_includes_folders(self, client, db):
        folder = make_folder(db, "F")
        make_file(db, "a.txt", parent_id=folder.id)
        assert client.get("/health").json()["asset_count"] == 2

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "AssetFeed API"
        assert data["feeds"]["rss"] == "/api/feed"


class TestRobots:

    def test_feeds_allowed_api_disallowed(self, client):
        resp = client.get("/robots.txt")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        lines = resp.text.splitlines()
        assert "Allow: /feeds/" in lines
        assert "Disallow: /api/" in lines


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_is_propagated(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"
