"""API tests for global syndication settings, folder overrides and preview."""

from tests.conftest import make_file, make_folder


class TestSettings:

    def test_defaults_seeded(self, client):
        data = client.get("/api/syndication/settings").json()
        assert data["site_url"] == "http://localhost:8000"
        assert data["max_items"] == 20
        assert data["auto_include_new_uploads"] is False

    def test_partial_update(self, client):
        resp = client.put("/api/syndication/settings", json={"feed_title": "Radio"})
        assert resp.status_code == 200
        data = client.get("/api/syndication/settings").json()
        assert data["feed_title"] == "Radio"
        assert data["site_title"] == "AssetFeed"

    def test_site_url_trailing_slash_stripped(self, client):
        data = client.put("/api/syndication/settings", json={"site_url": " https://example.com/ "}).json()
        assert data["site_url"] == "https://example.com"

    def test_site_url_scheme_required(self, client):
        assert client.put("/api/syndication/settings", json={"site_url": "example.com"}).status_code == 422

    def test_max_items_bounds(self, client):
        assert client.put("/api/syndication/settings", json={"max_items": 0}).status_code == 422
        assert client.put("/api/syndication/settings", json={"max_items": 501}).status_code == 422


class TestFolderOverrides:

    def test_defaults_when_none_stored(self, client, db):
        folder = make_folder(db, "Shows", description="All shows")
        data = client.get(f"/api/folders/{folder.id}/syndication").json()
        assert data["folder_name"] == "Shows"
        assert data["include_folder"] is False
        assert data["auto_include_new_files"] is False
        assert data["feed_title"] == "Shows"
        assert data["feed_description"] == "All shows"
        assert data["feed_url"] == f"http://localhost:8000/api/folders/{folder.id}/feed"

    def test_upsert(self, client, db):
        folder = make_folder(db, "Shows")
        url = f"/api/folders/{folder.id}/syndication"
        client.put(url, json={"include_folder": True, "feed_title": "First"})
        client.put(url, json={"include_folder": True, "feed_title": "Second"})
        assert client.get(url).json()["feed_title"] == "Second"

    def test_backfill_direct_files(self, client, db):
        folder = make_folder(db, "Shows")
        sub = make_folder(db, "Sub", parent_id=folder.id)
        direct = make_file(db, "ep1.mp3", parent_id=folder.id, primary_type="audio", include=False, feed_title="Kept")
        nested = make_file(db, "ep2.mp3", parent_id=sub.id, primary_type="audio", include=False)

        client.put(
            f"/api/folders/{folder.id}/syndication",
            json={"include_folder": True, "auto_include_new_files": True},
        )

        direct_data = client.get(f"/api/assets/{direct.id}").json()
        assert direct_data["include_in_feed"] is True
        assert direct_data["feed_title"] == "Kept"
        assert direct_data["feed_category"] == "audio"
        assert direct_data["feed_guid"] == direct.id
        assert direct_data["feed_publish_date"] is not None
        assert client.get(f"/api/assets/{nested.id}").json()["include_in_feed"] is False

    def test_no_backfill_without_include(self, client, db):
        folder = make_folder(db, "Shows")
        node = make_file(db, "ep1.mp3", parent_id=folder.id, include=False)
        client.put(
            f"/api/folders/{folder.id}/syndication",
            json={"include_folder": False, "auto_include_new_files": True},
        )
        assert client.get(f"/api/assets/{node.id}").json()["include_in_feed"] is False

    def test_unknown_folder(self, client):
        assert client.get("/api/folders/missing/syndication").status_code == 404
        resp = client.put("/api/folders/missing/syndication", json={"include_folder": True})
        assert resp.status_code == 404


class TestPreview:

    def test_preview_lists_global_items(self, client, db):
        node = make_file(db, "a.txt")
        make_file(db, "b.txt", include=False)
        data = client.get("/api/syndication/preview").json()
        assert data["settings"]["feed_title"] == "AssetFeed"
        assert [i["id"] for i in data["items"]] == [node.id]
        assert data["items"][0]["item_url"] == f"http://localhost:8000/api/assets/file/{node.id}"
