"""Tests for the public feed registry and /feeds/{slug} publishing."""

from xml.etree import ElementTree

from tests.conftest import make_file, make_folder


def _create(client, slug="weekly-news", **overrides):
    payload = {"name": "Weekly News", "slug": slug, "filter_type": "all"}
    payload.update(overrides)
    return client.post("/api/public-feeds", json=payload)


class TestRegistry:

    def test_create_derives_urls(self, client):
        resp = _create(client)
        assert resp.status_code == 201
        data = resp.json()
        assert data["slug"] == "weekly-news"
        assert data["is_active"] is True
        assert data["filter_value"] is None
        assert data["public_url"] == "http://localhost:8000/feeds/weekly-news"
        assert data["feed_xml_url"] == "http://localhost:8000/feeds/weekly-news.xml"
        assert data["feed_json_url"] == "http://localhost:8000/feeds/weekly-news.json"

    def test_bad_slug_rejected(self, client):
        resp = _create(client, slug="bad slug")
        assert resp.status_code == 422
        assert client.get("/api/public-feeds").json()["feeds"] == []

    def test_uppercase_slug_rejected(self, client):
        assert _create(client, slug="News").status_code == 422

    def test_hyphenated_slug_accepted(self, client):
        resp = _create(client, slug="bad-slug")
        assert resp.status_code == 201
        assert client.get("/feeds/bad-slug").status_code == 200
        assert client.get("/feeds/bad-slug.xml").status_code == 200
        assert client.get("/feeds/bad-slug.json").status_code == 200

    def test_duplicate_slug(self, client):
        assert _create(client).status_code == 201
        resp = _create(client, name="Other")
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert resp.json()["details"] == {"field": "slug"}

    def test_filter_value_required(self, client):
        resp = _create(client, filter_type="folder")
        assert resp.status_code == 400

    def test_invalid_type_value(self, client):
        resp = _create(client, filter_type="type", filter_value="podcast")
        assert resp.status_code == 400

    def test_folder_name_in_response(self, client, db):
        folder = make_folder(db, "Podcasts")
        data = _create(client, filter_type="folder", filter_value=folder.id).json()
        assert data["folder_name"] == "Podcasts"

    def test_list_get_update_delete(self, client):
        feed_id = _create(client).json()["id"]
        assert [f["id"] for f in client.get("/api/public-feeds").json()["feeds"]] == [feed_id]
        assert client.get(f"/api/public-feeds/{feed_id}").json()["name"] == "Weekly News"

        resp = client.put(f"/api/public-feeds/{feed_id}", json={"name": "Renamed", "slug": "renamed"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Renamed"
        assert resp.json()["public_url"].endswith("/feeds/renamed")
        assert client.get("/feeds/weekly-news").status_code == 404
        assert client.get("/feeds/renamed").status_code == 200

        assert client.delete(f"/api/public-feeds/{feed_id}").status_code == 204
        assert client.get(f"/api/public-feeds/{feed_id}").status_code == 404

    def test_update_to_taken_slug(self, client):
        _create(client, slug="one")
        second = _create(client, slug="two").json()["id"]
        resp = client.put(f"/api/public-feeds/{second}", json={"slug": "one"})
        assert resp.status_code == 400

    def test_urls_follow_site_url(self, client):
        feed_id = _create(client).json()["id"]
        client.put("/api/syndication/settings", json={"site_url": "https://cdn.example.org/"})
        data = client.get(f"/api/public-feeds/{feed_id}").json()
        assert data["public_url"] == "https://cdn.example.org/feeds/weekly-news"


class TestPublishing:

    def test_unknown_slug(self, client):
        resp = client.get("/feeds/nope")
        assert resp.status_code == 404
        assert resp.json()["error"] == "FEED_NOT_FOUND"

    def test_inactive_slug_is_not_found(self, client):
        _create(client, is_active=False)
        assert client.get("/feeds/weekly-news").status_code == 404
        assert client.get("/feeds/weekly-news.json").status_code == 404

    def test_channel_uses_feed_name(self, client, db):
        make_file(db, "a.txt")
        _create(client, description="Only the news")
        resp = client.get("/feeds/weekly-news")
        assert resp.headers["content-type"].startswith("application/rss+xml")
        channel = ElementTree.fromstring(resp.text).find("channel")
        assert channel.findtext("title") == "Weekly News"
        assert channel.findtext("description") == "Only the news"
        assert len(channel.findall("item")) == 1

    def test_type_filter(self, client, db):
        song = make_file(db, "song.mp3", primary_type="audio", mime_type="audio/mpeg")
        make_file(db, "notes.txt")
        _create(client, slug="music", filter_type="type", filter_value="audio")
        items = client.get("/feeds/music.json").json()["items"]
        assert [i["id"] for i in items] == [song.id]

    def test_tag_filter(self, client, db):
        hit = make_file(db, "a.txt", tags=["weekly-news"])
        make_file(db, "b.txt", tags=["sports"])
        _create(client, slug="tagged", filter_type="tag", filter_value="news")
        items = client.get("/feeds/tagged.json").json()["items"]
        assert [i["id"] for i in items] == [hit.id]

    def test_folder_filter_after_folder_deleted(self, client, db):
        folder = make_folder(db, "Gone")
        make_file(db, "a.txt", parent_id=folder.id)
        _create(client, slug="gone", filter_type="folder", filter_value=folder.id)
        client.delete(f"/api/assets/{folder.id}")
        resp = client.get("/feeds/gone.json")
        assert resp.status_code == 200
        assert resp.json()["items"] == []

    def test_folder_feed_falls_back_to_folder_description(self, client, db):
        folder = make_folder(db, "Shows")
        make_file(db, "a.txt", parent_id=folder.id)
        client.put(
            f"/api/folders/{folder.id}/syndication",
            json={"include_folder": True, "feed_description": "Every show we publish"},
        )
        feed_id = _create(client, slug="shows", filter_type="folder", filter_value=folder.id).json()["id"]
        assert client.get("/feeds/shows.json").json()["description"] == "Every show we publish"

        client.put(f"/api/public-feeds/{feed_id}", json={"description": "Hand-picked"})
        assert client.get("/feeds/shows.json").json()["description"] == "Hand-picked"

    def test_folder_feed_without_override_uses_site_description(self, client, db):
        folder = make_folder(db, "Plain")
        _create(client, slug="plain", filter_type="folder", filter_value=folder.id)
        settings = client.get("/api/syndication/settings").json()
        assert client.get("/feeds/plain.json").json()["description"] == settings["feed_description"]
