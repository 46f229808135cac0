"""Tests for library analytics: overview totals and upload activity over time."""

from datetime import datetime, timedelta, timezone

from assetfeed.services.asset_service import AssetService
from tests.conftest import make_file, make_folder

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestOverview:

    def test_totals(self, client, db):
        folder = make_folder(db, "F")
        make_file(db, "a.txt", parent_id=folder.id, uploaded_by="ann")
        make_file(db, "b.mp3", primary_type="audio", mime_type="audio/mpeg",
                  include=False, uploaded_by="bob", size_bytes=3072)
        make_file(db, "c.txt", uploaded_by="ann")
        make_file(db, "d.txt", uploaded_by="")

        resp = client.get("/api/analytics/overview")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_files"] == 4
        assert data["total_folders"] == 1
        assert data["total_feed_items"] == 3
        assert data["total_size"] == 6144
        assert data["total_size_human"] == "6.0 KB"
        assert data["avg_size"] == 1536.0
        assert data["unique_uploaders"] == 2
        assert data["type_breakdown"] == {"text": 3, "audio": 1}

    def test_empty_library(self, client):
        data = client.get("/api/analytics/overview").json()
        assert data["total_files"] == 0
        assert data["avg_size"] == 0.0
        assert data["unique_uploaders"] == 0
        assert data["recent_activity"] == []

    def test_recent_activity_groups_by_day(self, db):
        make_file(db, "a.txt", created_at=NOW)
        make_file(db, "b.txt", created_at=NOW - timedelta(days=1))
        make_file(db, "c.txt", created_at=NOW - timedelta(days=1, hours=2))
        make_file(db, "old.txt", created_at=NOW - timedelta(days=40))
        make_folder(db, "F", created_at=NOW)

        overview = AssetService(db).analytics_overview(now=NOW)
        activity = [(day.date, day.count) for day in overview.recent_activity]
        assert activity == [("2024-06-15", 1), ("2024-06-14", 2)]


class TestMonthlyUploads:

    def test_groups_by_month_newest_first(self, db):
        make_file(db, "a.txt", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        make_file(db, "b.txt", created_at=datetime(2024, 6, 10, tzinfo=timezone.utc), size_bytes=2048)
        make_file(db, "c.txt", created_at=datetime(2024, 4, 20, tzinfo=timezone.utc))
        make_file(db, "old.txt", created_at=datetime(2023, 5, 1, tzinfo=timezone.utc))

        result = AssetService(db).monthly_uploads(now=NOW)
        months = [(m.month, m.count, m.total_size) for m in result.months]
        assert months == [("2024-06", 2, 3072), ("2024-04", 1, 1024)]

    def test_endpoint(self, client, db):
        make_file(db, "a.txt", created_at=datetime.now(timezone.utc))
        resp = client.get("/api/analytics/monthly-uploads")
        assert resp.status_code == 200
        months = resp.json()["months"]
        assert len(months) == 1
        assert months[0]["count"] == 1
        assert months[0]["total_size"] == 1024
