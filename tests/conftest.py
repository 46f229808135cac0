"""Shared test fixtures for the AssetFeed test suite.

All tests run against a throwaway SQLite file. Payloads and feed snapshots
go to temporary directories. Each test starts from freshly created tables
with the default settings row seeded.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point the app at temporary storage before any app imports.
_TMP_ROOT = tempfile.mkdtemp(prefix="assetfeed-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_ROOT, 'test.db')}"
os.environ["STORAGE_DIR"] = os.path.join(_TMP_ROOT, "uploads")
os.environ["FEED_OUTPUT_DIR"] = os.path.join(_TMP_ROOT, "feeds")
os.environ["FFPROBE_PATH"] = os.path.join(_TMP_ROOT, "no-ffprobe")
os.environ["LOG_FORMAT"] = "text"
os.makedirs(os.environ["FEED_OUTPUT_DIR"], exist_ok=True)

import uuid

import pytest
from fastapi.testclient import TestClient

from assetfeed.database import Base, get_db, engine, SessionLocal
from assetfeed.main import app
from assetfeed.core.seeder import ensure_default_settings
from assetfeed.models import AssetNode

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_tables():
    """Recreate all tables before each test for isolation."""
    from assetfeed import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_settings(db)
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_folder(db, name: str = "Folder", parent_id=None, **overrides) -> AssetNode:
    """Insert a folder row directly."""
    folder = AssetNode(
        id=str(uuid.uuid4()),
        name=name,
        is_folder=True,
        parent_id=parent_id,
        primary_type="other",
        format="folder",
        mime_type="application/x-folder",
        tags=[],
    )
    for key, value in overrides.items():
        setattr(folder, key, value)
    db.add(folder)
    db.commit()
    return folder


def make_file(
    db,
    name: str = "file.txt",
    parent_id=None,
    primary_type: str = "text",
    mime_type: str = "text/plain",
    include: bool = True,
    minutes: int = 0,
    **overrides,
) -> AssetNode:
    """Insert a file row directly, created ``minutes`` after BASE_TIME."""
    created = BASE_TIME + timedelta(minutes=minutes)
    node = AssetNode(
        id=str(uuid.uuid4()),
        name=name,
        is_folder=False,
        parent_id=parent_id,
        primary_type=primary_type,
        format=name.rsplit(".", 1)[-1] if "." in name else "unknown",
        mime_type=mime_type,
        size_bytes=1024,
        tags=[],
        include_in_feed=include,
        created_at=created,
        modified_at=created,
    )
    for key, value in overrides.items():
        setattr(node, key, value)
    db.add(node)
    db.commit()
    return node


def upload(client, name: str, content: bytes = b"hello", parent_id: str = "root", content_type: str = "text/plain"):
    """Upload a single file through the API and return the created node JSON."""
    resp = client.post(
        "/api/assets/upload",
        files=[("files", (name, content, content_type))],
        data={"parent_id": parent_id},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["assets"][0]
