"""Folder API: creation, per-folder feeds and folder syndication overrides."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.asset import AssetResponse, FolderCreate
from ..schemas.syndication import FolderSyndicationResponse, FolderSyndicationUpdate
from ..services.asset_service import AssetService
from ..services.feed_service import FeedFormat, FeedService
from ..services.settings_service import SettingsService
from .feeds import feed_response

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.post("", response_model=AssetResponse, status_code=201)
def create_folder(data: FolderCreate, db: Session = Depends(get_db)):
    """Create a folder under ``parent_id`` (``"root"`` for the top level)."""
    return AssetService(db).create_folder(data)


# -- Folder feeds ---------------------------------------------------------

@router.get("/{folder_id}/feed.xml")
def folder_feed_xml(folder_id: str, db: Session = Depends(get_db)):
    return feed_response(FeedService(db).folder_feed(folder_id, FeedFormat.XML), FeedFormat.XML)


@router.get("/{folder_id}/feed.json")
def folder_feed_json(folder_id: str, db: Session = Depends(get_db)):
    return feed_response(FeedService(db).folder_feed(folder_id, FeedFormat.JSON), FeedFormat.JSON)


@router.get("/{folder_id}/feed")
def folder_feed(folder_id: str, db: Session = Depends(get_db)):
    """RSS feed of included files anywhere below the folder."""
    return feed_response(FeedService(db).folder_feed(folder_id, FeedFormat.XML), FeedFormat.XML)


# -- Folder syndication overrides -----------------------------------------

@router.get("/{folder_id}/syndication", response_model=FolderSyndicationResponse)
def get_folder_syndication(folder_id: str, db: Session = Depends(get_db)):
    return SettingsService(db).get_folder_settings(folder_id)


@router.put("/{folder_id}/syndication", response_model=FolderSyndicationResponse)
def update_folder_syndication(
    folder_id: str,
    data: FolderSyndicationUpdate,
    db: Session = Depends(get_db),
):
    """Create or update the override. With include and auto-include both on,
    the folder's direct files are switched into the feed."""
    return SettingsService(db).update_folder_settings(folder_id, data)
