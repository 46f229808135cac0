"""Syndication settings API: global settings and feed preview."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.syndication import (
    SyndicationPreviewResponse,
    SyndicationSettingsResponse,
    SyndicationSettingsUpdate,
)
from ..services.feed_service import FeedService
from ..services.settings_service import SettingsService

router = APIRouter(prefix="/api/syndication", tags=["syndication"])


@router.get("/settings", response_model=SyndicationSettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    return SettingsService(db).get_settings()


@router.put("/settings", response_model=SyndicationSettingsResponse)
def update_settings(data: SyndicationSettingsUpdate, db: Session = Depends(get_db)):
    """Partial update; the global feed is regenerated with the saved values."""
    return SettingsService(db).update_settings(data)


@router.get("/preview", response_model=SyndicationPreviewResponse)
def preview_feed(db: Session = Depends(get_db)):
    """Settings plus the items the global feed currently carries."""
    return FeedService(db).preview()
