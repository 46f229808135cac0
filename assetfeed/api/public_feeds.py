"""Public feed registry API (CRUD). Rendering lives under /feeds/{slug}."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.public_feed import (
    PublicFeedCreate,
    PublicFeedListResponse,
    PublicFeedResponse,
    PublicFeedUpdate,
)
from ..services.public_feed_service import PublicFeedService

router = APIRouter(prefix="/api/public-feeds", tags=["public-feeds"])


@router.post("", response_model=PublicFeedResponse, status_code=201)
def create_public_feed(data: PublicFeedCreate, db: Session = Depends(get_db)):
    """Register a feed. The slug must be lowercase words joined by single hyphens."""
    service = PublicFeedService(db)
    return service.to_response(service.create_feed(data))


@router.get("", response_model=PublicFeedListResponse)
def list_public_feeds(db: Session = Depends(get_db)):
    service = PublicFeedService(db)
    return PublicFeedListResponse(feeds=[service.to_response(feed) for feed in service.list_feeds()])


@router.get("/{feed_id}", response_model=PublicFeedResponse)
def get_public_feed(feed_id: str, db: Session = Depends(get_db)):
    service = PublicFeedService(db)
    return service.to_response(service.get_feed(feed_id))


@router.put("/{feed_id}", response_model=PublicFeedResponse)
def update_public_feed(feed_id: str, data: PublicFeedUpdate, db: Session = Depends(get_db)):
    service = PublicFeedService(db)
    return service.to_response(service.update_feed(feed_id, data))


@router.delete("/{feed_id}", status_code=204)
def delete_public_feed(feed_id: str, db: Session = Depends(get_db)):
    PublicFeedService(db).delete_feed(feed_id)
