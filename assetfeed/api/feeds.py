"""Feed API: global RSS/JSON feeds and public feeds by slug.

Feed responses are public and cacheable: they carry an open CORS header of
their own, independent of the app-wide CORS origin list.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.feed_service import FeedFormat, FeedService, RenderedFeed
from ..services.public_feed_service import PublicFeedService

RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"
FEED_HEADERS = {
    "Cache-Control": "public, max-age=300",
    "Access-Control-Allow-Origin": "*",
}

router = APIRouter(tags=["feeds"])


def feed_response(rendered: RenderedFeed, fmt: FeedFormat) -> Response:
    """Wrap a rendered feed with its content type and cache headers."""
    if fmt == FeedFormat.JSON:
        return JSONResponse(content=rendered, headers=FEED_HEADERS)
    return Response(content=rendered, media_type=RSS_MEDIA_TYPE, headers=FEED_HEADERS)


# -- Global feed ----------------------------------------------------------

@router.get("/api/feed")
def global_feed_xml(db: Session = Depends(get_db)):
    return feed_response(FeedService(db).global_feed(FeedFormat.XML), FeedFormat.XML)


@router.get("/api/feed.xml")
def global_feed_xml_file(db: Session = Depends(get_db)):
    """Alias of /api/feed with an explicit file extension."""
    return feed_response(FeedService(db).global_feed(FeedFormat.XML), FeedFormat.XML)


@router.get("/rss")
def global_feed_rss(db: Session = Depends(get_db)):
    """Alias of /api/feed for feed readers that look for /rss."""
    return feed_response(FeedService(db).global_feed(FeedFormat.XML), FeedFormat.XML)


@router.get("/api/feed.json")
def global_feed_json(db: Session = Depends(get_db)):
    return feed_response(FeedService(db).global_feed(FeedFormat.JSON), FeedFormat.JSON)


# -- Public feeds ---------------------------------------------------------
# Suffixed routes first: "{slug}" alone would also match "name.xml".

@router.get("/feeds/{slug}.xml")
def public_feed_xml(slug: str, db: Session = Depends(get_db)):
    return feed_response(PublicFeedService(db).render(slug, FeedFormat.XML), FeedFormat.XML)


@router.get("/feeds/{slug}.json")
def public_feed_json(slug: str, db: Session = Depends(get_db)):
    return feed_response(PublicFeedService(db).render(slug, FeedFormat.JSON), FeedFormat.JSON)


@router.get("/feeds/{slug}")
def public_feed(slug: str, db: Session = Depends(get_db)):
    """Public feed as RSS. Unknown and inactive slugs both return 404."""
    return feed_response(PublicFeedService(db).render(slug, FeedFormat.XML), FeedFormat.XML)
