"""Named public feeds: CRUD plus slug resolution and rendering."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import DatabaseError, FeedNotFoundError, ValidationError
from ..models import PublicFeed
from ..repositories import AssetRepository, PublicFeedRepository, SyndicationRepository
from ..schemas.public_feed import (
    SLUG_MESSAGE,
    SLUG_PATTERN,
    PublicFeedCreate,
    PublicFeedResponse,
    PublicFeedUpdate,
)
from .feed_filter import parse_criterion
from .feed_service import FeedFormat, FeedService, RenderedFeed

logger = logging.getLogger(__name__)


class PublicFeedService:
    """Registry of public feeds published under ``/feeds/{slug}``.

    Unknown and inactive slugs are indistinguishable to callers: both
    raise FeedNotFoundError.
    """

    def __init__(self, db: Session):
        self.db = db
        self.feed_repo = PublicFeedRepository(db)
        self.asset_repo = AssetRepository(db)
        self.syndication_repo = SyndicationRepository(db)
        self.feed_service = FeedService(db)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_feed(self, data: PublicFeedCreate) -> PublicFeed:
        slug = self._check_slug(data.slug)
        if self.feed_repo.get_by_slug(slug):
            raise ValidationError(f"Feed slug already exists: {slug}", field="slug")
        parse_criterion(data.filter_type, data.filter_value)

        feed = PublicFeed(
            id=str(uuid.uuid4()),
            name=data.name,
            description=data.description,
            slug=slug,
            filter_type=data.filter_type,
            filter_value=self._stored_value(data.filter_type, data.filter_value),
            is_active=data.is_active,
        )
        self._commit(slug, pending=feed)
        self.db.refresh(feed)
        logger.info("Created public feed", extra={"feed_id": feed.id, "slug": slug})
        return feed

    def list_feeds(self) -> List[PublicFeed]:
        return self.feed_repo.get_all()

    def get_feed(self, feed_id: str) -> PublicFeed:
        return self.feed_repo.get_by_id(feed_id)

    def update_feed(self, feed_id: str, data: PublicFeedUpdate) -> PublicFeed:
        feed = self.feed_repo.get_by_id(feed_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("slug") is not None and changes["slug"] != feed.slug:
            slug = self._check_slug(changes["slug"])
            if self.feed_repo.get_by_slug(slug):
                raise ValidationError(f"Feed slug already exists: {slug}", field="slug")

        filter_type = changes.get("filter_type") or feed.filter_type
        filter_value = changes["filter_value"] if "filter_value" in changes else feed.filter_value
        if filter_type == "all":
            filter_value = None
        parse_criterion(filter_type, filter_value)

        for field in ("name", "description", "slug", "is_active"):
            if field in changes and (changes[field] is not None or field == "description"):
                setattr(feed, field, changes[field])
        feed.filter_type = filter_type
        feed.filter_value = self._stored_value(filter_type, filter_value)

        self._commit(feed.slug)
        self.db.refresh(feed)
        logger.info("Updated public feed", extra={"feed_id": feed.id})
        return feed

    def delete_feed(self, feed_id: str) -> None:
        feed = self.feed_repo.get_by_id(feed_id)
        self.feed_repo.delete(feed)
        self.db.commit()
        logger.info("Deleted public feed", extra={"feed_id": feed_id})

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def resolve(self, slug: str) -> PublicFeed:
        """Active feed for *slug*. Raises FeedNotFoundError otherwise."""
        feed = self.feed_repo.get_active_by_slug(slug)
        if feed is None:
            raise FeedNotFoundError(slug)
        return feed

    def render(self, slug: str, fmt: FeedFormat = FeedFormat.XML) -> RenderedFeed:
        return self.feed_service.public_feed(self.resolve(slug), fmt)

    def to_response(self, feed: PublicFeed) -> PublicFeedResponse:
        """Projection with urls derived from the current site url."""
        site_url = self.syndication_repo.get_or_create_settings().site_url
        public_url = f"{site_url}/feeds/{feed.slug}"
        folder_name = None
        if feed.filter_type == "folder" and feed.filter_value:
            folder = self.asset_repo.get_by_id_optional(feed.filter_value)
            folder_name = folder.name if folder is not None else None
        return PublicFeedResponse(
            id=feed.id,
            name=feed.name,
            description=feed.description,
            slug=feed.slug,
            filter_type=feed.filter_type,
            filter_value=feed.filter_value,
            folder_name=folder_name,
            is_active=bool(feed.is_active),
            public_url=public_url,
            feed_xml_url=f"{public_url}.xml",
            feed_json_url=f"{public_url}.json",
            created_at=feed.created_at,
            updated_at=feed.updated_at,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_slug(slug: str) -> str:
        slug = (slug or "").strip()
        if not SLUG_PATTERN.match(slug):
            raise ValidationError(SLUG_MESSAGE, field="slug")
        return slug

    @staticmethod
    def _stored_value(filter_type: str, filter_value):
        if filter_type == "all":
            return None
        return (filter_value or "").strip() or None

    def _commit(self, slug: str, pending: Optional[PublicFeed] = None) -> None:
        """Stage *pending* and commit, mapping a lost race on the unique slug
        to ValidationError."""
        try:
            if pending is not None:
                self.feed_repo.create(pending)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if "slug" not in str(exc.orig):
                raise DatabaseError("Failed to save public feed", original_error=exc) from exc
            logger.warning("Public feed slug conflict", extra={"slug": slug, "error": str(exc.orig)})
            raise ValidationError(f"Feed slug already exists: {slug}", field="slug") from exc
