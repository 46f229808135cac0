"""Feed assembly: pick the criterion, apply the metadata fallback chain, render.

Three feed families share one pipeline:
    global  -- every included file, channel metadata from settings
    folder  -- included files below a folder, override -> settings fallbacks
    public  -- a named PublicFeed's criterion, feed name/description first

The settings row is loaded once per call and passed down explicitly.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings as app_settings
from ..models import PublicFeed, SyndicationSettings
from ..repositories import AssetRepository, SyndicationRepository
from ..schemas.syndication import PreviewItem, SyndicationPreviewResponse, SyndicationSettingsResponse
from .feed_filter import AllCriterion, Criterion, FeedFilterEngine, FolderCriterion, parse_criterion
from .feed_renderer import FeedContext, item_url, render_json, render_xml

# Files the global feed is mirrored to after every mutation.
GLOBAL_FEED_FILENAMES = ("rss.xml", "feed.xml")

logger = logging.getLogger(__name__)


class FeedFormat(str, Enum):
    XML = "xml"
    JSON = "json"


RenderedFeed = Union[str, Dict[str, Any]]


class FeedService:
    """Builds global, folder and public feeds."""

    def __init__(self, db: Session, filter_engine: Optional[FeedFilterEngine] = None):
        self.db = db
        self.asset_repo = AssetRepository(db)
        self.syndication_repo = SyndicationRepository(db)
        self.filter_engine = filter_engine or FeedFilterEngine(db)

    def load_settings(self) -> SyndicationSettings:
        return self.syndication_repo.get_or_create_settings()

    # ------------------------------------------------------------------
    # Feed families
    # ------------------------------------------------------------------

    def global_feed(
        self, fmt: FeedFormat = FeedFormat.XML, settings: Optional[SyndicationSettings] = None
    ) -> RenderedFeed:
        settings = settings or self.load_settings()
        site_url = settings.site_url
        context = FeedContext(
            title=settings.feed_title,
            description=settings.feed_description,
            link=site_url,
            self_url=f"{site_url}/api/feed",
            feed_url=f"{site_url}/api/feed.json",
        )
        return self._render(AllCriterion(), context, settings, fmt)

    def folder_feed(self, folder_id: str, fmt: FeedFormat = FeedFormat.XML) -> RenderedFeed:
        """Feed of included files anywhere below *folder_id*.

        Raises:
            FolderNotFoundError: unknown folder id or the id of a file.
        """
        folder = self.asset_repo.get_folder(folder_id)
        settings = self.load_settings()
        override = self.syndication_repo.get_folder_override(folder.id)
        site_url = settings.site_url

        title = (override.feed_title if override else None) or f"{folder.name} - {settings.feed_title}"
        description = (
            (override.feed_description if override else None)
            or f"Files from {folder.name} folder - {settings.feed_description}"
        )
        context = FeedContext(
            title=title,
            description=description,
            link=site_url,
            self_url=f"{site_url}/api/folders/{folder.id}/feed",
            feed_url=f"{site_url}/api/folders/{folder.id}/feed.json",
        )
        return self._render(FolderCriterion(folder_id=folder.id), context, settings, fmt)

    def public_feed(self, feed: PublicFeed, fmt: FeedFormat = FeedFormat.XML) -> RenderedFeed:
        settings = self.load_settings()
        site_url = settings.site_url
        criterion = parse_criterion(feed.filter_type, feed.filter_value)
        context = FeedContext(
            title=feed.name,
            description=feed.description or self._folder_description(criterion) or settings.feed_description,
            link=site_url,
            self_url=f"{site_url}/feeds/{feed.slug}",
            feed_url=f"{site_url}/feeds/{feed.slug}.json",
        )
        return self._render(criterion, context, settings, fmt)

    # ------------------------------------------------------------------
    # Side outputs
    # ------------------------------------------------------------------

    def regenerate_global_feed(self, settings: Optional[SyndicationSettings] = None) -> Optional[str]:
        """Render the global RSS feed and mirror it to disk.

        Write failures are logged and swallowed: the feed is always
        recomputable from the database. Returns the rendered XML.
        """
        xml = self.global_feed(FeedFormat.XML, settings=settings)
        output_dir = Path(app_settings.feed_output_dir)
        for filename in GLOBAL_FEED_FILENAMES:
            target = output_dir / filename
            try:
                target.write_text(xml, encoding="utf-8")
            except OSError as exc:
                logger.warning(
                    "Could not write feed file",
                    extra={"path": str(target), "error": str(exc)},
                )
        logger.debug("Regenerated global feed", extra={"output_dir": str(output_dir)})
        return xml

    def preview(self) -> SyndicationPreviewResponse:
        """Settings plus the current global item list, as JSON projections."""
        settings = self.load_settings()
        nodes = self.filter_engine.resolve_asset_set(AllCriterion(), settings.max_items)
        items = []
        for node in nodes:
            item = PreviewItem.model_validate(node)
            item.item_url = item_url(settings.site_url, node.id)
            items.append(item)
        return SyndicationPreviewResponse(
            settings=SyndicationSettingsResponse.model_validate(settings),
            items=items,
        )

    def _render(
        self, criterion: Criterion, context: FeedContext, settings: SyndicationSettings, fmt: FeedFormat
    ) -> RenderedFeed:
        items = self.filter_engine.resolve_asset_set(criterion, settings.max_items)
        if fmt == FeedFormat.JSON:
            return render_json(items, context, settings)
        return render_xml(items, context, settings)

    def _folder_description(self, criterion: Criterion) -> Optional[str]:
        """Override description of the folder a folder criterion targets, if any."""
        if not isinstance(criterion, FolderCriterion):
            return None
        override = self.syndication_repo.get_folder_override(criterion.folder_id)
        return override.feed_description if override else None
