"""Global syndication settings and per-folder overrides."""

import logging

from sqlalchemy.orm import Session

from ..models import SyndicationSettings
from ..repositories import AssetRepository, SyndicationRepository
from ..schemas.syndication import (
    FolderSyndicationResponse,
    FolderSyndicationUpdate,
    SyndicationSettingsUpdate,
)
from .content_utils import utcnow
from .feed_service import FeedService

logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and writes syndication configuration.

    Every write regenerates the global feed with the settings row it just
    saved, so the row is loaded exactly once per operation.
    """

    def __init__(self, db: Session):
        self.db = db
        self.asset_repo = AssetRepository(db)
        self.syndication_repo = SyndicationRepository(db)
        self.feed_service = FeedService(db)

    # ------------------------------------------------------------------
    # Global settings
    # ------------------------------------------------------------------

    def get_settings(self) -> SyndicationSettings:
        return self.syndication_repo.get_or_create_settings()

    def update_settings(self, data: SyndicationSettingsUpdate) -> SyndicationSettings:
        settings = self.get_settings()
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(settings, field, value)
        self.db.commit()
        self.db.refresh(settings)
        logger.info("Updated syndication settings")
        self.feed_service.regenerate_global_feed(settings)
        return settings

    # ------------------------------------------------------------------
    # Folder overrides
    # ------------------------------------------------------------------

    def get_folder_settings(self, folder_id: str) -> FolderSyndicationResponse:
        """Stored override for a folder, or the defaults when none exists.

        Raises:
            FolderNotFoundError: unknown folder id or the id of a file.
        """
        folder = self.asset_repo.get_folder(folder_id)
        return self._folder_response(folder)

    def update_folder_settings(
        self, folder_id: str, data: FolderSyndicationUpdate
    ) -> FolderSyndicationResponse:
        """Create or update a folder override.

        When both include_folder and auto_include_new_files are on, the
        folder's direct files are switched into the feed, filling feed
        fields that are still empty.
        """
        folder = self.asset_repo.get_folder(folder_id)
        self.syndication_repo.upsert_folder_override(folder.id, data.model_dump())

        backfilled = 0
        if data.include_folder and data.auto_include_new_files:
            now = utcnow()
            for node in self.asset_repo.get_direct_files(folder.id):
                node.include_in_feed = True
                node.feed_title = node.feed_title or node.name
                node.feed_category = node.feed_category or node.primary_type
                node.feed_publish_date = node.feed_publish_date or now
                node.feed_guid = node.feed_guid or node.id
                backfilled += 1

        self.db.commit()
        logger.info(
            "Updated folder syndication",
            extra={"folder_id": folder.id, "backfilled": backfilled},
        )
        self.feed_service.regenerate_global_feed()
        return self._folder_response(folder)

    def _folder_response(self, folder) -> FolderSyndicationResponse:
        override = self.syndication_repo.get_folder_override(folder.id)
        site_url = self.get_settings().site_url
        return FolderSyndicationResponse(
            folder_id=folder.id,
            folder_name=folder.name,
            include_folder=bool(override and override.include_folder),
            feed_title=(override.feed_title if override else None) or folder.name,
            feed_description=(override.feed_description if override else None) or folder.description or "",
            auto_include_new_files=bool(override and override.auto_include_new_files),
            feed_url=f"{site_url}/api/folders/{folder.id}/feed",
        )
