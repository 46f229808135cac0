"""Syndication configuration models: global settings, folder overrides, public feeds."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from ..services.content_utils import utcnow
from ..database import Base

SETTINGS_ROW_ID = 1

DEFAULT_SITE_TITLE = "AssetFeed"
DEFAULT_SITE_DESCRIPTION = "Content management feed"
DEFAULT_SITE_URL = "http://localhost:8000"
DEFAULT_FEED_TITLE = "AssetFeed"
DEFAULT_FEED_DESCRIPTION = "Latest content from AssetFeed"
DEFAULT_LANGUAGE = "en-us"
DEFAULT_MAX_ITEMS = 20


class SyndicationSettings(Base):
    """Singleton row holding site, feed and author identity."""

    __tablename__ = "syndication_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)

    # Site identity
    site_title = Column(String(255), nullable=False, default=DEFAULT_SITE_TITLE)
    site_description = Column(Text, nullable=False, default=DEFAULT_SITE_DESCRIPTION)
    site_url = Column(String(500), nullable=False, default=DEFAULT_SITE_URL)

    # Feed identity
    feed_title = Column(String(255), nullable=False, default=DEFAULT_FEED_TITLE)
    feed_description = Column(Text, nullable=False, default=DEFAULT_FEED_DESCRIPTION)
    language = Column(String(20), nullable=False, default=DEFAULT_LANGUAGE)
    max_items = Column(Integer, nullable=False, default=DEFAULT_MAX_ITEMS)
    auto_include_new_uploads = Column(Boolean, nullable=False, default=False)

    # Author / owner. Each optional; podcast directories want both.
    author_name = Column(String(255), nullable=False, default="")
    author_email = Column(String(255), nullable=False, default="")
    owner_name = Column(String(255), nullable=False, default="")
    owner_email = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class FolderSyndication(Base):
    """Per-folder override of feed title/description and auto-include behaviour."""

    __tablename__ = "folder_syndication"

    id = Column(Integer, primary_key=True, autoincrement=True)
    folder_id = Column(
        String(36), ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    include_folder = Column(Boolean, nullable=False, default=False)
    feed_title = Column(String(500), nullable=True)
    feed_description = Column(Text, nullable=True)
    auto_include_new_files = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class PublicFeed(Base):
    """Named feed configuration published under /feeds/{slug}."""

    __tablename__ = "public_feeds"
    __table_args__ = (
        Index("ix_public_feeds_is_active", "is_active"),
    )

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(100), nullable=False, unique=True)

    # 'all' | 'folder' | 'type' | 'tag'. filter_value holds the folder id,
    # kind or tag. The folder id is a soft reference: no foreign key.
    filter_type = Column(String(20), nullable=False, default="all")
    filter_value = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
