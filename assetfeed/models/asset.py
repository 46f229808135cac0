"""Asset node model: files and folders in one self-referencing table."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text
from ..services.content_utils import utcnow
from ..database import Base

# Sentinel id for the (unstored) top of the tree. Stored rows use parent_id=NULL.
ROOT_ID = "root"
ROOT_NAME = "My Drive"

FOLDER_MIME_TYPE = "application/x-folder"


class AssetNode(Base):
    """A file or folder in the asset tree."""

    __tablename__ = "assets"
    __table_args__ = (
        Index("ix_assets_parent_id", "parent_id"),
        Index("ix_assets_primary_type", "primary_type"),
        Index("ix_assets_include_in_feed", "include_in_feed"),
        Index("ix_assets_created_at", "created_at"),
    )

    # Primary key
    id = Column(String(36), primary_key=True)  # uuid4

    name = Column(String(255), nullable=False)
    is_folder = Column(Boolean, nullable=False, default=False)

    # Tree structure. NULL = child of the root sentinel. Subtree deletion is
    # done explicitly by HierarchyService so payloads get released too.
    parent_id = Column(String(36), ForeignKey("assets.id"), nullable=True)

    # Classification and payload description
    primary_type = Column(String(20), nullable=False, default="other")
    format = Column(String(50), nullable=False, default="")
    mime_type = Column(String(255), nullable=False, default="application/octet-stream")
    size_bytes = Column(Integer, nullable=False, default=0)
    file_path = Column(Text, nullable=True)
    original_path = Column(Text, nullable=True)
    derived_from_id = Column(String(36), nullable=True)

    # Probed metadata (all optional)
    duration_seconds = Column(Float, nullable=True)
    page_count = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    preview_available = Column(Boolean, default=False)

    # User-facing attributes
    tags = Column(JSON, default=list)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)
    uploaded_by = Column(String(255), nullable=False, default="")
    starred = Column(Boolean, default=False)
    shared = Column(Boolean, default=False)

    # Syndication
    include_in_feed = Column(Boolean, default=False)
    feed_title = Column(String(500), nullable=True)
    feed_description = Column(Text, nullable=True)
    feed_category = Column(String(255), nullable=True)
    feed_publish_date = Column(DateTime(timezone=True), nullable=True)
    feed_guid = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    modified_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def kind(self) -> str:
        return "folder" if self.is_folder else "file"

    @property
    def effective_publish_date(self):
        """Syndication publish date if set, otherwise the creation timestamp."""
        return self.feed_publish_date or self.created_at
