"""Syndication settings, folder override and preview schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from .asset import AssetResponse


class SyndicationSettingsResponse(BaseModel):
    """Global site, feed and author settings."""
    site_title: str
    site_description: str
    site_url: str
    feed_title: str
    feed_description: str
    language: str
    max_items: int
    auto_include_new_uploads: bool
    author_name: str = ""
    author_email: str = ""
    owner_name: str = ""
    owner_email: str = ""
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SyndicationSettingsUpdate(BaseModel):
    """Partial update of the global settings. Omitted fields are unchanged."""
    site_title: Optional[str] = Field(None, min_length=1, max_length=255)
    site_description: Optional[str] = None
    site_url: Optional[str] = Field(None, max_length=500)
    feed_title: Optional[str] = Field(None, min_length=1, max_length=255)
    feed_description: Optional[str] = None
    language: Optional[str] = Field(None, min_length=2, max_length=20)
    max_items: Optional[int] = Field(None, ge=1, le=500)
    auto_include_new_uploads: Optional[bool] = None
    author_name: Optional[str] = Field(None, max_length=255)
    author_email: Optional[str] = Field(None, max_length=255)
    owner_name: Optional[str] = Field(None, max_length=255)
    owner_email: Optional[str] = Field(None, max_length=255)

    @field_validator('site_url')
    @classmethod
    def normalize_site_url(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace and a trailing slash so item links join cleanly."""
        if v is None:
            return v
        v = v.strip().rstrip('/')
        if not v.startswith(('http://', 'https://')):
            raise ValueError("site_url must start with http:// or https://")
        return v


class FolderSyndicationResponse(BaseModel):
    """Effective override for one folder (defaults when none is stored)."""
    folder_id: str
    folder_name: str
    include_folder: bool = False
    feed_title: str
    feed_description: str = ""
    auto_include_new_files: bool = False
    feed_url: str


class FolderSyndicationUpdate(BaseModel):
    include_folder: bool = False
    feed_title: Optional[str] = Field(None, max_length=500)
    feed_description: Optional[str] = None
    auto_include_new_files: bool = False


class PreviewItem(AssetResponse):
    item_url: str = ""


class SyndicationPreviewResponse(BaseModel):
    """Settings plus the items the global feed currently carries."""
    settings: SyndicationSettingsResponse
    items: List[PreviewItem]
