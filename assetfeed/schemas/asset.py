"""Asset (file/folder) request and response schemas."""

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, List, Dict

from ..services.content_utils import as_utc

ROOT_PARENT = "root"


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    if "/" in v or "\\" in v:
        raise ValueError("Name cannot contain path separators")
    return v


class BreadcrumbEntry(BaseModel):
    """One step of the path from the root to a node."""
    id: str
    name: str
    is_folder: bool


class FolderCreate(BaseModel):
    """Schema for creating a folder."""
    name: str = Field(..., max_length=255)
    parent_id: str = ROOT_PARENT
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    uploaded_by: str = ""

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class RenameRequest(BaseModel):
    name: str = Field(..., max_length=255)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class DescriptionUpdate(BaseModel):
    description: Optional[str] = None


class TagsUpdate(BaseModel):
    """Replace a node's tags. Blank entries are dropped and duplicates collapsed."""
    tags: List[str] = []

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        seen = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class StarUpdate(BaseModel):
    starred: bool


class ShareUpdate(BaseModel):
    shared: bool


class MoveRequest(BaseModel):
    new_parent_id: str = ROOT_PARENT


class AssetSyndicationUpdate(BaseModel):
    """Per-node syndication fields. Omitted fields are left unchanged."""
    include_in_feed: Optional[bool] = None
    feed_title: Optional[str] = Field(None, max_length=500)
    feed_description: Optional[str] = None
    feed_category: Optional[str] = Field(None, max_length=255)
    feed_publish_date: Optional[datetime] = None
    feed_guid: Optional[str] = Field(None, max_length=500)


class AssetResponse(BaseModel):
    """Projection of an asset node, with derived payload urls."""
    id: str
    name: str
    is_folder: bool
    kind: str
    parent_id: str = ROOT_PARENT
    primary_type: str
    format: str
    mime_type: str
    size_bytes: int = 0
    duration_seconds: Optional[float] = None
    page_count: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    preview_available: bool = False
    tags: List[str] = []
    description: Optional[str] = None
    color: Optional[str] = None
    uploaded_by: str = ""
    original_path: Optional[str] = None
    derived_from_id: Optional[str] = None
    starred: bool = False
    shared: bool = False
    include_in_feed: bool = False
    feed_title: Optional[str] = None
    feed_description: Optional[str] = None
    feed_category: Optional[str] = None
    feed_publish_date: Optional[datetime] = None
    feed_guid: Optional[str] = None
    created_at: datetime
    modified_at: datetime
    file_url: Optional[str] = None
    preview_url: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator('parent_id', mode='before')
    @classmethod
    def root_parent(cls, v: Optional[str]) -> str:
        return v or ROOT_PARENT

    @field_validator('tags', mode='before')
    @classmethod
    def tags_list(cls, v) -> List[str]:
        return list(v or [])

    @field_validator('preview_available', 'starred', 'shared', 'include_in_feed', mode='before')
    @classmethod
    def null_false(cls, v) -> bool:
        return bool(v)

    @field_validator('created_at', 'modified_at', 'feed_publish_date', mode='before')
    @classmethod
    def utc_dates(cls, v):
        return as_utc(v) if isinstance(v, datetime) else v

    @model_validator(mode='after')
    def derive_urls(self):
        if not self.is_folder:
            self.file_url = f"/api/assets/file/{self.id}"
            if self.preview_available:
                self.preview_url = self.file_url
        return self


class UploadResponse(BaseModel):
    """Result of a multi-file upload."""
    message: str
    assets: List[AssetResponse]
    feed_items_added: int = 0


class DeleteResponse(BaseModel):
    message: str
    deleted_count: int


class StatsResponse(BaseModel):
    total_assets: int
    total_folders: int
    total_files: int
    starred_items: int
    shared_items: int
    total_feed_items: int
    total_size: int
    total_size_human: str
    type_breakdown: Dict[str, int]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class AssetListResponse(BaseModel):
    """One page of nodes. ``total`` counts the nodes on this page."""
    assets: List[AssetResponse]
    pagination: Pagination


class AssetPreviewResponse(BaseModel):
    """Inline preview of a file.

    Text kinds carry ``content`` (possibly truncated); media kinds carry a
    ``url`` the client can load directly.
    """
    type: str
    mime_type: str
    content: Optional[str] = None
    truncated: bool = False
    url: Optional[str] = None
