"""Pydantic schemas for API validation."""

from .asset import (
    BreadcrumbEntry,
    FolderCreate,
    RenameRequest,
    DescriptionUpdate,
    TagsUpdate,
    StarUpdate,
    ShareUpdate,
    MoveRequest,
    AssetSyndicationUpdate,
    AssetResponse,
    UploadResponse,
    DeleteResponse,
    StatsResponse,
    Pagination,
    AssetListResponse,
    AssetPreviewResponse,
)
from .analytics import (
    DailyUploads,
    AnalyticsOverview,
    MonthlyUploads,
    MonthlyUploadsResponse,
)
from .syndication import (
    SyndicationSettingsResponse,
    SyndicationSettingsUpdate,
    FolderSyndicationResponse,
    FolderSyndicationUpdate,
    PreviewItem,
    SyndicationPreviewResponse,
)
from .public_feed import (
    PublicFeedCreate,
    PublicFeedUpdate,
    PublicFeedResponse,
    PublicFeedListResponse,
)

__all__ = [
    "BreadcrumbEntry",
    "FolderCreate",
    "RenameRequest",
    "DescriptionUpdate",
    "TagsUpdate",
    "StarUpdate",
    "ShareUpdate",
    "MoveRequest",
    "AssetSyndicationUpdate",
    "AssetResponse",
    "UploadResponse",
    "DeleteResponse",
    "StatsResponse",
    "Pagination",
    "AssetListResponse",
    "AssetPreviewResponse",
    "DailyUploads",
    "AnalyticsOverview",
    "MonthlyUploads",
    "MonthlyUploadsResponse",
    "SyndicationSettingsResponse",
    "SyndicationSettingsUpdate",
    "FolderSyndicationResponse",
    "FolderSyndicationUpdate",
    "PreviewItem",
    "SyndicationPreviewResponse",
    "PublicFeedCreate",
    "PublicFeedUpdate",
    "PublicFeedResponse",
    "PublicFeedListResponse",
]
