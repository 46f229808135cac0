"""Data access repositories."""

from .base import BaseRepository
from .asset_repository import AssetRepository
from .syndication_repository import SyndicationRepository
from .public_feed_repository import PublicFeedRepository

__all__ = [
    "BaseRepository",
    "AssetRepository",
    "SyndicationRepository",
    "PublicFeedRepository",
]
