"""Database models."""

from .asset import AssetNode
from .syndication import SyndicationSettings, FolderSyndication, PublicFeed

__all__ = [
    "AssetNode",
    "SyndicationSettings", "FolderSyndication", "PublicFeed",
]
