"""API routes."""

from .assets import router as assets_router
from .folders import router as folders_router
from .feeds import router as feeds_router
from .syndication import router as syndication_router
from .public_feeds import router as public_feeds_router
from .analytics import router as analytics_router

__all__ = [
    "assets_router",
    "folders_router",
    "feeds_router",
    "syndication_router",
    "public_feeds_router",
    "analytics_router",
]
