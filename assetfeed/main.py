"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import engine, get_db, init_db, SessionLocal, DATABASE_URL
from .api import (
    analytics_router,
    assets_router,
    feeds_router,
    folders_router,
    public_feeds_router,
    syndication_router,
)
from .core.config import settings, ConfigurationError
from .core.logging_config import setup_logging, mask_url
from .core.seeder import ensure_default_settings
from .middleware.exception_handler import assetfeed_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import AssetFeedException
from .services.feed_service import FeedService

APP_VERSION = "1.0.0"

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        if DATABASE_URL.startswith("sqlite"):
            hint = "Check that the directory exists and is writable."
        else:
            hint = "Check DATABASE_URL and that the server is reachable."
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the AssetFeed API."""
    # --- Configuration validation ---
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    # --- Schema and seed data ---
    _validate_database_connection()
    init_db()

    db = SessionLocal()
    try:
        ensure_default_settings(db)
        # Global feed snapshot on disk reflects the database from boot on.
        FeedService(db).regenerate_global_feed()
    finally:
        db.close()

    yield  # App runs here

    # Shutdown: nothing to clean up currently


# Create FastAPI app
app = FastAPI(
    title="AssetFeed API",
    description=(
        "Hierarchical asset storage with RSS 2.0 and JSON Feed syndication. "
        "Files and folders are managed under /api/assets and /api/folders; "
        "feeds are published under /api/feed, /rss and /feeds/{slug}."
    ),
    version=APP_VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first: CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(AssetFeedException, assetfeed_exception_handler)

db_type = "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite"
logger.info(
    "AssetFeed API configured | env=%s | db=%s | storage=%s | cors=%s",
    settings.environment.value,
    db_type,
    settings.storage_dir,
    ",".join(settings.get_cors_origins()),
)

# Include routers
app.include_router(assets_router)
app.include_router(folders_router)
app.include_router(feeds_router)
app.include_router(syndication_router)
app.include_router(public_feeds_router)
app.include_router(analytics_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "AssetFeed API",
        "version": APP_VERSION,
        "status": "running",
        "feeds": {
            "rss": "/api/feed",
            "json": "/api/feed.json",
            "public": "/feeds/{slug}",
        },
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and asset count.

    Never raises: returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    asset_count = 0
    try:
        row = db.execute(text("SELECT COUNT(*) FROM assets")).scalar()
        asset_count = row or 0
    except Exception:
        logger.exception("Health check database probe failed")
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": APP_VERSION,
        "asset_count": asset_count,
    }


@app.get("/robots.txt", response_class=PlainTextResponse)
def robots_txt():
    """Allow crawlers on published feeds only."""
    return "User-agent: *\nAllow: /feeds/\nAllow: /rss\nAllow: /api/feed\nDisallow: /api/\n"
