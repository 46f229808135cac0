"""Deep module for asset node lifecycle: ingestion, attribute edits, delete, payload access.

Tree invariants are delegated to HierarchyService; classification and
metadata extraction to the classifier and metadata extractor. Every operation that can
change feed content ends by regenerating the global feed.
"""

import logging
import posixpath
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings as app_settings
from ..exceptions import NodeNotFoundError, PayloadNotFoundError, ValidationError
from ..models import AssetNode
from ..models.asset import FOLDER_MIME_TYPE
from ..repositories import AssetRepository, PublicFeedRepository, SyndicationRepository
from ..schemas.analytics import AnalyticsOverview, DailyUploads, MonthlyUploads, MonthlyUploadsResponse
from ..schemas.asset import (
    AssetPreviewResponse,
    AssetSyndicationUpdate,
    BreadcrumbEntry,
    FolderCreate,
    StatsResponse,
)
from .classifier import MEDIA_TYPES, PrimaryType, classify, guess_mime_type, split_extension
from .content_utils import as_utc, format_file_size, utcnow
from .feed_service import FeedService
from .hierarchy_service import HierarchyService, normalize_parent_id
from .metadata_extractor import PREVIEWABLE_TEXT_FORMATS, extract_metadata
from .payload_store import PayloadStore

DEFAULT_FOLDER_COLOR = "#1a73e8"
UNKNOWN_FORMAT = "unknown"
PREVIEW_TEXT_LIMIT = 10000
TRUNCATION_MARKER = "\n\n... (content truncated)"
RECENT_ACTIVITY_DAYS = 30
MONTHLY_WINDOW_DAYS = 365

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """One uploaded file as handed over by the HTTP layer."""
    filename: str
    content_type: Optional[str]
    stream: BinaryIO
    relative_path: Optional[str] = None


class AssetService:
    """File and folder operations behind a narrow interface.

    Public methods:
        create_folder / upload_files        -- node creation
        get_node / list_nodes / breadcrumb  -- reads
        rename / update_description / update_tags / set_starred / set_shared
        move / duplicate / delete / clear_all
        update_syndication                  -- per-node feed fields
        open_payload / preview              -- stored bytes for a file
        stats / analytics_overview / monthly_uploads
    """

    def __init__(self, db: Session, payload_store: Optional[PayloadStore] = None):
        self.db = db
        self.payloads = payload_store or PayloadStore()
        self.asset_repo = AssetRepository(db)
        self.syndication_repo = SyndicationRepository(db)
        self.feed_repo = PublicFeedRepository(db)
        self.hierarchy = HierarchyService(db, self.payloads)
        self.feed_service = FeedService(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_folder(self, data: FolderCreate) -> AssetNode:
        parent_id = self.hierarchy.require_folder(data.parent_id)
        folder = self._new_folder(
            name=data.name,
            parent_id=parent_id,
            original_path=data.name,
            uploaded_by=data.uploaded_by,
            description=data.description,
            color=data.color,
        )
        self.asset_repo.add(folder)
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Created folder", extra={"node_id": folder.id, "parent_id": parent_id})
        return folder

    def upload_files(
        self,
        files: Sequence[IncomingFile],
        parent_id: Optional[str] = None,
        uploaded_by: str = "",
    ) -> Tuple[List[AssetNode], int]:
        """Store uploaded files, recreating any relative folder structure.

        Every intermediate folder named by a ``relative_path`` is created
        once, in sorted order, under *parent_id*; each file lands in its
        deepest folder. Commits once. Returns the created nodes and how many
        of them were auto-included in the feed.
        """
        if not files:
            raise ValidationError("No files uploaded", field="files")
        if len(files) > app_settings.max_upload_files:
            raise ValidationError(
                f"Too many files: {len(files)} (max {app_settings.max_upload_files})",
                field="files",
            )

        base_parent = self.hierarchy.require_folder(parent_id)
        auto_include = self._auto_include_enabled(base_parent)
        created: List[AssetNode] = []
        stored_paths: List[str] = []

        try:
            folder_ids = self._create_upload_folders(files, base_parent, uploaded_by, created)
            for incoming in files:
                relative = _clean_relative_path(incoming.relative_path)
                folder_path = posixpath.dirname(relative) if relative else ""
                node = self._ingest_file(
                    incoming,
                    parent_id=folder_ids.get(folder_path, base_parent),
                    uploaded_by=uploaded_by,
                    auto_include=auto_include,
                )
                stored_paths.append(node.file_path)
                self.asset_repo.add(node)
                created.append(node)
            self.db.commit()
        except Exception:
            self.db.rollback()
            for path in stored_paths:
                self.payloads.release(path)
            raise

        included = sum(1 for node in created if node.include_in_feed)
        logger.info(
            "Upload completed",
            extra={"created_count": len(created), "feed_items_added": included, "parent_id": base_parent},
        )
        if included:
            self.feed_service.regenerate_global_feed()
        return created, included

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> AssetNode:
        return self.asset_repo.get_by_id(node_id)

    def list_nodes(
        self,
        parent_id: Optional[str] = None,
        primary_type: Optional[str] = None,
        starred: bool = False,
        shared: bool = False,
        included_only: bool = False,
        search: Optional[str] = None,
        sort_by: str = "modified_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 100,
    ) -> List[AssetNode]:
        return self.asset_repo.list_nodes(
            parent_id=normalize_parent_id(parent_id),
            filter_by_parent=parent_id is not None,
            primary_type=None if primary_type == "all" else primary_type,
            starred=starred,
            shared=shared,
            included_only=included_only,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            skip=(max(page, 1) - 1) * limit,
            limit=limit,
        )

    def breadcrumb(self, node_id: str) -> List[BreadcrumbEntry]:
        return self.hierarchy.resolve_breadcrumb(node_id)

    def stats(self) -> StatsResponse:
        data = self.asset_repo.stats()
        return StatsResponse(total_size_human=format_file_size(data["total_size"]), **data)

    def open_payload(self, node_id: str) -> Tuple[AssetNode, Path]:
        """The file node and the path of its stored bytes.

        Raises:
            PayloadNotFoundError: node missing, a folder, or bytes gone from disk.
        """
        node = self.asset_repo.get_by_id_optional(node_id)
        if node is None or node.is_folder or not self.payloads.exists(node.file_path):
            raise PayloadNotFoundError(node_id)
        return node, Path(node.file_path)

    def preview(self, node_id: str) -> AssetPreviewResponse:
        """Inline preview of a file: text content or a media url.

        Raises:
            NodeNotFoundError: node missing or a folder.
            ValidationError: preview not available for this file.
            PayloadNotFoundError: text payload gone from disk.
        """
        node = self.asset_repo.get_by_id_optional(node_id)
        if node is None or node.is_folder:
            raise NodeNotFoundError(node_id)
        if not node.preview_available:
            raise ValidationError("Preview not available for this file type")

        if node.primary_type == PrimaryType.TEXT.value and node.format in PREVIEWABLE_TEXT_FORMATS:
            try:
                content, truncated = self.payloads.read_text(node.file_path, PREVIEW_TEXT_LIMIT)
            except OSError as exc:
                logger.warning(
                    "Could not read payload for preview",
                    extra={"node_id": node_id, "error": str(exc)},
                )
                raise PayloadNotFoundError(node_id) from exc
            if truncated:
                content += TRUNCATION_MARKER
            return AssetPreviewResponse(
                type=node.primary_type,
                mime_type=node.mime_type,
                content=content,
                truncated=truncated,
            )

        if node.primary_type in MEDIA_TYPES:
            return AssetPreviewResponse(
                type=node.primary_type,
                mime_type=node.mime_type,
                url=f"/api/assets/file/{node.id}",
            )

        raise ValidationError("Preview not implemented for this file type")

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def analytics_overview(self, now: Optional[datetime] = None) -> AnalyticsOverview:
        """Library totals plus daily file uploads over the last month."""
        now = now or utcnow()
        data = self.asset_repo.stats()
        data.update(self.asset_repo.upload_totals())

        per_day: Counter = Counter()
        for created_at, _size in self.asset_repo.files_created_since(now - timedelta(days=RECENT_ACTIVITY_DAYS)):
            per_day[as_utc(created_at).date().isoformat()] += 1
        recent = [
            DailyUploads(date=day, count=count)
            for day, count in sorted(per_day.items(), reverse=True)[:RECENT_ACTIVITY_DAYS]
        ]

        return AnalyticsOverview(
            total_files=data["total_files"],
            total_folders=data["total_folders"],
            total_feed_items=data["total_feed_items"],
            total_size=data["total_size"],
            total_size_human=format_file_size(data["total_size"]),
            avg_size=data["avg_size"],
            unique_uploaders=data["unique_uploaders"],
            type_breakdown=data["type_breakdown"],
            recent_activity=recent,
        )

    def monthly_uploads(self, now: Optional[datetime] = None) -> MonthlyUploadsResponse:
        """File count and bytes per calendar month over the last year, newest first."""
        now = now or utcnow()
        counts: Counter = Counter()
        sizes: Counter = Counter()
        for created_at, size in self.asset_repo.files_created_since(now - timedelta(days=MONTHLY_WINDOW_DAYS)):
            month = as_utc(created_at).strftime("%Y-%m")
            counts[month] += 1
            sizes[month] += size
        return MonthlyUploadsResponse(
            months=[
                MonthlyUploads(month=month, count=counts[month], total_size=sizes[month])
                for month in sorted(counts, reverse=True)
            ]
        )

    # ------------------------------------------------------------------
    # Attribute edits
    # ------------------------------------------------------------------

    def rename(self, node_id: str, name: str) -> AssetNode:
        return self._update(node_id, {"name": name}, regenerate=True)

    def update_description(self, node_id: str, description: Optional[str]) -> AssetNode:
        return self._update(node_id, {"description": description or None}, regenerate=True)

    def update_tags(self, node_id: str, tags: List[str]) -> AssetNode:
        return self._update(node_id, {"tags": list(tags)}, regenerate=True)

    def set_starred(self, node_id: str, starred: bool) -> AssetNode:
        return self._update(node_id, {"starred": starred})

    def set_shared(self, node_id: str, shared: bool) -> AssetNode:
        return self._update(node_id, {"shared": shared})

    def update_syndication(self, node_id: str, data: AssetSyndicationUpdate) -> AssetNode:
        node = self.asset_repo.get_by_id(node_id)
        if node.is_folder:
            raise ValidationError("Folders cannot be feed items; use folder syndication settings")
        return self._update(node_id, data.model_dump(exclude_unset=True), regenerate=True)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def move(self, node_id: str, new_parent_id: Optional[str]) -> AssetNode:
        node = self.hierarchy.move_node(node_id, new_parent_id)
        self.feed_service.regenerate_global_feed()
        return node

    def duplicate(self, node_id: str) -> AssetNode:
        """Copy a file (payload included) next to the original.

        The copy starts outside the feed and unstarred/unshared.
        """
        source = self.asset_repo.get_by_id(node_id)
        if source.is_folder:
            raise ValidationError("Cannot duplicate folders")

        new_id = str(uuid.uuid4())
        try:
            new_path = self.payloads.copy(source.file_path, new_id, source.format)
        except OSError as exc:
            logger.warning(
                "Could not copy payload",
                extra={"node_id": node_id, "error": str(exc)},
            )
            raise PayloadNotFoundError(node_id) from exc

        copy = AssetNode(
            id=new_id,
            name=f"{source.name} (Copy)",
            is_folder=False,
            parent_id=source.parent_id,
            primary_type=source.primary_type,
            format=source.format,
            mime_type=source.mime_type,
            size_bytes=source.size_bytes,
            file_path=str(new_path),
            original_path=source.original_path,
            derived_from_id=source.id,
            duration_seconds=source.duration_seconds,
            page_count=source.page_count,
            width=source.width,
            height=source.height,
            preview_available=source.preview_available,
            tags=list(source.tags or []),
            description=source.description,
            uploaded_by=source.uploaded_by,
            include_in_feed=False,
        )
        self.asset_repo.add(copy)
        self.db.commit()
        self.db.refresh(copy)
        logger.info("Duplicated file", extra={"node_id": node_id, "copy_id": new_id})
        return copy

    def delete(self, node_id: str) -> int:
        removed = self.hierarchy.delete_node(node_id)
        self.feed_service.regenerate_global_feed()
        return removed

    def clear_all(self) -> int:
        """Remove every node, payload, folder override and public feed."""
        for node in self.asset_repo.get_all_files():
            self.payloads.release(node.file_path)
        self.syndication_repo.delete_all_folder_overrides()
        self.feed_repo.delete_all()
        removed = self.asset_repo.delete_all()
        self.db.commit()
        logger.info("Cleared all assets", extra={"removed": removed})
        self.feed_service.regenerate_global_feed()
        return removed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _update(self, node_id: str, values: Dict[str, Any], regenerate: bool = False) -> AssetNode:
        node = self.asset_repo.get_by_id(node_id)
        for field, value in values.items():
            setattr(node, field, value)
        node.modified_at = utcnow()
        self.db.commit()
        self.db.refresh(node)
        if regenerate:
            self.feed_service.regenerate_global_feed()
        return node

    def _auto_include_enabled(self, parent_id: Optional[str]) -> bool:
        settings = self.syndication_repo.get_or_create_settings()
        if settings.auto_include_new_uploads:
            return True
        if parent_id is None:
            return False
        override = self.syndication_repo.get_folder_override(parent_id)
        return bool(override and override.auto_include_new_files)

    def _create_upload_folders(
        self,
        files: Sequence[IncomingFile],
        base_parent: Optional[str],
        uploaded_by: str,
        created: List[AssetNode],
    ) -> Dict[str, str]:
        """Create every folder implied by the relative paths. Returns path -> id."""
        folder_paths = set()
        for incoming in files:
            parts = _clean_relative_path(incoming.relative_path).split("/")
            for depth in range(1, len(parts)):
                folder_paths.add("/".join(parts[:depth]))

        folder_ids: Dict[str, str] = {}
        for folder_path in sorted(folder_paths):
            parent_path, name = posixpath.split(folder_path)
            folder = self._new_folder(
                name=name,
                parent_id=folder_ids.get(parent_path, base_parent),
                original_path=folder_path,
                uploaded_by=uploaded_by,
            )
            self.asset_repo.add(folder)
            folder_ids[folder_path] = folder.id
            created.append(folder)
        return folder_ids

    def _ingest_file(
        self,
        incoming: IncomingFile,
        parent_id: Optional[str],
        uploaded_by: str,
        auto_include: bool,
    ) -> AssetNode:
        node_id = str(uuid.uuid4())
        name = posixpath.basename(incoming.filename.replace("\\", "/")) or node_id
        extension = split_extension(name)
        mime_type = guess_mime_type(name, incoming.content_type)
        primary_type = classify(mime_type, extension).value

        path, size = self.payloads.save(node_id, extension or UNKNOWN_FORMAT, incoming.stream)
        metadata = extract_metadata(path, mime_type, primary_type)

        node = AssetNode(
            id=node_id,
            name=name,
            is_folder=False,
            parent_id=parent_id,
            primary_type=primary_type,
            format=extension or UNKNOWN_FORMAT,
            mime_type=mime_type,
            size_bytes=size,
            file_path=str(path),
            original_path=_clean_relative_path(incoming.relative_path) or name,
            duration_seconds=metadata.duration_seconds,
            page_count=metadata.page_count,
            width=metadata.width,
            height=metadata.height,
            preview_available=metadata.preview_available,
            tags=[],
            uploaded_by=uploaded_by,
        )
        if auto_include:
            node.include_in_feed = True
            node.feed_title = name
            node.feed_description = f"{primary_type} file: {name}"
            node.feed_category = primary_type
            node.feed_publish_date = utcnow()
            node.feed_guid = node_id
        return node

    def _new_folder(
        self,
        name: str,
        parent_id: Optional[str],
        original_path: str,
        uploaded_by: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> AssetNode:
        return AssetNode(
            id=str(uuid.uuid4()),
            name=name,
            is_folder=True,
            parent_id=parent_id,
            primary_type="other",
            format="folder",
            mime_type=FOLDER_MIME_TYPE,
            size_bytes=0,
            original_path=original_path,
            tags=[],
            description=description,
            color=color or DEFAULT_FOLDER_COLOR,
            uploaded_by=uploaded_by,
        )


def _clean_relative_path(relative_path: Optional[str]) -> str:
    """Normalize a browser-supplied relative path; drops empty and dot segments."""
    if not relative_path:
        return ""
    parts = [p for p in relative_path.replace("\\", "/").split("/") if p not in ("", ".", "..")]
    return "/".join(parts)
