"""Asset repository: all queries against the ``assets`` table.

Parent ids arriving here are already normalized: ``None`` means the root
sentinel. Callers translate the public ``"root"`` id before calling in.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, cast, String
from sqlalchemy.orm import Query

from ..exceptions import FolderNotFoundError, NodeNotFoundError
from ..models import AssetNode
from .base import BaseRepository

# Columns the listing endpoint may sort on.
SORTABLE_FIELDS = ("name", "primary_type", "format", "size_bytes", "created_at", "modified_at")


class AssetRepository(BaseRepository[AssetNode]):
    """Data access layer for files and folders."""

    model_class = AssetNode
    not_found_error = NodeNotFoundError

    # ------------------------------------------------------------------
    # Single-node access
    # ------------------------------------------------------------------

    def add(self, node: AssetNode) -> AssetNode:
        """Stage a new node and flush so later queries in the unit see it."""
        self.db.add(node)
        self.db.flush()
        return node

    def get_folder(self, folder_id: str) -> AssetNode:
        """Get a folder by id. Raises FolderNotFoundError for unknown ids and files."""
        node = self.get_by_id_optional(folder_id)
        if node is None or not node.is_folder:
            raise FolderNotFoundError(folder_id)
        return node

    def delete(self, node: AssetNode) -> None:
        """Remove one row.

        Flushes immediately: there is no ORM relationship on parent_id, so
        the unit of work cannot order child/parent deletes by itself.
        """
        self.db.delete(node)
        self.db.flush()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def get_child_ids(self, parent_ids: Iterable[str]) -> List[str]:
        """Ids of every node whose parent is one of *parent_ids*."""
        parent_ids = list(parent_ids)
        if not parent_ids:
            return []
        rows = (
            self.db.query(AssetNode.id)
            .filter(AssetNode.parent_id.in_(parent_ids))
            .all()
        )
        return [row[0] for row in rows]

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_nodes(
        self,
        parent_id: Optional[str] = None,
        filter_by_parent: bool = False,
        primary_type: Optional[str] = None,
        starred: bool = False,
        shared: bool = False,
        included_only: bool = False,
        search: Optional[str] = None,
        sort_by: str = "modified_at",
        sort_order: str = "desc",
        skip: int = 0,
        limit: int = 100,
    ) -> List[AssetNode]:
        """Filtered, sorted page of nodes. Folders always sort before files."""
        query: Query = self.db.query(AssetNode)

        if filter_by_parent:
            if parent_id is None:
                query = query.filter(AssetNode.parent_id.is_(None))
            else:
                query = query.filter(AssetNode.parent_id == parent_id)
        if primary_type:
            query = query.filter(AssetNode.primary_type == primary_type)
        if starred:
            query = query.filter(AssetNode.starred.is_(True))
        if shared:
            query = query.filter(AssetNode.shared.is_(True))
        if included_only:
            query = query.filter(AssetNode.include_in_feed.is_(True))
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    AssetNode.name.ilike(term),
                    AssetNode.description.ilike(term),
                    cast(AssetNode.tags, String).ilike(term),
                )
            )

        column = getattr(AssetNode, sort_by if sort_by in SORTABLE_FIELDS else "modified_at")
        ordering = column.asc() if sort_order.lower() == "asc" else column.desc()
        return (
            query.order_by(AssetNode.is_folder.desc(), ordering, AssetNode.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all_for_export(self) -> List[AssetNode]:
        return (
            self.db.query(AssetNode)
            .order_by(AssetNode.is_folder.desc(), AssetNode.primary_type, AssetNode.created_at.desc())
            .all()
        )

    def get_all_files(self) -> List[AssetNode]:
        return self.db.query(AssetNode).filter(AssetNode.is_folder.is_(False)).all()

    def delete_all(self) -> int:
        """Delete every node in one statement. Returns the row count."""
        return self.db.query(AssetNode).delete(synchronize_session=False)

    # ------------------------------------------------------------------
    # Syndication
    # ------------------------------------------------------------------

    def included_files_query(self) -> Query:
        """Included, file-kind nodes in feed order.

        Order: effective publish date desc, creation timestamp desc, id.
        The id tiebreak makes the order total, independent of storage order.
        """
        effective_date = func.coalesce(AssetNode.feed_publish_date, AssetNode.created_at)
        return (
            self.db.query(AssetNode)
            .filter(AssetNode.include_in_feed.is_(True))
            .filter(AssetNode.is_folder.is_(False))
            .order_by(effective_date.desc(), AssetNode.created_at.desc(), AssetNode.id)
        )

    def get_direct_files(self, folder_id: str) -> List[AssetNode]:
        return (
            self.db.query(AssetNode)
            .filter(AssetNode.parent_id == folder_id)
            .filter(AssetNode.is_folder.is_(False))
            .all()
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        is_file = AssetNode.is_folder.is_(False)
        row = self.db.query(
            func.count(AssetNode.id),
            func.count(AssetNode.id).filter(AssetNode.is_folder.is_(True)),
            func.count(AssetNode.id).filter(is_file),
            func.count(AssetNode.id).filter(AssetNode.starred.is_(True)),
            func.count(AssetNode.id).filter(AssetNode.shared.is_(True)),
            func.count(AssetNode.id).filter(is_file, AssetNode.include_in_feed.is_(True)),
            func.coalesce(func.sum(AssetNode.size_bytes).filter(is_file), 0),
        ).one()

        breakdown = (
            self.db.query(AssetNode.primary_type, func.count(AssetNode.id))
            .filter(is_file)
            .group_by(AssetNode.primary_type)
            .all()
        )

        return {
            "total_assets": row[0],
            "total_folders": row[1],
            "total_files": row[2],
            "starred_items": row[3],
            "shared_items": row[4],
            "total_feed_items": row[5],
            "total_size": int(row[6] or 0),
            "type_breakdown": {kind: count for kind, count in breakdown},
        }

    def upload_totals(self) -> Dict[str, Any]:
        """Average file size and distinct named uploaders."""
        is_file = AssetNode.is_folder.is_(False)
        avg_size, uploaders = self.db.query(
            func.avg(AssetNode.size_bytes).filter(is_file),
            func.count(func.distinct(AssetNode.uploaded_by)).filter(AssetNode.uploaded_by != ""),
        ).one()
        return {
            "avg_size": float(avg_size or 0),
            "unique_uploaders": uploaders or 0,
        }

    def files_created_since(self, since: datetime) -> List[Tuple[datetime, int]]:
        """``(created_at, size_bytes)`` of every file created at or after *since*."""
        return [
            (created_at, size or 0)
            for created_at, size in self.db.query(AssetNode.created_at, AssetNode.size_bytes)
            .filter(AssetNode.is_folder.is_(False))
            .filter(AssetNode.created_at >= since)
            .all()
        ]
