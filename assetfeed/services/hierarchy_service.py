"""Deep module for asset tree invariants: breadcrumbs, descendants, cascading delete, move.

The tree is stored as parent pointers only (``parent_id``; NULL means the
root sentinel). Every traversal here uses an explicit work-list and a
visited set, so a corrupted chain degrades to a truncated result instead
of unbounded recursion.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import FolderNotFoundError, ValidationError
from ..models import AssetNode
from ..models.asset import ROOT_ID, ROOT_NAME
from ..repositories import AssetRepository, SyndicationRepository
from ..schemas.asset import BreadcrumbEntry
from .content_utils import utcnow
from .payload_store import PayloadStore

# Upper bound on breadcrumb length. Chains longer than this are corrupt.
MAX_TREE_DEPTH = 1000

logger = logging.getLogger(__name__)


def normalize_parent_id(parent_id: Optional[str]) -> Optional[str]:
    """Map the public ``"root"`` id (or nothing) to the stored NULL parent."""
    if not parent_id or parent_id == ROOT_ID:
        return None
    return parent_id


class HierarchyService:
    """Tree operations behind a narrow interface.

    Public methods:
        resolve_breadcrumb      -- root-to-node path
        collect_descendant_ids  -- transitive closure of children
        delete_subtree          -- cascading folder delete, payloads included
        delete_node             -- file or folder delete
        move_node               -- re-parent with cycle avoidance
        require_folder          -- validate a folder id, return the stored parent
    """

    def __init__(self, db: Session, payload_store: Optional[PayloadStore] = None):
        self.db = db
        self.asset_repo = AssetRepository(db)
        self.syndication_repo = SyndicationRepository(db)
        self.payloads = payload_store or PayloadStore()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def resolve_breadcrumb(self, node_id: str) -> List[BreadcrumbEntry]:
        """Path from the root sentinel to *node_id*, both ends included.

        Raises:
            NodeNotFoundError: unknown node id.
        """
        root = BreadcrumbEntry(id=ROOT_ID, name=ROOT_NAME, is_folder=True)
        if node_id == ROOT_ID:
            return [root]

        current = self.asset_repo.get_by_id(node_id)
        chain: List[BreadcrumbEntry] = []
        visited = set()

        while current is not None:
            if current.id in visited or len(chain) >= MAX_TREE_DEPTH:
                logger.warning(
                    "Breadcrumb walk stopped on a corrupt parent chain",
                    extra={"node_id": node_id, "stopped_at": current.id},
                )
                break
            visited.add(current.id)
            chain.append(BreadcrumbEntry(id=current.id, name=current.name, is_folder=current.is_folder))

            if current.parent_id is None:
                break
            parent = self.asset_repo.get_by_id_optional(current.parent_id)
            if parent is None:
                logger.warning(
                    "Breadcrumb walk hit a dangling parent id",
                    extra={"node_id": node_id, "parent_id": current.parent_id},
                )
            current = parent

        chain.reverse()
        return [root] + chain

    def collect_descendant_ids(self, folder_id: str) -> List[str]:
        """Ids of every node below *folder_id*, in breadth-first order.

        Empty for a childless folder, a file, or an unknown id.
        """
        visited = {folder_id}
        result: List[str] = []
        frontier = [folder_id]
        while frontier:
            next_frontier = []
            for child_id in self.asset_repo.get_child_ids(frontier):
                if child_id in visited:
                    continue
                visited.add(child_id)
                result.append(child_id)
                next_frontier.append(child_id)
            frontier = next_frontier
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def delete_subtree(self, folder_id: str) -> int:
        """Remove a folder, everything below it, their payloads and overrides.

        Children are removed before their parent. A missing row or payload is
        skipped, so re-running after a partial failure finishes the job.
        Commits once at the end. Returns the number of removed rows.
        """
        removed = 0
        visited = set()
        # (node_id, children_already_pushed)
        stack = [(folder_id, False)]

        while stack:
            node_id, expanded = stack.pop()
            if expanded:
                if self._remove_row(node_id):
                    removed += 1
                continue
            if node_id in visited:
                continue
            visited.add(node_id)
            stack.append((node_id, True))
            for child_id in self.asset_repo.get_child_ids([node_id]):
                if child_id not in visited:
                    stack.append((child_id, False))

        self.db.commit()
        logger.info("Deleted subtree", extra={"folder_id": folder_id, "removed": removed})
        return removed

    def delete_node(self, node_id: str) -> int:
        """Delete a file, or a folder with its whole subtree.

        Raises:
            NodeNotFoundError: unknown node id.
        """
        node = self.asset_repo.get_by_id(node_id)
        if node.is_folder:
            return self.delete_subtree(node.id)

        self._remove_row(node.id)
        self.db.commit()
        logger.info("Deleted file", extra={"node_id": node_id})
        return 1

    def move_node(self, node_id: str, new_parent_id: Optional[str]) -> AssetNode:
        """Re-parent *node_id* under *new_parent_id* (``"root"`` allowed).

        Raises:
            NodeNotFoundError: either node is unknown.
            ValidationError: target is the node itself, one of its
                descendants, or a file. The tree is left unchanged.
        """
        node = self.asset_repo.get_by_id(node_id)
        target_id = normalize_parent_id(new_parent_id)

        if target_id is not None:
            if target_id == node.id:
                raise ValidationError("Cannot move a node into itself", field="new_parent_id")
            target = self.asset_repo.get_by_id(target_id)
            if not target.is_folder:
                raise ValidationError("Target must be a folder", field="new_parent_id")
            if node.is_folder and target_id in set(self.collect_descendant_ids(node.id)):
                raise ValidationError(
                    "Cannot move a folder into one of its own subfolders",
                    field="new_parent_id",
                )

        node.parent_id = target_id
        node.modified_at = utcnow()
        self.db.commit()
        self.db.refresh(node)
        logger.info(
            "Moved node",
            extra={"node_id": node_id, "new_parent_id": target_id or ROOT_ID},
        )
        return node

    def require_folder(self, folder_id: Optional[str]) -> Optional[str]:
        """Validate a parent id for new children; returns the stored form.

        Raises:
            FolderNotFoundError: unknown id or the id of a file.
        """
        stored = normalize_parent_id(folder_id)
        if stored is not None:
            node = self.asset_repo.get_by_id_optional(stored)
            if node is None or not node.is_folder:
                raise FolderNotFoundError(stored)
        return stored

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _remove_row(self, node_id: str) -> bool:
        node = self.asset_repo.get_by_id_optional(node_id)
        if node is None:
            return False
        if node.is_folder:
            self.syndication_repo.delete_folder_override(node.id)
        else:
            self.payloads.release(node.file_path)
        self.asset_repo.delete(node)
        return True
