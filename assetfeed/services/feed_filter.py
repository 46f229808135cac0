"""Feed filter criteria and their resolution to an ordered asset set.

A criterion says which included files belong in a feed. Resolution always
starts from the included-file query, so every variant shares the same
ordering (effective publish date desc, creation desc, id) and the same
truncation to ``max_items``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models import AssetNode
from ..repositories import AssetRepository
from .classifier import PrimaryType
from .hierarchy_service import HierarchyService

logger = logging.getLogger(__name__)

FILTER_TYPES = ("all", "folder", "type", "tag")


@dataclass(frozen=True)
class AllCriterion:
    """Every included file."""


@dataclass(frozen=True)
class FolderCriterion:
    """Included files anywhere below a folder."""
    folder_id: str


@dataclass(frozen=True)
class TypeCriterion:
    """Included files of one primary type."""
    kind: str


@dataclass(frozen=True)
class TagCriterion:
    """Included files with a tag containing ``value``."""
    value: str


Criterion = Union[AllCriterion, FolderCriterion, TypeCriterion, TagCriterion]


def parse_criterion(filter_type: str, filter_value: Optional[str]) -> Criterion:
    """Build a criterion from a stored (filter_type, filter_value) pair.

    Raises:
        ValidationError: unknown filter type, or a missing/invalid value.
    """
    value = (filter_value or "").strip()
    if filter_type == "all":
        return AllCriterion()
    if filter_type not in FILTER_TYPES:
        raise ValidationError(
            f"Invalid filter type '{filter_type}'. Must be one of: {', '.join(FILTER_TYPES)}",
            field="filter_type",
        )
    if not value:
        raise ValidationError(f"Filter type '{filter_type}' requires a filter value", field="filter_value")
    if filter_type == "folder":
        return FolderCriterion(folder_id=value)
    if filter_type == "type":
        kinds = [kind.value for kind in PrimaryType]
        if value not in kinds:
            raise ValidationError(
                f"Invalid type '{value}'. Must be one of: {', '.join(kinds)}",
                field="filter_value",
            )
        return TypeCriterion(kind=value)
    return TagCriterion(value=value)


class FeedFilterEngine:
    """Resolves criteria against the asset store."""

    def __init__(self, db: Session, hierarchy: Optional[HierarchyService] = None):
        self.db = db
        self.asset_repo = AssetRepository(db)
        self.hierarchy = hierarchy or HierarchyService(db)

    def resolve_asset_set(self, criterion: Criterion, max_items: int) -> List[AssetNode]:
        """Ordered, truncated list of included files matching *criterion*."""
        if max_items <= 0:
            return []
        query = self.asset_repo.included_files_query()

        if isinstance(criterion, AllCriterion):
            return query.limit(max_items).all()

        if isinstance(criterion, FolderCriterion):
            folder = self.asset_repo.get_by_id_optional(criterion.folder_id)
            if folder is None or not folder.is_folder:
                logger.info("Feed folder not found", extra={"folder_id": criterion.folder_id})
                return []
            parent_ids = [folder.id] + self.hierarchy.collect_descendant_ids(folder.id)
            return query.filter(AssetNode.parent_id.in_(parent_ids)).limit(max_items).all()

        if isinstance(criterion, TypeCriterion):
            return query.filter(AssetNode.primary_type == criterion.kind).limit(max_items).all()

        if isinstance(criterion, TagCriterion):
            # Tags are a JSON list; the match is per element, in order.
            matched = []
            for node in query:
                if any(criterion.value in str(tag) for tag in (node.tags or [])):
                    matched.append(node)
                    if len(matched) >= max_items:
                        break
            return matched

        raise ValidationError(f"Unsupported feed criterion: {criterion!r}")
