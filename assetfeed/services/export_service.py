"""Spreadsheet export of the whole asset tree."""

import io
from typing import List, Union

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from ..models import AssetNode
from ..models.asset import ROOT_ID
from ..repositories import AssetRepository
from .content_utils import as_utc, format_file_size, utcnow

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "All Assets"
MIN_COLUMN_WIDTH = 15

EXPORT_COLUMNS = (
    "ID", "Name", "Is Folder", "Parent ID", "Primary Type", "Format", "MIME Type",
    "Size (Bytes)", "Size (Human)", "Created At", "Modified At", "Uploaded By",
    "Starred", "Shared", "Preview Available", "Description", "Include in Feed",
    "Feed Title", "Feed Description", "Feed Category",
)


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _timestamp(value) -> str:
    # openpyxl rejects tz-aware datetimes, so cells carry ISO strings.
    return as_utc(value).isoformat() if value else ""


def export_row(node: AssetNode) -> List[Union[str, int]]:
    return [
        node.id,
        node.name,
        _yes_no(node.is_folder),
        node.parent_id or ROOT_ID,
        node.primary_type,
        (node.format or "").upper(),
        node.mime_type,
        node.size_bytes or 0,
        format_file_size(node.size_bytes),
        _timestamp(node.created_at),
        _timestamp(node.modified_at),
        node.uploaded_by or "",
        _yes_no(node.starred),
        _yes_no(node.shared),
        _yes_no(node.preview_available),
        node.description or "",
        _yes_no(node.include_in_feed),
        node.feed_title or "",
        node.feed_description or "",
        node.feed_category or "",
    ]


def export_filename() -> str:
    return f"AssetFeed_Export_{utcnow().date().isoformat()}.xlsx"


class ExportService:
    """One worksheet row per node, whatever its depth; folders first."""

    def __init__(self, db: Session):
        self.asset_repo = AssetRepository(db)

    def export_workbook(self) -> Workbook:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE
        sheet.append(list(EXPORT_COLUMNS))
        for node in self.asset_repo.get_all_for_export():
            sheet.append(export_row(node))

        for index, header in enumerate(EXPORT_COLUMNS, start=1):
            width = max(len(header) + 2, MIN_COLUMN_WIDTH)
            sheet.column_dimensions[get_column_letter(index)].width = width
        return workbook

    def export_xlsx(self) -> bytes:
        """The workbook serialised as .xlsx bytes."""
        buffer = io.BytesIO()
        self.export_workbook().save(buffer)
        return buffer.getvalue()
