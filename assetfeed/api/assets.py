"""Asset API: upload, listing, attribute edits, move/duplicate/delete, payload download.

Single router for all node operations. Delegates to AssetService (deep module).
Literal sub-paths (``/file``, ``/stats``, ``/export``) are declared before
``/{asset_id}`` so they are not captured as ids.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ValidationError
from ..schemas.asset import (
    AssetListResponse,
    AssetPreviewResponse,
    AssetResponse,
    AssetSyndicationUpdate,
    BreadcrumbEntry,
    DeleteResponse,
    DescriptionUpdate,
    MoveRequest,
    Pagination,
    RenameRequest,
    ShareUpdate,
    StarUpdate,
    StatsResponse,
    TagsUpdate,
    UploadResponse,
)
from ..services.asset_service import AssetService, IncomingFile
from ..services.export_service import XLSX_MEDIA_TYPE, ExportService, export_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assets", tags=["assets"])


# -- Collection -----------------------------------------------------------

@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_assets(
    files: List[UploadFile] = File(...),
    relative_paths: Optional[List[str]] = Form(None),
    parent_id: str = Form("root"),
    uploaded_by: str = Form(""),
    db: Session = Depends(get_db),
):
    """Upload one or more files.

    ``relative_paths`` (one per file, same order) recreates a dropped
    folder tree under ``parent_id``.
    """
    if relative_paths and len(relative_paths) != len(files):
        raise ValidationError(
            "relative_paths must have one entry per uploaded file",
            field="relative_paths",
        )
    paths = relative_paths or [None] * len(files)
    incoming = [
        IncomingFile(
            filename=upload.filename or "",
            content_type=upload.content_type,
            stream=upload.file,
            relative_path=path,
        )
        for upload, path in zip(files, paths)
    ]
    created, included = AssetService(db).upload_files(incoming, parent_id=parent_id, uploaded_by=uploaded_by)
    return UploadResponse(
        message="Upload completed successfully",
        assets=[AssetResponse.model_validate(node) for node in created],
        feed_items_added=included,
    )


@router.get("", response_model=AssetListResponse)
def list_assets(
    parent_id: Optional[str] = Query(None, description="Folder id, or 'root' for the top level"),
    primary_type: Optional[str] = Query(None),
    starred: bool = Query(False),
    shared: bool = Query(False),
    included_only: bool = Query(False),
    search: Optional[str] = Query(None),
    sort_by: str = Query("modified_at"),
    sort_order: str = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    nodes = AssetService(db).list_nodes(
        parent_id=parent_id,
        primary_type=primary_type,
        starred=starred,
        shared=shared,
        included_only=included_only,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return AssetListResponse(
        assets=[AssetResponse.model_validate(node) for node in nodes],
        pagination=Pagination(page=page, limit=limit, total=len(nodes)),
    )


@router.delete("", response_model=DeleteResponse)
def clear_all_assets(db: Session = Depends(get_db)):
    """Delete every node, payload, folder override and public feed."""
    removed = AssetService(db).clear_all()
    logger.warning("All asset data cleared", extra={"removed": removed})
    return DeleteResponse(message="All data cleared successfully", deleted_count=removed)


@router.get("/stats", response_model=StatsResponse)
def get_stats(db: Session = Depends(get_db)):
    return AssetService(db).stats()


@router.get("/export/excel")
def export_excel(db: Session = Depends(get_db)):
    """Every node as one row of an .xlsx workbook, sent as a download."""
    content = ExportService(db).export_xlsx()
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/file/{asset_id}")
def get_asset_file(asset_id: str, db: Session = Depends(get_db)):
    """Stream the stored bytes inline with the stored mime type."""
    node, path = AssetService(db).open_payload(asset_id)
    return FileResponse(
        path,
        media_type=node.mime_type,
        filename=node.name,
        content_disposition_type="inline",
    )


# -- Single node ----------------------------------------------------------

@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(asset_id: str, db: Session = Depends(get_db)):
    return AssetService(db).get_node(asset_id)


@router.delete("/{asset_id}", response_model=DeleteResponse)
def delete_asset(asset_id: str, db: Session = Depends(get_db)):
    """Delete a file, or a folder together with everything below it."""
    removed = AssetService(db).delete(asset_id)
    return DeleteResponse(message="Asset deleted successfully", deleted_count=removed)


@router.get("/{asset_id}/preview", response_model=AssetPreviewResponse)
def preview_asset(asset_id: str, db: Session = Depends(get_db)):
    """Text content (first 10000 characters) or a media url for inline display."""
    return AssetService(db).preview(asset_id)


@router.get("/{asset_id}/breadcrumb", response_model=List[BreadcrumbEntry])
def get_breadcrumb(asset_id: str, db: Session = Depends(get_db)):
    return AssetService(db).breadcrumb(asset_id)


@router.put("/{asset_id}/rename", response_model=AssetResponse)
def rename_asset(asset_id: str, data: RenameRequest, db: Session = Depends(get_db)):
    return AssetService(db).rename(asset_id, data.name)


@router.put("/{asset_id}/description", response_model=AssetResponse)
def update_description(asset_id: str, data: DescriptionUpdate, db: Session = Depends(get_db)):
    return AssetService(db).update_description(asset_id, data.description)


@router.put("/{asset_id}/tags", response_model=AssetResponse)
def update_tags(asset_id: str, data: TagsUpdate, db: Session = Depends(get_db)):
    return AssetService(db).update_tags(asset_id, data.tags)


@router.put("/{asset_id}/star", response_model=AssetResponse)
def star_asset(asset_id: str, data: StarUpdate, db: Session = Depends(get_db)):
    return AssetService(db).set_starred(asset_id, data.starred)


@router.put("/{asset_id}/share", response_model=AssetResponse)
def share_asset(asset_id: str, data: ShareUpdate, db: Session = Depends(get_db)):
    return AssetService(db).set_shared(asset_id, data.shared)


@router.put("/{asset_id}/move", response_model=AssetResponse)
def move_asset(asset_id: str, data: MoveRequest, db: Session = Depends(get_db)):
    """Move under another folder. Moving into itself or a descendant is rejected."""
    return AssetService(db).move(asset_id, data.new_parent_id)


@router.post("/{asset_id}/duplicate", response_model=AssetResponse, status_code=201)
def duplicate_asset(asset_id: str, db: Session = Depends(get_db)):
    return AssetService(db).duplicate(asset_id)


@router.put("/{asset_id}/syndication", response_model=AssetResponse)
def update_asset_syndication(
    asset_id: str,
    data: AssetSyndicationUpdate,
    db: Session = Depends(get_db),
):
    return AssetService(db).update_syndication(asset_id, data)
