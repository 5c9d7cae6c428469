from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from app.core.constants import XLSX_MEDIA_TYPE
from app.core.enums import RecordKind
from app.core.exceptions import BadRequestError, NotFoundError
from app.core.response import APIResponse
from app.domain.entities.user_entity import User
from app.infrastructure.export import TabularExportManager
from app.interfaces.dependencies import get_admin_user, get_export_manager

router = APIRouter()


def resolve_kind(kind: str) -> RecordKind:
    try:
        return RecordKind(kind)
    except ValueError:
        raise BadRequestError(
            message="Invalid file type",
            details={"kind": kind, "allowed": [k.value for k in RecordKind]},
        )


@router.get("/{kind}")
async def download_workbook(
    kind: str,
    admin: User = Depends(get_admin_user),
    exporter: TabularExportManager = Depends(get_export_manager),
):
    """Download the generated workbook for a record kind"""
    target = exporter.target(resolve_kind(kind))
    if not target.workbook_path.is_file():
        raise NotFoundError(resource="Excel file", message=f"{target.sheet_name} Excel file not found")

    return FileResponse(
        target.workbook_path,
        media_type=XLSX_MEDIA_TYPE,
        filename=target.workbook_path.name,
    )


@router.get("/{kind}/preview", response_model=APIResponse[Dict[str, Any]])
async def preview_workbook(
    kind: str,
    rows: int = Query(10, ge=1, le=500, description="Number of rows to return"),
    latest_only: bool = Query(False, description="Keep only the latest row per Entry ID"),
    admin: User = Depends(get_admin_user),
    exporter: TabularExportManager = Depends(get_export_manager),
):
    """Return the first rows of a workbook keyed by header"""
    record_kind = resolve_kind(kind)
    try:
        preview = await exporter.preview(record_kind, rows=rows, latest_only=latest_only)
    except FileNotFoundError:
        raise NotFoundError(resource="Excel file", message=f"{record_kind.label} Excel file not found")
    return APIResponse.ok(data=preview)
