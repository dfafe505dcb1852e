"""
Export Router - write AI metadata to Drive file properties and verify it.
"""
from fastapi import APIRouter

from .dependencies import get_db_service, get_file_processor
from ..api.dto import BulkExportRequest, ExportSummaryDTO
from ..api.exceptions import DriveFileNotFoundError

router = APIRouter()


@router.post("/export/file/{file_id}")
async def export_file(file_id: int):
    file = await get_db_service().get_drive_file(file_id)
    if file is None:
        raise DriveFileNotFoundError(f"File {file_id} not found")
    updated = await get_file_processor().export_metadata_to_drive(file)
    return {
        "success": True,
        "updated": updated,
        "message": "Metadata exported to Google Drive" if updated else "Metadata already up to date",
    }


@router.post("/export/folder/{folder_id}", response_model=ExportSummaryDTO)
async def export_folder(folder_id: str):
    return await get_file_processor().export_all_metadata_to_drive(folder_id)


@router.post("/export/bulk", response_model=ExportSummaryDTO)
async def export_bulk(request: BulkExportRequest):
    return await get_file_processor().export_files(request.file_ids)


@router.get("/verify/file/{file_id}")
async def verify_file(file_id: int):
    return await get_file_processor().verify_file(file_id)
