"""
Files Router - read and edit stored file records.
"""
from fastapi import APIRouter

from .dependencies import get_db_service
from ..api.dto import FileUpdateRequest
from ..api.exceptions import DriveFileNotFoundError
from ..models.schemas import DriveFile
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/files/{file_id}", response_model=DriveFile)
async def get_file(file_id: int):
    file = await get_db_service().get_drive_file(file_id)
    if file is None:
        raise DriveFileNotFoundError(f"File {file_id} not found")
    return file


@router.patch("/files/{file_id}", response_model=DriveFile)
async def update_file(file_id: int, request: FileUpdateRequest):
    """Update custom metadata, AI metadata or status. Omitted fields are left unchanged."""
    updates = request.model_dump(exclude_unset=True)
    file = await get_db_service().update_drive_file(file_id, updates)
    if file is None:
        raise DriveFileNotFoundError(f"File {file_id} not found")
    logger.info(f"Updated file {file_id}: {', '.join(updates) or 'no changes'}")
    return file
