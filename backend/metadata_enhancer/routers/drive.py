"""
Drive Router - browse folders and sync folder contents into storage.
"""
from fastapi import APIRouter, Query
from typing import List, Optional

from .dependencies import get_drive_service, get_sync_service
from ..models.schemas import DriveFile, FolderInfo

router = APIRouter()


@router.get("/drive/folders", response_model=List[FolderInfo])
async def list_folders(parent_id: Optional[str] = Query(None, alias="parentId")):
    return await get_drive_service().list_folders(parent_id)


@router.get("/drive/files/{folder_id}", response_model=List[DriveFile])
async def list_folder_files(folder_id: str):
    """
    List the files of a Drive folder.

    Files not seen before are stored as pending records; known files are
    returned with their current processing state.
    """
    return await get_sync_service().sync_folder(folder_id)


@router.get("/drive/properties/{drive_id}")
async def get_drive_properties(drive_id: str):
    metadata = await get_drive_service().get_file_metadata(drive_id)
    return {
        "driveId": drive_id,
        "name": metadata.get("name"),
        "properties": metadata.get("properties") or {},
    }
