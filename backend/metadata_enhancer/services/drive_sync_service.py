"""
Drive Sync Service - mirrors a Drive folder listing into storage.
"""
from typing import Any, Dict, List, Optional

from .google_drive_service import GoogleDriveService
from ..core.logging_config import get_logger
from ..utils.file_types import get_file_type

logger = get_logger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def _parse_size(size: Optional[str]) -> int:
    try:
        return int(size) if size is not None else 0
    except (TypeError, ValueError):
        return 0


def drive_item_to_record(item: Dict[str, Any], folder_id: str) -> Dict[str, Any]:
    """Map a Drive v3 file resource onto a DriveFile insert record."""
    return {
        "drive_id": item["id"],
        "name": item.get("name", ""),
        "type": get_file_type(item.get("mimeType")),
        "size": _parse_size(item.get("size")),
        "mime_type": item.get("mimeType"),
        "parent_folder_id": folder_id,
        "web_view_link": item.get("webViewLink"),
        "thumbnail_link": item.get("thumbnailLink"),
        "created_time": item.get("createdTime"),
        "modified_time": item.get("modifiedTime"),
        "existing_metadata": item.get("properties") or None,
    }


class DriveSyncService:
    """Creates pending file records for Drive files the store has not seen yet."""

    def __init__(self, db_service, drive_service: GoogleDriveService):
        self.db_service = db_service
        self.drive_service = drive_service

    async def sync_folder(self, folder_id: str) -> List[Dict[str, Any]]:
        """
        List a folder on Drive and return the stored records in Drive order.

        Existing records are returned as stored; processing state and
        metadata are never reset by a sync. Sub-folders are skipped.
        """
        items = await self.drive_service.list_files(folder_id)
        records = []
        created = 0
        for item in items:
            if item.get("mimeType") == FOLDER_MIME_TYPE:
                continue
            record = await self.db_service.get_drive_file_by_drive_id(item["id"])
            if record is None:
                record = await self.db_service.create_drive_file(drive_item_to_record(item, folder_id))
                created += 1
            records.append(record)

        logger.info(f"Synced folder {folder_id}: {len(records)} files ({created} new)")
        return records
