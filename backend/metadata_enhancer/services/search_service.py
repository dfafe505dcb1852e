"""
Search Service - keyword search and folder metadata analytics.
"""
import json
from typing import Any, Dict, List, Optional

from ..core.logging_config import get_logger

logger = get_logger(__name__)


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _percentage(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


class SearchService:
    """
    Service for searching stored files.

    Matching is case-insensitive over the file name, AI metadata and
    custom metadata.
    """

    def __init__(self, db_service):
        self.db_service = db_service

    async def _files_in_scope(self, folder_id: Optional[str]) -> List[Dict[str, Any]]:
        if folder_id:
            return await self.db_service.get_drive_files_by_folder(folder_id)
        return await self.db_service.get_all_drive_files()

    async def search_files(self, query: str, folder_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Return files matching every term of the query, best matches first.

        Args:
            query: Free-text query; terms are split on whitespace
            folder_id: Optional folder to restrict the search to

        Returns:
            Matching file records ordered by number of term occurrences
        """
        terms = [t for t in query.lower().split() if t]
        if not terms:
            return []

        scored = []
        for file in await self._files_in_scope(folder_id):
            haystack = " ".join([
                file.get("name") or "",
                json.dumps(file.get("ai_generated_metadata") or {}, ensure_ascii=False),
                json.dumps(file.get("custom_metadata") or {}, ensure_ascii=False),
            ]).lower()
            if all(term in haystack for term in terms):
                score = sum(haystack.count(term) for term in terms)
                scored.append((score, file))

        scored.sort(key=lambda pair: -pair[0])
        logger.debug(f"Search '{query}' matched {len(scored)} files")
        return [file for _, file in scored]

    async def get_folder_analytics(self, folder_id: str) -> Dict[str, Any]:
        """
        Metadata coverage for a folder.

        Possible fields are the union of AI metadata keys seen in the folder,
        counted once per file that has AI metadata.
        """
        files = await self.db_service.get_drive_files_by_folder(folder_id)
        with_ai = [f for f in files if f.get("ai_generated_metadata")]

        field_names = set()
        for file in with_ai:
            field_names.update(file["ai_generated_metadata"].keys())

        filled = sum(
            1
            for file in with_ai
            for value in file["ai_generated_metadata"].values()
            if _is_filled(value)
        )
        possible = len(field_names) * len(with_ai)

        status_counts: Dict[str, int] = {}
        type_counts: Dict[str, int] = {}
        for file in files:
            status_counts[file.get("status", "pending")] = status_counts.get(file.get("status", "pending"), 0) + 1
            type_counts[file.get("type", "other")] = type_counts.get(file.get("type", "other"), 0) + 1

        return {
            "totalFiles": len(files),
            "filesWithAI": len(with_ai),
            "filesWithAIPercentage": _percentage(len(with_ai), len(files)),
            "totalFilledFields": filled,
            "totalPossibleFields": possible,
            "filledFieldsPercentage": _percentage(filled, possible),
            "statusCounts": status_counts,
            "typeCounts": type_counts,
        }
