"""
Agentic Search Service - natural language search over AI metadata.

The model receives the query plus a JSON summary of every processed file
and answers with the relevant ids in ranked order. If the model call
fails, a keyword search over all files in scope is returned instead.
"""
import json
from typing import Any, Dict, List, Optional

from .ai_service import AIService
from .providers.base import SEARCH_FILES_MARKER, SEARCH_QUERY_PREFIX
from ..api.exceptions import AIServiceError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

SEARCH_TEMPERATURE = 0.3

SEARCH_INSTRUCTIONS = """You are an intelligent file search assistant. Analyze the user's natural language query and find the most relevant files from the provided metadata.

Match on file names and types, AI-generated metadata (descriptions, objects, text, tags) and existing metadata properties. Consider semantic meaning, not just keywords: "photos with people" should match images whose metadata mentions persons or faces, and "business documents" may match reports, proposals or contracts.

Return a JSON object with:
- "relevantFileIds": array of file ids that match the query, most relevant first
- "reasoning": why these files were selected and how the query was interpreted
- "confidence": number from 0 to 1"""

NO_PROCESSED_FILES_REASONING = (
    "No files have been processed with AI metadata yet. "
    "Process some files first to enable agentic search."
)


class AgenticSearchService:
    """Ranks processed files against a natural-language query using the AI provider."""

    def __init__(self, db_service, ai_service: AIService):
        self.db_service = db_service
        self.ai_service = ai_service

    async def _files_in_scope(self, folder_id: Optional[str]) -> List[Dict[str, Any]]:
        if folder_id:
            return await self.db_service.get_drive_files_by_folder(folder_id)
        return await self.db_service.get_all_drive_files()

    async def perform_agentic_search(self, query: str, folder_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Returns:
            Dict with files, reasoning, searchQuery, totalResults and confidence
        """
        files = await self._files_in_scope(folder_id)
        candidates = [
            f for f in files
            if f.get("status") == "processed" and f.get("ai_generated_metadata")
        ]
        if not candidates:
            return self._result([], NO_PROCESSED_FILES_REASONING, query, 0.0)

        summary = [
            {
                "id": f["id"],
                "name": f["name"],
                "type": f["type"],
                "mimeType": f.get("mime_type"),
                "aiMetadata": f.get("ai_generated_metadata"),
                "existingMetadata": f.get("existing_metadata"),
            }
            for f in candidates
        ]
        messages = [
            {"role": "system", "content": SEARCH_INSTRUCTIONS},
            {
                "role": "user",
                "content": f"{SEARCH_QUERY_PREFIX}{query}{SEARCH_FILES_MARKER}{json.dumps(summary, indent=2, default=str)}",
            },
        ]

        try:
            response = await self.ai_service.complete_json(
                "run agentic search", messages, temperature=SEARCH_TEMPERATURE
            )
        except AIServiceError as e:
            logger.warning(f"Agentic search falling back to keywords: {e}")
            return self._keyword_fallback(query, files)

        relevant_ids = response.get("relevantFileIds")
        if relevant_ids is None:
            relevant_ids = []
        if not isinstance(relevant_ids, list):
            logger.warning(
                f"Agentic search got malformed relevantFileIds ({type(relevant_ids).__name__}), "
                "falling back to keywords"
            )
            return self._keyword_fallback(query, files)

        by_id = {f["id"]: f for f in candidates}
        ranked = []
        for file_id in relevant_ids:
            file = by_id.get(self._coerce_id(file_id))
            if file is not None and file not in ranked:
                ranked.append(file)

        reasoning = response.get("reasoning")
        if not isinstance(reasoning, str) or not reasoning.strip():
            reasoning = "AI analysis completed based on your query and available file metadata."
        confidence = response.get("confidence")
        logger.info(f"Agentic search '{query}' returned {len(ranked)} of {len(candidates)} candidates")
        return self._result(ranked, reasoning, query, confidence if isinstance(confidence, (int, float)) else None)

    @staticmethod
    def _coerce_id(value: Any) -> Optional[int]:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return None

    def _keyword_fallback(self, query: str, files: List[Dict[str, Any]]) -> Dict[str, Any]:
        keywords = [k for k in query.lower().split() if k]
        matches = []
        for file in files:
            searchable = " ".join([
                file.get("name") or "",
                file.get("type") or "",
                json.dumps(file.get("ai_generated_metadata") or {}, default=str),
                json.dumps(file.get("existing_metadata") or {}, default=str),
            ]).lower()
            if any(keyword in searchable for keyword in keywords):
                matches.append(file)

        reasoning = (
            f"AI analysis failed, performed fallback keyword search for: {query}. "
            "Consider checking your OpenAI API connection."
        )
        return self._result(matches, reasoning, query, None)

    @staticmethod
    def _result(files: List[Dict[str, Any]], reasoning: str, query: str, confidence: Optional[float]) -> Dict[str, Any]:
        return {
            "files": files,
            "reasoning": reasoning,
            "searchQuery": query,
            "totalResults": len(files),
            "confidence": confidence,
        }
