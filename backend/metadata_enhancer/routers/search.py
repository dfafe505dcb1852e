"""
Search Router - keyword search, agentic search and folder analytics.

Example Usage:
    POST /search {"query": "sunset beach", "folderId": "abc"}
    GET  /agentic-search?q=photos with people
    GET  /analytics/{folderId}
"""
from fastapi import APIRouter, Query
from typing import List, Optional

from .dependencies import get_agentic_search_service, get_search_service
from ..api.dto import SearchRequest
from ..models.schemas import DriveFile

router = APIRouter()


@router.post("/search", response_model=List[DriveFile])
async def search_files(request: SearchRequest):
    return await get_search_service().search_files(request.query, request.folder_id)


@router.get("/agentic-search")
async def agentic_search(
    q: str = Query(..., min_length=1, description="Natural language query"),
    folder_id: Optional[str] = Query(None, alias="folderId")
):
    """
    Natural-language search over processed files.

    Returns files ranked by the AI provider with its reasoning. Falls back
    to keyword matching when the provider is unavailable.
    """
    return await get_agentic_search_service().perform_agentic_search(q, folder_id)


@router.get("/analytics/{folder_id}")
async def folder_analytics(folder_id: str):
    return await get_search_service().get_folder_analytics(folder_id)
