"""
Auth Router - connects and disconnects the Google account.

GET  /auth/google/url       - consent URL
GET  /auth/google/callback  - redirect target after consent (code in query)
POST /auth/google/callback  - exchange a code posted by the dashboard
GET  /auth/status           - whether Drive is connected
GET  /auth/user             - connected account profile
POST /auth/disconnect       - forget credentials
"""
from fastapi import APIRouter, Query

from .dependencies import get_drive_service
from ..api.dto import AuthCodeRequest
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/auth/google/url")
async def get_auth_url():
    return {"authUrl": get_drive_service().get_auth_url()}


@router.get("/auth/google/callback")
async def google_callback(code: str = Query(..., description="Authorization code from Google")):
    await get_drive_service().set_auth_token(code)
    return {"success": True, "message": "Google Drive connected"}


@router.post("/auth/google/callback")
async def google_callback_post(request: AuthCodeRequest):
    await get_drive_service().set_auth_token(request.code)
    return {"success": True, "message": "Google Drive connected"}


@router.get("/auth/status")
async def auth_status():
    return {"isAuthenticated": get_drive_service().is_authenticated()}


@router.get("/auth/user")
async def auth_user():
    return await get_drive_service().get_user_info()


@router.post("/auth/disconnect")
async def disconnect():
    get_drive_service().disconnect()
    return {"success": True}
