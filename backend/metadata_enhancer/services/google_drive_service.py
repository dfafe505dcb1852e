"""
Google Drive client.

Wraps the Drive v3 API (google-api-python-client) with OAuth2 user
credentials. The googleapiclient is synchronous, so every call runs in a
worker thread through ``asyncio.to_thread``.
"""
import asyncio
import io
from typing import Any, Dict, List, Optional

import requests
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from ..api.exceptions import (
    GoogleAccessDeniedError,
    GoogleAuthError,
    GoogleDriveError,
    GoogleNotFoundError,
)
from ..core.config import (
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
    GOOGLE_REFRESH_TOKEN,
    GOOGLE_SCOPES,
)
from ..core.logging_config import get_logger
from ..utils import file_types

logger = get_logger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
PAGE_SIZE = 100
MAX_FOLDER_DEPTH = 50

FILE_LIST_FIELDS = (
    "nextPageToken, files(id, name, mimeType, size, parents, webViewLink, "
    "thumbnailLink, createdTime, modifiedTime, properties)"
)
FILE_METADATA_FIELDS = (
    "id, name, mimeType, size, parents, webViewLink, thumbnailLink, createdTime, "
    "modifiedTime, imageMediaMetadata, videoMediaMetadata, properties"
)


def _normalize_redirect_uri(uri: Optional[str]) -> str:
    uri = uri or ""
    if "//api/" in uri:
        uri = uri.replace("//api/", "/api/")
    return uri


class GoogleDriveService:
    """
    Drive access for a single connected Google account.

    Credentials live in memory only. When GOOGLE_REFRESH_TOKEN is set the
    service starts out connected and refreshes an access token on first use.
    """

    def __init__(
        self,
        client_id: Optional[str] = GOOGLE_CLIENT_ID,
        client_secret: Optional[str] = GOOGLE_CLIENT_SECRET,
        redirect_uri: Optional[str] = GOOGLE_REDIRECT_URI,
        refresh_token: Optional[str] = GOOGLE_REFRESH_TOKEN
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = _normalize_redirect_uri(redirect_uri)
        self._credentials: Optional[Credentials] = None
        self._drive = None

        if refresh_token:
            self._set_credentials(Credentials(
                token=None,
                refresh_token=refresh_token,
                token_uri=TOKEN_URI,
                client_id=self.client_id,
                client_secret=self.client_secret,
                scopes=GOOGLE_SCOPES,
            ))
            logger.info("Google Drive credentials loaded from refresh token")

    # ========== OAuth2 ==========

    def _create_flow(self) -> Flow:
        if not self.client_id or not self.client_secret:
            raise GoogleAuthError(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET"
            )
        return Flow.from_client_config(
            {
                "web": {
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "auth_uri": AUTH_URI,
                    "token_uri": TOKEN_URI,
                }
            },
            scopes=GOOGLE_SCOPES,
            redirect_uri=self.redirect_uri,
        )

    def _set_credentials(self, credentials: Optional[Credentials]):
        self._credentials = credentials
        self._drive = None

    def get_auth_url(self) -> str:
        """Build the Google consent URL (offline access, so a refresh token is issued)."""
        flow = self._create_flow()
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            include_granted_scopes="true",
            prompt="consent",
        )
        return auth_url

    async def set_auth_token(self, code: str) -> None:
        """Exchange an authorization code for credentials."""
        flow = self._create_flow()
        try:
            await asyncio.to_thread(flow.fetch_token, code=code)
        except Exception as e:
            raise GoogleAuthError(f"Failed to exchange authorization code: {e}") from e
        self._set_credentials(flow.credentials)
        logger.info("Google Drive connected")

    def is_authenticated(self) -> bool:
        return self._credentials is not None

    def disconnect(self) -> None:
        self._set_credentials(None)
        logger.info("Google Drive disconnected")

    def _require_credentials(self) -> Credentials:
        if self._credentials is None:
            raise GoogleAuthError("Google Drive is not connected")
        if not self._credentials.valid and self._credentials.refresh_token:
            try:
                self._credentials.refresh(Request())
            except Exception as e:
                raise GoogleAuthError(f"Failed to refresh Google credentials: {e}") from e
        return self._credentials

    async def get_access_token(self) -> str:
        credentials = await asyncio.to_thread(self._require_credentials)
        return credentials.token

    async def get_user_info(self) -> Dict[str, Any]:
        """Return name, email and picture of the connected account."""
        def _fetch():
            oauth2 = build("oauth2", "v2", credentials=self._require_credentials(), cache_discovery=False)
            return oauth2.userinfo().get().execute()

        info = await self._call("get user info", _fetch)
        return {
            "name": info.get("name"),
            "email": info.get("email"),
            "picture": info.get("picture"),
        }

    # ========== Drive API ==========

    def _service(self):
        credentials = self._require_credentials()
        if self._drive is None:
            self._drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return self._drive

    async def _call(self, operation: str, func, *args, **kwargs):
        """Run a blocking Drive call in a thread and map its errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except GoogleDriveError:
            raise
        except HttpError as e:
            if e.resp.status == 404:
                raise GoogleNotFoundError(f"Failed to {operation}: not found") from e
            if e.resp.status in (401, 403):
                raise GoogleAccessDeniedError(f"Failed to {operation}: access denied") from e
            raise GoogleDriveError(f"Failed to {operation}: {e}") from e
        except Exception as e:
            raise GoogleDriveError(f"Failed to {operation}: {e}") from e

    async def list_folders(self, parent_id: Optional[str] = None) -> List[Dict[str, str]]:
        """
        List folders, optionally restricted to the children of ``parent_id``.

        Returns:
            List of ``{id, name, path}`` dicts
        """
        query = f"mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        if parent_id:
            query = f"mimeType='{FOLDER_MIME_TYPE}' and '{parent_id}' in parents and trashed=false"

        def _list():
            return self._service().files().list(
                q=query,
                fields="files(id, name, parents)",
                pageSize=PAGE_SIZE,
            ).execute()

        response = await self._call("list folders", _list)
        folders = []
        for folder in response.get("files", []):
            path = await self.get_folder_path(folder["id"])
            folders.append({"id": folder["id"], "name": folder["name"], "path": path})
        logger.debug(f"Listed {len(folders)} folders (parent: {parent_id or 'any'})")
        return folders

    async def list_files(self, folder_id: str) -> List[Dict[str, Any]]:
        """List every non-trashed item directly inside a folder, following pagination."""
        def _list():
            files = []
            page_token = None
            while True:
                response = self._service().files().list(
                    q=f"'{folder_id}' in parents and trashed=false",
                    fields=FILE_LIST_FIELDS,
                    pageSize=PAGE_SIZE,
                    pageToken=page_token,
                ).execute()
                files.extend(response.get("files", []))
                page_token = response.get("nextPageToken")
                if not page_token:
                    return files

        files = await self._call("list files", _list)
        logger.debug(f"Listed {len(files)} files in folder {folder_id}")
        return files

    async def get_file_content(self, file_id: str) -> bytes:
        """Download the full content of a file."""
        def _download():
            request = self._service().files().get_media(fileId=file_id)
            buffer = io.BytesIO()
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
            return buffer.getvalue()

        return await self._call("get file content", _download)

    async def get_file_metadata(self, file_id: str) -> Dict[str, Any]:
        def _get():
            return self._service().files().get(fileId=file_id, fields=FILE_METADATA_FIELDS).execute()

        return await self._call("get file metadata", _get)

    async def update_file_properties(self, file_id: str, properties: Dict[str, Optional[str]]) -> None:
        """
        Merge custom properties into a file. A ``None`` value removes that key.
        """
        def _update():
            return self._service().files().update(
                fileId=file_id,
                body={"properties": properties},
                fields="id, properties",
            ).execute()

        await self._call("update file properties", _update)
        logger.debug(f"Updated {len(properties)} properties on {file_id}")

    async def fetch_thumbnail(self, url: str) -> Optional[bytes]:
        """Fetch a Drive thumbnail link with the user's bearer token."""
        token = await self.get_access_token()
        response = await asyncio.to_thread(
            requests.get, url, headers={"Authorization": f"Bearer {token}"}, timeout=30
        )
        if response.status_code != 200:
            logger.warning(f"Thumbnail fetch returned {response.status_code}")
            return None
        return response.content

    async def get_folder_path(self, folder_id: str) -> str:
        """Build ``/A/B/C`` by walking first parents up to the root."""
        def _walk():
            parts = []
            current_id = folder_id
            while current_id and len(parts) < MAX_FOLDER_DEPTH:
                folder = self._service().files().get(fileId=current_id, fields="name, parents").execute()
                parts.insert(0, folder["name"])
                parents = folder.get("parents") or []
                current_id = parents[0] if parents else None
            return "/" + "/".join(parts)

        try:
            return await asyncio.to_thread(_walk)
        except Exception as e:
            logger.debug(f"Could not resolve path for folder {folder_id}: {e}")
            return "/Unknown"

    @staticmethod
    def get_file_type(mime_type: Optional[str]) -> str:
        return file_types.get_file_type(mime_type)
