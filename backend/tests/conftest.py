import os

# Configuration is read at import time, so set it before the app is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["AI_PROVIDER"] = "mock"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["BATCH_DELAY_SECONDS"] = "0"
os.environ.pop("GOOGLE_REFRESH_TOKEN", None)

import asyncio
import copy
from typing import Any, Dict, List, Optional

import pytest

from metadata_enhancer.services.ai_service import AIService
from metadata_enhancer.services.database import MemoryAdapter
from metadata_enhancer.services.file_processor import FileProcessorService
from metadata_enhancer.services.providers import MockProvider
from metadata_enhancer.api.exceptions import GoogleNotFoundError


class FakeDriveService:
    """In-memory stand-in for GoogleDriveService."""

    def __init__(self):
        self.files: Dict[str, Dict[str, Any]] = {}
        self.contents: Dict[str, bytes] = {}
        self.folders: List[Dict[str, str]] = []
        self.property_updates: List[tuple] = []
        self.authenticated = True

    def add_file(
        self,
        drive_id: str,
        name: str,
        mime_type: str,
        folder_id: str = "folder-1",
        content: bytes = b"",
        properties: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        item = {
            "id": drive_id,
            "name": name,
            "mimeType": mime_type,
            "size": str(len(content)),
            "parents": [folder_id],
            "webViewLink": f"https://drive.google.com/file/d/{drive_id}/view",
            "createdTime": "2024-01-01T00:00:00Z",
            "modifiedTime": "2024-01-02T00:00:00Z",
            "properties": dict(properties or {}),
        }
        self.files[drive_id] = item
        self.contents[drive_id] = content
        return item

    def is_authenticated(self) -> bool:
        return self.authenticated

    def get_auth_url(self) -> str:
        return "https://accounts.google.com/o/oauth2/auth?client_id=test"

    async def set_auth_token(self, code: str) -> None:
        self.authenticated = True

    def disconnect(self) -> None:
        self.authenticated = False

    async def get_user_info(self) -> Dict[str, Any]:
        return {"name": "Test User", "email": "test@example.com", "picture": None}

    async def get_access_token(self) -> str:
        return "token"

    async def list_folders(self, parent_id: Optional[str] = None) -> List[Dict[str, str]]:
        return list(self.folders)

    async def list_files(self, folder_id: str) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(item) for item in self.files.values()
            if folder_id in item["parents"]
        ]

    async def get_file_content(self, file_id: str) -> bytes:
        if file_id not in self.contents:
            raise GoogleNotFoundError("Failed to get file content: not found")
        return self.contents[file_id]

    async def get_file_metadata(self, file_id: str) -> Dict[str, Any]:
        if file_id not in self.files:
            raise GoogleNotFoundError("Failed to get file metadata: not found")
        return copy.deepcopy(self.files[file_id])

    async def update_file_properties(self, file_id: str, properties: Dict[str, Optional[str]]) -> None:
        self.property_updates.append((file_id, dict(properties)))
        stored = self.files[file_id]["properties"]
        for key, value in properties.items():
            if value is None:
                stored.pop(key, None)
            else:
                stored[key] = value

    async def fetch_thumbnail(self, url: str) -> Optional[bytes]:
        return None

    async def get_folder_path(self, folder_id: str) -> str:
        return f"/{folder_id}"


class FailingProvider(MockProvider):
    """Provider whose completions always fail."""

    def complete_json(self, messages, max_tokens=1000, temperature=0.7):
        raise RuntimeError("provider unavailable")


@pytest.fixture
def fake_drive():
    return FakeDriveService()


@pytest.fixture
def db():
    adapter = MemoryAdapter()
    asyncio.run(adapter.initialize())
    return adapter


@pytest.fixture
def ai_service():
    return AIService(MockProvider())


@pytest.fixture
def failing_ai_service():
    return AIService(FailingProvider())


@pytest.fixture
def processor(db, fake_drive, ai_service):
    return FileProcessorService(db, fake_drive, ai_service, batch_delay=0)


@pytest.fixture
def client(fake_drive):
    """TestClient with fresh storage and the fake Drive injected."""
    from fastapi.testclient import TestClient
    from metadata_enhancer.main import app
    from metadata_enhancer.routers import dependencies

    with TestClient(app) as test_client:
        asyncio.run(dependencies.initialize_database())
        asyncio.run(dependencies.initialize_services(fake_drive, AIService(MockProvider())))
        yield test_client
