"""
In-memory adapter implementing DatabaseInterface.
Stores all data in memory using Python dicts - data is lost on restart.
"""
from typing import List, Dict, Optional
from datetime import datetime, timezone
import copy

from .base import DatabaseInterface
from ...models.schemas import (
    InsertUser,
    InsertDriveFile,
    InsertMetadataTemplate,
    InsertProcessingJob,
)
from ...core.logging_config import get_logger

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryAdapter(DatabaseInterface):
    """
    In-memory database adapter using Python dictionaries.
    
    Each collection has its own id counter starting at 1. Ids are never
    reused, even after deletes. Records are deep-copied on the way in and
    on the way out, so callers can never mutate stored state by accident.
    """
    
    def __init__(self):
        self._users: Dict[int, Dict] = {}
        self._drive_files: Dict[int, Dict] = {}
        self._templates: Dict[int, Dict] = {}
        self._jobs: Dict[int, Dict] = {}
        
        self._next_ids: Dict[str, int] = {}
        self._reset_counters()
        
        # Secondary indexes for fast lookups
        self._username_index: Dict[str, int] = {}  # username -> user_id
        self._drive_id_index: Dict[str, int] = {}  # drive_id -> file_id
    
    def _reset_counters(self):
        self._next_ids = {"users": 1, "drive_files": 1, "templates": 1, "jobs": 1}
    
    def _allocate_id(self, collection: str) -> int:
        new_id = self._next_ids[collection]
        self._next_ids[collection] = new_id + 1
        return new_id
    
    async def initialize(self):
        """Initialize database (clears all collections and counters)."""
        self._users.clear()
        self._drive_files.clear()
        self._templates.clear()
        self._jobs.clear()
        self._username_index.clear()
        self._drive_id_index.clear()
        self._reset_counters()
        logger.debug("Memory database initialized")
    
    async def close(self):
        """Close database connection (no-op for in-memory)."""
        pass
    
    @staticmethod
    def _merge(store: Dict[int, Dict], record_id: int, updates: Dict) -> Optional[Dict]:
        record = store.get(record_id)
        if record is None:
            return None
        for key, value in updates.items():
            if key == "id":
                continue
            record[key] = copy.deepcopy(value)
        return copy.deepcopy(record)
    
    # User operations
    async def get_user(self, user_id: int) -> Optional[Dict]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None
    
    async def get_user_by_username(self, username: str) -> Optional[Dict]:
        user_id = self._username_index.get(username)
        if user_id is None:
            return None
        return copy.deepcopy(self._users[user_id])
    
    async def create_user(self, user_data: Dict) -> Dict:
        data = InsertUser(**user_data).model_dump()
        if data["username"] in self._username_index:
            raise ValueError(f"Username '{data['username']}' already exists")
        
        user_id = self._allocate_id("users")
        record = {"id": user_id, **data}
        self._users[user_id] = record
        self._username_index[record["username"]] = user_id
        return copy.deepcopy(record)
    
    # Drive file operations
    async def get_drive_file(self, file_id: int) -> Optional[Dict]:
        drive_file = self._drive_files.get(file_id)
        return copy.deepcopy(drive_file) if drive_file else None
    
    async def get_drive_file_by_drive_id(self, drive_id: str) -> Optional[Dict]:
        file_id = self._drive_id_index.get(drive_id)
        if file_id is None:
            return None
        return copy.deepcopy(self._drive_files[file_id])
    
    async def get_drive_files_by_folder(self, folder_id: str) -> List[Dict]:
        return [
            copy.deepcopy(f) for f in self._drive_files.values()
            if f.get("parent_folder_id") == folder_id
        ]
    
    async def get_all_drive_files(self) -> List[Dict]:
        return [copy.deepcopy(f) for f in self._drive_files.values()]
    
    async def create_drive_file(self, file_data: Dict) -> Dict:
        data = InsertDriveFile(**file_data).model_dump()
        if data["drive_id"] in self._drive_id_index:
            raise ValueError(f"Drive file '{data['drive_id']}' already exists")
        
        file_id = self._allocate_id("drive_files")
        record = {"id": file_id, **data}
        self._drive_files[file_id] = record
        self._drive_id_index[record["drive_id"]] = file_id
        return copy.deepcopy(record)
    
    async def update_drive_file(self, file_id: int, updates: Dict) -> Optional[Dict]:
        existing = self._drive_files.get(file_id)
        if existing is None:
            return None
        
        new_drive_id = updates.get("drive_id")
        if new_drive_id and new_drive_id != existing["drive_id"]:
            if new_drive_id in self._drive_id_index:
                raise ValueError(f"Drive file '{new_drive_id}' already exists")
            del self._drive_id_index[existing["drive_id"]]
            self._drive_id_index[new_drive_id] = file_id
        
        return self._merge(self._drive_files, file_id, updates)
    
    async def delete_drive_file(self, file_id: int) -> bool:
        record = self._drive_files.pop(file_id, None)
        if record is None:
            return False
        self._drive_id_index.pop(record["drive_id"], None)
        return True
    
    # Metadata template operations
    async def get_metadata_template(self, template_id: int) -> Optional[Dict]:
        template = self._templates.get(template_id)
        return copy.deepcopy(template) if template else None
    
    async def get_all_metadata_templates(self) -> List[Dict]:
        return [copy.deepcopy(t) for t in self._templates.values()]
    
    async def create_metadata_template(self, template_data: Dict) -> Dict:
        data = InsertMetadataTemplate(**template_data).model_dump()
        template_id = self._allocate_id("templates")
        record = {"id": template_id, **data, "created_at": _now()}
        self._templates[template_id] = record
        return copy.deepcopy(record)
    
    async def update_metadata_template(self, template_id: int, updates: Dict) -> Optional[Dict]:
        return self._merge(self._templates, template_id, updates)
    
    async def delete_metadata_template(self, template_id: int) -> bool:
        return self._templates.pop(template_id, None) is not None
    
    async def clear_metadata_templates(self) -> int:
        count = len(self._templates)
        self._templates.clear()
        return count
    
    # Processing job operations
    async def get_processing_job(self, job_id: int) -> Optional[Dict]:
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job else None
    
    async def get_all_processing_jobs(self) -> List[Dict]:
        return [copy.deepcopy(j) for j in self._jobs.values()]
    
    async def create_processing_job(self, job_data: Dict) -> Dict:
        data = InsertProcessingJob(**job_data).model_dump()
        job_id = self._allocate_id("jobs")
        record = {
            "id": job_id,
            **data,
            "created_at": _now(),
            "completed_at": None,
        }
        self._jobs[job_id] = record
        return copy.deepcopy(record)
    
    async def update_processing_job(self, job_id: int, updates: Dict) -> Optional[Dict]:
        return self._merge(self._jobs, job_id, updates)
    
    async def delete_processing_job(self, job_id: int) -> bool:
        return self._jobs.pop(job_id, None) is not None
