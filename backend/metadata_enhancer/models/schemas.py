from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal

FileType = Literal["image", "video", "audio", "pdf", "document", "other"]
FileStatus = Literal["pending", "processing", "processed", "error"]
JobStatus = Literal["pending", "running", "completed", "failed"]
FieldType = Literal["text", "select", "tags"]


class InsertUser(BaseModel):
    username: str
    password: str


class User(InsertUser):
    id: int


class InsertDriveFile(BaseModel):
    drive_id: str
    name: str
    type: FileType = "other"
    size: Optional[int] = None
    mime_type: Optional[str] = None
    parent_folder_id: Optional[str] = None
    web_view_link: Optional[str] = None
    thumbnail_link: Optional[str] = None
    created_time: Optional[str] = None  # ISO 8601 from Drive
    modified_time: Optional[str] = None
    status: FileStatus = "pending"
    processing_error: Optional[str] = None
    existing_metadata: Optional[Dict[str, Any]] = None  # Properties already on the Drive file
    ai_generated_metadata: Optional[Dict[str, Any]] = None
    custom_metadata: Optional[Dict[str, Any]] = None  # User edits, never overwritten by AI


class DriveFile(InsertDriveFile):
    id: int


class MetadataField(BaseModel):
    name: str
    description: str
    type: FieldType = "text"
    options: Optional[List[str]] = None  # Only meaningful for 'select'


class InsertMetadataTemplate(BaseModel):
    name: str
    description: Optional[str] = None
    fields: List[MetadataField] = Field(default_factory=list)


class MetadataTemplate(InsertMetadataTemplate):
    id: int
    created_at: str


class InsertProcessingJob(BaseModel):
    folder_id: str
    template_id: Optional[int] = None
    status: JobStatus = "pending"
    total_files: int = 0
    processed_files: int = 0
    failed_files: int = 0
    error_message: Optional[str] = None


class ProcessingJob(InsertProcessingJob):
    id: int
    created_at: str
    completed_at: Optional[str] = None


class FolderInfo(BaseModel):
    id: str
    name: str
    path: str
