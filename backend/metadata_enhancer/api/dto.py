"""
Data Transfer Objects (DTOs) for API layer.
Request bodies use the camelCase names the dashboard sends.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional

from ..models.schemas import FileStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AuthCodeRequest(BaseModel):
    code: str


class BatchProcessRequest(CamelModel):
    folder_id: str = Field(alias="folderId")
    template_id: Optional[int] = Field(default=None, alias="templateId")


class ProcessFileRequest(CamelModel):
    template_id: Optional[int] = Field(default=None, alias="templateId")


class BulkExportRequest(CamelModel):
    file_ids: List[int] = Field(alias="fileIds")


class ExportSummaryDTO(BaseModel):
    exported: int
    skipped: int
    failed: int
    errors: List[Dict[str, Any]] = []


class SearchRequest(CamelModel):
    query: str
    folder_id: Optional[str] = Field(default=None, alias="folderId")


class FileUpdateRequest(BaseModel):
    """Fields a client may change on a stored file."""
    custom_metadata: Optional[Dict[str, Any]] = None
    ai_generated_metadata: Optional[Dict[str, Any]] = None
    status: Optional[FileStatus] = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, value):
        # Omit the field to leave the status unchanged
        if value is None:
            raise ValueError("status cannot be null")
        return value


class AccountBalanceDTO(BaseModel):
    balance: float
    used: float
    total: float
    percentage: int
    currency: str
