"""
Abstract base class for database adapters.
All database implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Optional


class DatabaseInterface(ABC):
    """
    Abstract interface for storage operations.
    
    Records are plain dicts shaped like the models in ``models.schemas``.
    Ids are integers assigned by the adapter.
    """
    
    # User operations
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[Dict]:
        """Get a user by ID."""
        pass
    
    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[Dict]:
        """Get a user by username."""
        pass
    
    @abstractmethod
    async def create_user(self, user_data: Dict) -> Dict:
        """Create a user. Raises ValueError if the username is taken."""
        pass
    
    # Drive file operations
    @abstractmethod
    async def get_drive_file(self, file_id: int) -> Optional[Dict]:
        """Get a Drive file record by ID."""
        pass
    
    @abstractmethod
    async def get_drive_file_by_drive_id(self, drive_id: str) -> Optional[Dict]:
        """Get a Drive file record by its Google Drive file ID."""
        pass
    
    @abstractmethod
    async def get_drive_files_by_folder(self, folder_id: str) -> List[Dict]:
        """Get Drive file records whose parent folder matches, in insertion order."""
        pass
    
    @abstractmethod
    async def get_all_drive_files(self) -> List[Dict]:
        """Get all Drive file records."""
        pass
    
    @abstractmethod
    async def create_drive_file(self, file_data: Dict) -> Dict:
        """Create a Drive file record. Raises ValueError if the drive_id exists."""
        pass
    
    @abstractmethod
    async def update_drive_file(self, file_id: int, updates: Dict) -> Optional[Dict]:
        """Merge updates into a Drive file record."""
        pass
    
    @abstractmethod
    async def delete_drive_file(self, file_id: int) -> bool:
        """Delete a Drive file record."""
        pass
    
    # Metadata template operations
    @abstractmethod
    async def get_metadata_template(self, template_id: int) -> Optional[Dict]:
        """Get a metadata template by ID."""
        pass
    
    @abstractmethod
    async def get_all_metadata_templates(self) -> List[Dict]:
        """Get all metadata templates."""
        pass
    
    @abstractmethod
    async def create_metadata_template(self, template_data: Dict) -> Dict:
        """Create a metadata template."""
        pass
    
    @abstractmethod
    async def update_metadata_template(self, template_id: int, updates: Dict) -> Optional[Dict]:
        """Merge updates into a metadata template."""
        pass
    
    @abstractmethod
    async def delete_metadata_template(self, template_id: int) -> bool:
        """Delete a metadata template."""
        pass
    
    @abstractmethod
    async def clear_metadata_templates(self) -> int:
        """Delete every metadata template and return how many were removed."""
        pass
    
    # Processing job operations
    @abstractmethod
    async def get_processing_job(self, job_id: int) -> Optional[Dict]:
        """Get a processing job by ID."""
        pass
    
    @abstractmethod
    async def get_all_processing_jobs(self) -> List[Dict]:
        """Get all processing jobs."""
        pass
    
    @abstractmethod
    async def create_processing_job(self, job_data: Dict) -> Dict:
        """Create a processing job."""
        pass
    
    @abstractmethod
    async def update_processing_job(self, job_id: int, updates: Dict) -> Optional[Dict]:
        """Merge updates into a processing job."""
        pass
    
    @abstractmethod
    async def delete_processing_job(self, job_id: int) -> bool:
        """Delete a processing job."""
        pass
    
    @abstractmethod
    async def initialize(self):
        """Initialize database (create tables/collections, indexes, etc.)."""
        pass
    
    @abstractmethod
    async def close(self):
        """Close database connection."""
        pass
