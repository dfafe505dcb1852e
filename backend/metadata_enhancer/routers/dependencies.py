"""
Shared dependencies for routers.
Provides database and service initialization.
"""
from typing import Optional

from ..services.database import DatabaseFactory
from ..services.ai_service import AIService
from ..services.google_drive_service import GoogleDriveService
from ..services.file_processor import FileProcessorService
from ..services.drive_sync_service import DriveSyncService
from ..services.search_service import SearchService
from ..services.agentic_search_service import AgenticSearchService
from ..core.config import DATABASE_TYPE
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Global services (initialized on startup, shared across request handlers)
db_service = None
drive_service: Optional[GoogleDriveService] = None
ai_service: Optional[AIService] = None
file_processor: Optional[FileProcessorService] = None
sync_service: Optional[DriveSyncService] = None
search_service: Optional[SearchService] = None
agentic_search_service: Optional[AgenticSearchService] = None


async def initialize_database():
    """Initialize database adapter based on configuration."""
    global db_service

    logger.info(f"Initializing database: {DATABASE_TYPE}")
    db_service = await DatabaseFactory.create_and_initialize(DATABASE_TYPE)
    logger.info("  ✅ Database initialized")


async def initialize_services(
    drive: Optional[GoogleDriveService] = None,
    ai: Optional[AIService] = None
):
    """
    Initialize all services after database is ready.

    Args:
        drive: Drive client to use instead of one built from configuration
        ai: AI service to use instead of one built from configuration
    """
    global drive_service, ai_service, file_processor, sync_service, search_service, agentic_search_service

    if db_service is None:
        await initialize_database()

    logger.info("Initializing services...")

    drive_service = drive or GoogleDriveService()
    logger.info(f"  ✅ Google Drive Service initialized (connected: {drive_service.is_authenticated()})")

    ai_service = ai or AIService()
    logger.info("  ✅ AI Service initialized")

    file_processor = FileProcessorService(db_service, drive_service, ai_service)
    logger.info(f"  ✅ File Processor initialized (batch delay: {file_processor.batch_delay}s)")

    sync_service = DriveSyncService(db_service, drive_service)
    search_service = SearchService(db_service)
    agentic_search_service = AgenticSearchService(db_service, ai_service)
    logger.info("  ✅ Sync and search services initialized")


async def shutdown_services():
    """Stop background batches and close the database."""
    if file_processor is not None:
        await file_processor.shutdown()
    if db_service is not None:
        await db_service.close()


def get_db_service():
    """Get database service (dependency injection)."""
    if db_service is None:
        raise RuntimeError("Database service not initialized")
    return db_service


def get_drive_service() -> GoogleDriveService:
    if drive_service is None:
        raise RuntimeError("Google Drive service not initialized")
    return drive_service


def get_ai_service() -> AIService:
    if ai_service is None:
        raise RuntimeError("AI service not initialized")
    return ai_service


def get_file_processor() -> FileProcessorService:
    if file_processor is None:
        raise RuntimeError("File processor not initialized")
    return file_processor


def get_sync_service() -> DriveSyncService:
    if sync_service is None:
        raise RuntimeError("Drive sync service not initialized")
    return sync_service


def get_search_service() -> SearchService:
    if search_service is None:
        raise RuntimeError("Search service not initialized")
    return search_service


def get_agentic_search_service() -> AgenticSearchService:
    if agentic_search_service is None:
        raise RuntimeError("Agentic search service not initialized")
    return agentic_search_service
