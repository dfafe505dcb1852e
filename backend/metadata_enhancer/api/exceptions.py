"""
Custom exceptions for API layer.
Separates business exceptions from HTTP exceptions.
"""
from fastapi import HTTPException, status


class DriveFileNotFoundError(Exception):
    """Raised when a stored Drive file record is not found."""
    pass


class TemplateNotFoundError(Exception):
    """Raised when a metadata template is not found."""
    pass


class JobNotFoundError(Exception):
    """Raised when a processing job is not found."""
    pass


class NoMetadataToExportError(Exception):
    """Raised when a file has no AI-generated metadata to write to Drive."""
    pass


class FileProcessingError(Exception):
    """Raised when file processing fails."""
    pass


class TextExtractionError(Exception):
    """Raised when no usable text can be extracted from a file."""
    pass


class AIServiceError(Exception):
    """Raised when the AI provider call fails or returns unusable output."""
    pass


class GoogleDriveError(Exception):
    """Raised when a Google Drive call fails."""
    pass


class GoogleAuthError(GoogleDriveError):
    """Raised when Drive is used without valid credentials."""
    pass


class GoogleNotFoundError(GoogleDriveError):
    """Raised when Drive reports the file or folder does not exist."""
    pass


class GoogleAccessDeniedError(GoogleDriveError):
    """Raised when Drive refuses access to a file or folder."""
    pass


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, HTTPException):
        return e
    elif isinstance(e, (DriveFileNotFoundError, TemplateNotFoundError, JobNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, NoMetadataToExportError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, TextExtractionError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, GoogleAuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    elif isinstance(e, GoogleAccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    elif isinstance(e, GoogleNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, (GoogleDriveError, AIServiceError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    elif isinstance(e, ValueError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, FileProcessingError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
