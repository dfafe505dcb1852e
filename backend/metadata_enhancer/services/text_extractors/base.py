"""
Base Text Extractor Interface.

All text extractors must inherit from this base class and implement
the extract() method.
"""
from abc import ABC, abstractmethod
from typing import Iterable
from ...api.exceptions import TextExtractionError


class BaseTextExtractor(ABC):
    """
    Abstract base class for text extractors.
    
    Each file format has its own extractor, registered with the factory
    under its MIME types and file extensions.
    """
    
    def __init__(self, format_name: str, mime_types: Iterable[str], extensions: Iterable[str]):
        """
        Args:
            format_name: Human-readable format name (e.g., 'PDF', 'DOCX')
            mime_types: MIME types handled by this extractor
            extensions: File extensions handled, with leading dot
        """
        self.format_name = format_name
        self.mime_types = {m.lower() for m in mime_types}
        self.extensions = {e.lower() for e in extensions}
    
    @abstractmethod
    def extract(self, file_bytes: bytes) -> str:
        """
        Extract text from file bytes.
        
        Raises:
            TextExtractionError: If extraction fails or yields no text
        """
        pass
    
    def validate_content(self, text_content: str) -> str:
        """Return the stripped text, or raise if nothing usable was found."""
        text_content = (text_content or "").strip()
        if not text_content:
            raise TextExtractionError(f"No text content found in {self.format_name} file")
        return text_content
