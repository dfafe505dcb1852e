"""
Text Extractor Factory.

Manages registration and retrieval of text extractors for different file formats.
Lookup is by MIME type first, then by file extension.
"""
from typing import Dict, Optional
from pathlib import Path
from .base import BaseTextExtractor
from .pdf_extractor import PDFExtractor
from .docx_extractor import DOCXExtractor
from .pptx_extractor import PPTXExtractor
from .xlsx_extractor import XLSXExtractor
from .text_extractor import TextExtractor
from ...api.exceptions import TextExtractionError
from ...core.logging_config import get_logger
from ...utils.file_types import get_document_type as _get_document_type

logger = get_logger(__name__)


class TextExtractorFactory:
    """
    Factory for managing text extractors.
    
    Provides a centralized registry of extractors and easy extension
    for new file formats.
    """
    
    _by_mime: Dict[str, BaseTextExtractor] = {}
    _by_extension: Dict[str, BaseTextExtractor] = {}
    _initialized = False
    
    @classmethod
    def _initialize(cls):
        if cls._initialized:
            return
        cls._initialized = True
        for extractor in (PDFExtractor(), DOCXExtractor(), PPTXExtractor(), XLSXExtractor(), TextExtractor()):
            cls.register(extractor)
        logger.debug(f"TextExtractorFactory initialized with {len(cls._by_mime)} MIME types")
    
    @classmethod
    def register(cls, extractor: BaseTextExtractor):
        """Register an extractor under all its MIME types and extensions."""
        cls._initialize()
        for mime_type in extractor.mime_types:
            cls._by_mime[mime_type] = extractor
        for extension in extractor.extensions:
            cls._by_extension[extension] = extractor
    
    @classmethod
    def get_extractor(cls, mime_type: Optional[str], filename: Optional[str] = None) -> Optional[BaseTextExtractor]:
        cls._initialize()
        extractor = cls._by_mime.get((mime_type or "").lower())
        if extractor is None and filename:
            extractor = cls._by_extension.get(Path(filename).suffix.lower())
        return extractor
    
    @classmethod
    def is_supported(cls, mime_type: Optional[str], filename: Optional[str] = None) -> bool:
        return cls.get_extractor(mime_type, filename) is not None
    
    @classmethod
    def extract_text(cls, file_bytes: bytes, mime_type: Optional[str], filename: Optional[str] = None) -> str:
        """
        Extract text using the extractor registered for the file.
        
        Raises:
            TextExtractionError: If the format is unsupported or extraction fails
        """
        extractor = cls.get_extractor(mime_type, filename)
        if extractor is None:
            raise TextExtractionError(
                f"Unsupported document format: {mime_type or 'unknown'} ({filename or 'unnamed'})"
            )
        logger.debug(f"Extracting text with {extractor.format_name} extractor")
        return extractor.extract(file_bytes)
    
    @staticmethod
    def get_document_type(mime_type: Optional[str]) -> str:
        return _get_document_type(mime_type)
