"""
Text Extractors Module - Modular file format handlers.

To add support for a new file format:
1. Create a new extractor class inheriting from BaseTextExtractor
2. Implement the extract() method
3. Register it with TextExtractorFactory.register()
"""
from .base import BaseTextExtractor
from .factory import TextExtractorFactory
from .pdf_extractor import PDFExtractor
from .docx_extractor import DOCXExtractor
from .pptx_extractor import PPTXExtractor
from .xlsx_extractor import XLSXExtractor
from .text_extractor import TextExtractor

__all__ = [
    "BaseTextExtractor",
    "TextExtractorFactory",
    "PDFExtractor",
    "DOCXExtractor",
    "PPTXExtractor",
    "XLSXExtractor",
    "TextExtractor",
]
