"""
PDF Text Extractor.

Extracts text from PDF files using pypdf library.
"""
import io
from pypdf import PdfReader
from .base import BaseTextExtractor
from ...api.exceptions import TextExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class PDFExtractor(BaseTextExtractor):
    """Extractor for PDF files."""
    
    def __init__(self):
        super().__init__("PDF", ["application/pdf"], [".pdf"])
    
    def read_pages(self, file_bytes: bytes) -> tuple[str, int]:
        """
        Extract raw page text without validating it.
        
        Scanned PDFs legitimately produce little or no text, so callers
        that fall back to OCR use this instead of extract().
        
        Returns:
            (text, page_count)
        """
        try:
            reader = PdfReader(io.BytesIO(file_bytes))
            text_content = ""
            for page in reader.pages:
                page_text = page.extract_text()
                if page_text:
                    text_content += page_text + "\n"
            return text_content.strip(), len(reader.pages)
        except Exception as e:
            logger.error(f"Error extracting text from PDF: {e}", exc_info=True)
            raise TextExtractionError(f"Error extracting text from PDF: {e}") from e
    
    def extract(self, file_bytes: bytes) -> str:
        text_content, _ = self.read_pages(file_bytes)
        return self.validate_content(text_content)
