"""
DOCX Text Extractor.

Extracts text from DOCX files using python-docx library.
"""
import io
from docx import Document as DocxDocument
from .base import BaseTextExtractor
from ...api.exceptions import TextExtractionError
from ...core.logging_config import get_logger
from ...utils.file_types import DOCX_MIME

logger = get_logger(__name__)


class DOCXExtractor(BaseTextExtractor):
    """Extractor for DOCX files."""
    
    def __init__(self):
        super().__init__("DOCX", [DOCX_MIME], [".docx"])
    
    def extract(self, file_bytes: bytes) -> str:
        try:
            doc = DocxDocument(io.BytesIO(file_bytes))
            text_content = ""
            
            for paragraph in doc.paragraphs:
                if paragraph.text.strip():
                    text_content += paragraph.text + "\n"
            
            for table in doc.tables:
                for row in table.rows:
                    row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                    if row_text:
                        text_content += " | ".join(row_text) + "\n"
        except Exception as e:
            logger.error(f"Error extracting text from DOCX: {e}", exc_info=True)
            raise TextExtractionError(f"Error extracting text from DOCX: {e}") from e
        
        return self.validate_content(text_content)
