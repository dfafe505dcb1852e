"""
XLSX Text Extractor.

Extracts cell values from Excel workbooks using openpyxl library.
"""
import io
from openpyxl import load_workbook
from .base import BaseTextExtractor
from ...api.exceptions import TextExtractionError
from ...core.logging_config import get_logger
from ...utils.file_types import XLSX_MIME

logger = get_logger(__name__)

MAX_SHEETS = 3


class XLSXExtractor(BaseTextExtractor):
    """Extractor for XLSX files. Reads the first three sheets."""
    
    def __init__(self):
        super().__init__("XLSX", [XLSX_MIME], [".xlsx"])
    
    def extract(self, file_bytes: bytes) -> str:
        blocks = []
        try:
            workbook = load_workbook(io.BytesIO(file_bytes), data_only=True, read_only=True)
            try:
                for sheet in workbook.worksheets[:MAX_SHEETS]:
                    rows = []
                    for row in sheet.iter_rows(values_only=True):
                        cells = [str(value) for value in row if value is not None]
                        if cells:
                            rows.append("\t".join(cells))
                    if rows:
                        blocks.append(f"Sheet {sheet.title}:\n" + "\n".join(rows))
            finally:
                workbook.close()
        except Exception as e:
            logger.error(f"Error extracting text from XLSX: {e}", exc_info=True)
            raise TextExtractionError(f"Error extracting text from XLSX: {e}") from e
        
        return self.validate_content("\n\n".join(blocks))
