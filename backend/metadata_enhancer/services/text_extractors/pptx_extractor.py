"""
PPTX Text Extractor.

Extracts slide text from PowerPoint files using python-pptx library.
"""
import io
from pptx import Presentation
from .base import BaseTextExtractor
from ...api.exceptions import TextExtractionError
from ...core.logging_config import get_logger
from ...utils.file_types import PPTX_MIME

logger = get_logger(__name__)

MAX_TEXT_RUNS = 50


class PPTXExtractor(BaseTextExtractor):
    """Extractor for PPTX files. Stops after the first 50 text runs."""
    
    def __init__(self):
        super().__init__("PPTX", [PPTX_MIME], [".pptx"])
    
    def extract(self, file_bytes: bytes) -> str:
        runs = []
        try:
            presentation = Presentation(io.BytesIO(file_bytes))
            for slide in presentation.slides:
                for shape in slide.shapes:
                    if not shape.has_text_frame:
                        continue
                    for paragraph in shape.text_frame.paragraphs:
                        for run in paragraph.runs:
                            if run.text.strip():
                                runs.append(run.text.strip())
                            if len(runs) >= MAX_TEXT_RUNS:
                                return self.validate_content(" ".join(runs))
        except TextExtractionError:
            raise
        except Exception as e:
            logger.error(f"Error extracting text from PPTX: {e}", exc_info=True)
            raise TextExtractionError(f"Error extracting text from PPTX: {e}") from e
        
        return self.validate_content(" ".join(runs))
