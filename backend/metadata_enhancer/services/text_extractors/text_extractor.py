"""
Plain Text Extractor.

Decodes UTF-8 text files (TXT, CSV, Markdown, JSON).
"""
from .base import BaseTextExtractor


class TextExtractor(BaseTextExtractor):
    """Extractor for plain text formats."""
    
    def __init__(self):
        super().__init__(
            "Text",
            ["text/plain", "text/csv", "text/markdown", "application/json"],
            [".txt", ".csv", ".md", ".markdown", ".json", ".log"],
        )
    
    def extract(self, file_bytes: bytes) -> str:
        return self.validate_content(file_bytes.decode("utf-8", errors="ignore"))
