"""
MIME type classification shared by the Drive client, the text extractors
and the file processor.
"""
from typing import Optional

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

OFFICE_MIME_TYPES = {
    DOCX_MIME,
    PPTX_MIME,
    XLSX_MIME,
    "application/vnd.ms-word",
    "application/vnd.ms-powerpoint",
    "application/vnd.ms-excel",
    "application/msword",
    "application/rtf",
    "text/plain",
    "text/csv",
    "text/markdown",
    "application/json",
}

# Human-readable labels sent to the model as document context
DOCUMENT_TYPE_LABELS = {
    DOCX_MIME: "Word Document",
    "application/msword": "Word Document",
    "application/vnd.ms-word": "Word Document",
    PPTX_MIME: "PowerPoint Presentation",
    "application/vnd.ms-powerpoint": "PowerPoint Presentation",
    XLSX_MIME: "Excel Spreadsheet",
    "application/vnd.ms-excel": "Excel Spreadsheet",
    "text/plain": "Text Document",
    "text/csv": "CSV Document",
    "text/markdown": "Markdown Document",
    "application/json": "JSON Document",
    "application/rtf": "RTF Document",
    "application/pdf": "PDF Document",
}


def is_office_mime_type(mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower() in OFFICE_MIME_TYPES


def get_file_type(mime_type: Optional[str]) -> str:
    """
    Classify a MIME type into one of the stored file types.
    
    Returns:
        'image', 'video', 'audio', 'pdf', 'document' or 'other'
    """
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    if mime == "application/pdf":
        return "pdf"
    if mime in OFFICE_MIME_TYPES:
        return "document"
    return "other"


def get_document_type(mime_type: Optional[str]) -> str:
    return DOCUMENT_TYPE_LABELS.get((mime_type or "").lower(), "Office Document")
