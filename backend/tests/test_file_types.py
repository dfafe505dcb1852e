import pytest

from metadata_enhancer.utils.file_types import (
    DOCX_MIME,
    PPTX_MIME,
    XLSX_MIME,
    get_document_type,
    get_file_type,
    is_office_mime_type,
)
from metadata_enhancer.services.metadata_fields import IMAGE_FIELDS, PDF_FIELDS, resolve_fields
from metadata_enhancer.services.google_drive_service import GoogleDriveService
from metadata_enhancer.services.text_extractors import TextExtractorFactory


@pytest.mark.parametrize("mime_type, expected", [
    ("image/png", "image"),
    ("video/mp4", "video"),
    ("audio/mpeg", "audio"),
    ("application/pdf", "pdf"),
    (DOCX_MIME, "document"),
    ("text/plain", "document"),
    ("application/zip", "other"),
    (None, "other"),
])
def test_get_file_type(mime_type, expected):
    assert get_file_type(mime_type) == expected


def test_office_mime_types():
    assert is_office_mime_type(XLSX_MIME)
    assert is_office_mime_type("TEXT/CSV")
    assert not is_office_mime_type("application/pdf")
    assert not is_office_mime_type(None)


def test_document_type_labels():
    assert get_document_type(PPTX_MIME) == "PowerPoint Presentation"
    assert get_document_type("application/x-unknown") == "Office Document"


def test_template_fields_override_defaults():
    template = {"fields": [{"name": "client", "description": "Client name", "type": "text"}]}
    assert resolve_fields("pdf", template) == template["fields"]
    assert resolve_fields("pdf", {"fields": []}) == PDF_FIELDS
    assert resolve_fields("other") == IMAGE_FIELDS


def test_drive_client_and_extractor_factory_share_classification():
    assert GoogleDriveService.get_file_type("video/quicktime") == "video"
    assert TextExtractorFactory.get_document_type(DOCX_MIME) == "Word Document"
