"""
Default metadata fields per file type, used when no template is selected.
"""
from typing import Any, Dict, List, Optional


def _field(name: str, description: str, field_type: str = "text") -> Dict[str, Any]:
    return {"name": name, "description": description, "type": field_type}


IMAGE_FIELDS = [
    _field("description", "Detailed description of the image content"),
    _field("keywords", "Relevant keywords describing the image", "tags"),
    _field("category", "Image category (portrait, landscape, product, document, etc.)"),
    _field("mood", "Mood or atmosphere conveyed by the image"),
]

PDF_FIELDS = [
    _field("title", "Main title or heading of the document"),
    _field("description", "Comprehensive summary of the document content"),
    _field("keywords", "Key terms and topics from the document", "tags"),
    _field("category", "Document category (report, manual, invoice, article, etc.)"),
    _field("subject", "Primary subject or domain"),
    _field("document_type", "Specific type of document"),
    _field("key_points", "Main points or findings", "tags"),
    _field("author_info", "Author or organization information if mentioned"),
]

VIDEO_FIELDS = [
    _field("description", "Comprehensive description of the video content, activities, and context"),
    _field("keywords", "Specific and relevant keywords based on visual and audio content", "tags"),
    _field("category", "Video category, genre, or content type"),
    _field("mood", "Emotional tone, mood, or atmosphere of the video"),
    _field("themes", "Main themes, topics, or subjects covered", "tags"),
    _field("people", "People, speakers, or participants visible or mentioned", "tags"),
    _field("objects", "Key objects, products, or items shown in the video", "tags"),
    _field("activities", "Activities, actions, or events taking place", "tags"),
    _field("setting", "Location, environment, or setting of the video"),
    _field("quality", "Production quality and style assessment"),
]

AUDIO_FIELDS = [
    _field("description", "Description of the audio content and topic"),
    _field("keywords", "Key topics and terms from the audio", "tags"),
    _field("category", "Audio category (music, podcast, speech, etc.)"),
    _field("mood", "Tone or mood of the audio content"),
    _field("speakers", "Speakers or performers identified", "tags"),
    _field("topics", "Main topics or subjects discussed", "tags"),
    _field("language", "Primary language of the audio"),
    _field("genre", "Genre or style classification"),
]

DOCUMENT_FIELDS = [
    _field("title", "Main title or heading of the document"),
    _field("description", "Comprehensive summary of the document content"),
    _field("keywords", "Key terms and topics from the document", "tags"),
    _field("category", "Document category"),
    _field("subject", "Primary subject or domain"),
    _field("document_type", "Specific type of document (proposal, report, spreadsheet, slides, etc.)"),
    _field("key_points", "Main points or findings", "tags"),
    _field("target_audience", "Intended audience of the document"),
    _field("content_structure", "How the content is organized"),
]

OCR_FIELDS = [
    _field(
        "extracted_text",
        "All readable text on this page, preserving reading order",
    ),
]

EMERGENCY_OCR_FIELDS = [
    _field(
        "full_page_text",
        "Extract ALL text from this document page. Include titles, headings, body paragraphs, "
        "bullet points, captions, footnotes, and any other readable content. "
        "Preserve structure where possible.",
    ),
]

DEFAULT_FIELDS_BY_TYPE = {
    "image": IMAGE_FIELDS,
    "pdf": PDF_FIELDS,
    "video": VIDEO_FIELDS,
    "audio": AUDIO_FIELDS,
    "document": DOCUMENT_FIELDS,
}


def resolve_fields(file_type: str, template: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Template fields when a template with fields is given, else the type defaults."""
    if template and template.get("fields"):
        return list(template["fields"])
    return list(DEFAULT_FIELDS_BY_TYPE.get(file_type, IMAGE_FIELDS))
