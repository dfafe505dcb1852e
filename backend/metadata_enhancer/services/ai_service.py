"""
AI Service - builds analysis prompts per media type and returns JSON metadata.

Provider calls are blocking and run in worker threads.
"""
import asyncio
import json
from typing import Optional, List, Dict, Any

from .providers import AIProvider, AIProviderFactory
from ..api.exceptions import AIServiceError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

ANALYSIS_MAX_TOKENS = 1000
DEFAULT_METADATA_MAX_TOKENS = 500
DOCUMENT_TEXT_LIMIT = 12000
MAX_VIDEO_FRAMES = 5

FIELD_VALUE_RULES = (
    "For each field, provide appropriate values based on the content. "
    "For 'tags' type fields, return an array of relevant tags. "
    "For 'select' type fields, choose from the provided options or suggest "
    "similar values if none fit perfectly."
)

DEFAULT_METADATA_FIELDS = [
    {"name": "description", "description": "A short description of the file", "type": "text"},
    {"name": "keywords", "description": "Relevant keywords", "type": "tags"},
    {"name": "category", "description": "The most fitting category", "type": "text"},
    {"name": "mood", "description": "The overall mood or tone", "type": "text"},
]


def format_field_descriptions(fields: List[Dict[str, Any]]) -> str:
    """Render template fields as ``- name: description (type, options: a, b)`` lines."""
    lines = []
    for field in fields:
        options = field.get("options")
        suffix = f", options: {', '.join(options)}" if options else ""
        lines.append(f"- {field['name']}: {field['description']} ({field.get('type', 'text')}{suffix})")
    return "\n".join(lines)


def _image_part(base64_image: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{mime_type};base64,{base64_image}"},
    }


class AIService:
    """
    AI service implementation.
    Builds analysis prompts per media type and turns them into JSON metadata.
    Provider calls are blocking, so they run in worker threads.
    """
    def __init__(self, provider: Optional[AIProvider] = None):
        self.provider = provider or AIProviderFactory.get_provider()
        logger.info(f"Initialized AIService with provider: {type(self.provider).__name__}")

    def _system_prompt(self, role: str, subject: str, fields: List[Dict[str, Any]]) -> str:
        return (
            f"You are an expert {role}. Analyze the provided {subject} and generate metadata "
            f"based on the specified fields. Return your response as JSON with the field names as keys.\n\n"
            f"Metadata Fields:\n{format_field_descriptions(fields)}\n\n{FIELD_VALUE_RULES}"
        )

    async def _complete(
        self,
        operation: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self.provider.complete_json, messages, max_tokens, temperature
            )
        except Exception as e:
            logger.error(f"AI Service Error ({operation}): {e}")
            raise AIServiceError(f"Failed to {operation}: {e}") from e

    async def complete_json(
        self,
        operation: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        """Raw JSON completion for callers that build their own prompts."""
        return await self._complete(operation, messages, max_tokens, temperature)

    async def analyze_image(
        self,
        base64_image: str,
        fields: List[Dict[str, Any]],
        mime_type: str = "image/jpeg"
    ) -> Dict[str, Any]:
        logger.debug(f"Analyzing image ({len(fields)} fields)")
        messages = [
            {"role": "system", "content": self._system_prompt("image analyst", "image", fields)},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Analyze this image and generate metadata for the specified fields."},
                    _image_part(base64_image, mime_type),
                ],
            },
        ]
        return await self._complete("analyze image", messages)

    async def analyze_document_content(
        self,
        text: str,
        fields: List[Dict[str, Any]],
        context: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Analyze extracted document text.

        Args:
            text: Extracted text (truncated before sending)
            fields: Metadata fields to fill
            context: File facts such as filename, fileType and pageCount
        """
        logger.debug(f"Analyzing document text ({len(text)} chars, {len(fields)} fields)")
        messages = [
            {"role": "system", "content": self._system_prompt("document analyst", "document content", fields)},
            {
                "role": "user",
                "content": (
                    f"Document information:\n{json.dumps(context, indent=2, default=str)}\n\n"
                    f"Document content:\n{text[:DOCUMENT_TEXT_LIMIT]}"
                ),
            },
        ]
        return await self._complete("analyze document", messages)

    async def analyze_document_by_context(
        self,
        context: Dict[str, Any],
        fields: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Best-effort metadata from file facts alone, when no text could be read."""
        messages = [
            {
                "role": "system",
                "content": self._system_prompt(
                    "document analyst",
                    "document information (the content itself could not be read)",
                    fields,
                ),
            },
            {
                "role": "user",
                "content": (
                    "Infer metadata from the file name, type and other details:\n\n"
                    f"{json.dumps(context, indent=2, default=str)}"
                ),
            },
        ]
        return await self._complete("analyze document by context", messages)

    async def analyze_video(
        self,
        context: Dict[str, Any],
        thumbnail_b64: Optional[str],
        fields: List[Dict[str, Any]],
        frames: Optional[List[str]] = None,
        transcript: Optional[str] = None
    ) -> Dict[str, Any]:
        frames = (frames or [])[:MAX_VIDEO_FRAMES]
        text = f"Analyze this video.\n\nMetadata: {json.dumps(context, indent=2, default=str)}"
        if transcript:
            text += f"\n\nAudio transcript:\n{transcript[:DOCUMENT_TEXT_LIMIT]}"
        if frames:
            text += f"\n\n{len(frames)} frames sampled across the video are attached."

        content: List[Dict[str, Any]] = [{"type": "text", "text": text}]
        if frames:
            content.extend(_image_part(frame) for frame in frames)
        elif thumbnail_b64:
            content.append(_image_part(thumbnail_b64))

        messages = [
            {"role": "system", "content": self._system_prompt("video analyst", "video information", fields)},
            {"role": "user", "content": content},
        ]
        logger.debug(
            f"Analyzing video (frames: {len(frames)}, thumbnail: {thumbnail_b64 is not None}, "
            f"transcript: {transcript is not None})"
        )
        return await self._complete("analyze video", messages)

    async def analyze_audio(self, context: Dict[str, Any], fields: List[Dict[str, Any]]) -> Dict[str, Any]:
        messages = [
            {"role": "system", "content": self._system_prompt("audio analyst", "audio information and transcript", fields)},
            {"role": "user", "content": f"Analyze this audio file:\n\n{json.dumps(context, indent=2, default=str)}"},
        ]
        return await self._complete("analyze audio", messages)

    async def generate_default_metadata(self, file_name: str, file_type: str, mime_type: Optional[str]) -> Dict[str, Any]:
        messages = [
            {
                "role": "system",
                "content": self._system_prompt("file analyst", "file details", DEFAULT_METADATA_FIELDS),
            },
            {
                "role": "user",
                "content": f"File name: {file_name}\nFile type: {file_type}\nMIME type: {mime_type or 'unknown'}",
            },
        ]
        return await self._complete("generate default metadata", messages, max_tokens=DEFAULT_METADATA_MAX_TOKENS)

    async def transcribe_audio(self, audio_bytes: bytes, filename: str) -> str:
        try:
            return await asyncio.to_thread(self.provider.transcribe_audio, audio_bytes, filename)
        except Exception as e:
            logger.error(f"AI Service Error (transcribe audio): {e}")
            raise AIServiceError(f"Failed to transcribe audio: {e}") from e

    async def get_account_balance(self) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(self.provider.get_account_balance)
        except Exception as e:
            logger.error(f"AI Service Error (account balance): {e}")
            raise AIServiceError(f"Failed to get account balance: {e}") from e
