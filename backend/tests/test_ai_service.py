import asyncio

import pytest

from metadata_enhancer.api.exceptions import AIServiceError
from metadata_enhancer.services.ai_service import AIService, DOCUMENT_TEXT_LIMIT, format_field_descriptions
from metadata_enhancer.services.media_service import frame_timestamps
from metadata_enhancer.services.providers import MockProvider


class RecordingProvider(MockProvider):
    def __init__(self):
        self.calls = []

    def complete_json(self, messages, max_tokens=1000, temperature=0.7):
        self.calls.append({"messages": messages, "max_tokens": max_tokens, "temperature": temperature})
        return super().complete_json(messages, max_tokens, temperature)


def test_format_field_descriptions():
    rendered = format_field_descriptions([
        {"name": "mood", "description": "Overall mood", "type": "select", "options": ["calm", "tense"]},
        {"name": "tags", "description": "Tags", "type": "tags"},
    ])
    assert rendered == "- mood: Overall mood (select, options: calm, tense)\n- tags: Tags (tags)"


def test_document_text_is_truncated():
    provider = RecordingProvider()
    service = AIService(provider)
    fields = [{"name": "title", "description": "Title", "type": "text"}]

    result = asyncio.run(service.analyze_document_content("x" * 20000, fields, {"filename": "notes.md"}))

    assert result == {"title": "Mock title"}
    user_content = provider.calls[0]["messages"][1]["content"]
    assert user_content.count("x") == DOCUMENT_TEXT_LIMIT


def test_video_prefers_frames_over_thumbnail():
    provider = RecordingProvider()
    service = AIService(provider)
    fields = [{"name": "setting", "description": "Setting", "type": "text"}]

    asyncio.run(service.analyze_video({"fileName": "clip.mp4"}, "thumb", fields, frames=["f"] * 7))

    parts = provider.calls[0]["messages"][1]["content"]
    images = [p for p in parts if p["type"] == "image_url"]
    assert len(images) == 5
    assert all("thumb" not in p["image_url"]["url"] for p in images)


def test_default_metadata_uses_smaller_token_budget():
    provider = RecordingProvider()
    result = asyncio.run(AIService(provider).generate_default_metadata("a.bin", "other", None))
    assert provider.calls[0]["max_tokens"] == 500
    assert result["keywords"] == ["mock", "keywords"]


def test_provider_errors_become_ai_service_errors(failing_ai_service):
    with pytest.raises(AIServiceError, match="Failed to analyze image"):
        asyncio.run(failing_ai_service.analyze_image("abc", [{"name": "x", "description": "x", "type": "text"}]))


def test_frame_timestamps():
    assert frame_timestamps(None) == [1.0]
    assert frame_timestamps(100.0) == [1.0, 25.0, 50.0, 75.0, 95.0]
    assert frame_timestamps(1.0)[0] == 0.5
