"""
Mock AI Provider.

Provides deterministic offline responses for development, tests and
fallback when no API key is configured. No network calls are made.
"""
from typing import List, Dict, Any
import json
import re

from .base import AIProvider, SEARCH_FILES_MARKER, SEARCH_QUERY_PREFIX

# Field lines look like "- name: description (type, options: a, b)"
_FIELD_LINE = re.compile(r"^- ([\w .\-]+?): .*\((text|select|tags)(?:, options: (.*))?\)\s*$")


def _message_text(message: Dict[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(part.get("text", "") for part in content if part.get("type") == "text")
    return ""


class MockProvider(AIProvider):
    """
    Mock AI Provider for testing and fallback scenarios.
    
    Metadata prompts are answered with one placeholder value per requested
    field. Search prompts are answered by keyword overlap.
    """
    
    def complete_json(
        self,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1000,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        prompt = "\n".join(_message_text(m) for m in messages)
        if SEARCH_FILES_MARKER in prompt:
            return self._rank_files(prompt)
        
        result: Dict[str, Any] = {}
        for line in prompt.splitlines():
            match = _FIELD_LINE.match(line.strip())
            if not match:
                continue
            name, field_type, options = match.groups()
            if field_type == "tags":
                result[name] = ["mock", name.replace("_", " ")]
            elif field_type == "select" and options:
                result[name] = options.split(", ")[0]
            else:
                result[name] = f"Mock {name.replace('_', ' ')}"
        return result
    
    def _rank_files(self, prompt: str) -> Dict[str, Any]:
        head, _, files_json = prompt.partition(SEARCH_FILES_MARKER)
        query = head.split(SEARCH_QUERY_PREFIX, 1)[-1].strip().lower()
        words = [w for w in query.split() if w]
        try:
            files = json.loads(files_json.strip())
        except ValueError:
            files = []
        
        scored = []
        for entry in files:
            haystack = json.dumps(entry).lower()
            score = sum(1 for w in words if w in haystack)
            if score:
                scored.append((score, entry.get("id")))
        scored.sort(key=lambda pair: -pair[0])
        
        return {
            "relevantFileIds": [file_id for _, file_id in scored],
            "reasoning": "Mock ranking by keyword overlap with the query.",
            "confidence": 0.5 if scored else 0.0,
        }
    
    def transcribe_audio(self, audio_bytes: bytes, filename: str) -> str:
        return f"Mock transcript of {filename}."
    
    def get_account_balance(self) -> Dict[str, Any]:
        return {
            "balance": 0.0,
            "used": 0.0,
            "total": 0.0,
            "percentage": 0,
            "currency": "USD",
        }
