"""
OpenAI AI Provider.

Chat completions (JSON mode, vision) and Whisper transcription through the
official openai SDK. Credit balance comes from the billing dashboard API.
"""
from typing import List, Dict, Any, Optional
import json

import requests
from openai import OpenAI

from ...core.config import (
    OPENAI_API_KEY,
    OPENAI_MODEL,
    OPENAI_TRANSCRIPTION_MODEL,
    OPENAI_BILLING_URL,
)
from ...core.logging_config import get_logger
from .base import AIProvider

logger = get_logger(__name__)


class OpenAIProvider(AIProvider):
    """AI Provider using the OpenAI API."""
    
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or OPENAI_API_KEY
        self.model = model or OPENAI_MODEL
        self.client = OpenAI(api_key=self.api_key) if self.api_key else None
    
    def _require_client(self) -> OpenAI:
        if not self.client:
            raise ValueError("OpenAI API key not configured")
        return self.client
    
    def complete_json(
        self,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1000,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        client = self._require_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as e:
            logger.error(f"OpenAI API Error (chat): {e}")
            raise
        
        content = response.choices[0].message.content or "{}"
        result = json.loads(content)
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        return result
    
    def transcribe_audio(self, audio_bytes: bytes, filename: str) -> str:
        client = self._require_client()
        try:
            transcription = client.audio.transcriptions.create(
                model=OPENAI_TRANSCRIPTION_MODEL,
                file=(filename, audio_bytes),
            )
        except Exception as e:
            logger.error(f"OpenAI API Error (transcription): {e}")
            raise
        return transcription.text
    
    def get_account_balance(self) -> Dict[str, Any]:
        if not self.api_key:
            raise ValueError("OpenAI API key not configured")
        
        response = requests.get(
            OPENAI_BILLING_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=30,
        )
        response.raise_for_status()
        grants = response.json().get("data", [])
        
        total = sum(float(g.get("grant_amount", 0) or 0) for g in grants)
        used = sum(float(g.get("used_amount", 0) or 0) for g in grants)
        percentage = round(used / total * 100) if total > 0 else 0
        return {
            "balance": round(total - used, 2),
            "used": round(used, 2),
            "total": round(total, 2),
            "percentage": percentage,
            "currency": "USD",
        }
