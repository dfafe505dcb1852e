"""
Base AI Provider Interface.

All AI providers must inherit from this base class and implement
all abstract methods.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any

# Layout of the agentic search prompt, shared with providers that parse it
SEARCH_QUERY_PREFIX = "Search query: "
SEARCH_FILES_MARKER = "\n\nAvailable files:\n"


class AIProvider(ABC):
    """
    Abstract base class for AI providers.
    
    Providers are synchronous; AIService runs them in worker threads.
    """
    
    @abstractmethod
    def complete_json(
        self,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1000,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        """
        Run a chat completion that must answer with a JSON object.
        
        Args:
            messages: Chat messages; user content may be a list of text and
                      image_url parts
            max_tokens: Completion token limit
            temperature: Sampling temperature
            
        Returns:
            Parsed JSON object
        """
        pass
    
    @abstractmethod
    def transcribe_audio(self, audio_bytes: bytes, filename: str) -> str:
        """
        Transcribe speech in an audio file.
        
        Args:
            audio_bytes: Raw audio content
            filename: Name with extension, used to infer the audio format
            
        Returns:
            Transcript text
        """
        pass
    
    @abstractmethod
    def get_account_balance(self) -> Dict[str, Any]:
        """
        Report remaining API credit.
        
        Returns:
            Dict with balance, used, total, percentage and currency
        """
        pass
