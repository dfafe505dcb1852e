"""
AI Providers Module - Modular AI provider implementations.

To add a new AI provider:
1. Create a new provider class inheriting from AIProvider
2. Implement all abstract methods
3. Register it in AIProviderFactory
"""
from .base import AIProvider
from .factory import AIProviderFactory
from .openai_provider import OpenAIProvider
from .mock_provider import MockProvider

__all__ = [
    "AIProvider",
    "AIProviderFactory",
    "OpenAIProvider",
    "MockProvider",
]
