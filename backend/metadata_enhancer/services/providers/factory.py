"""
AI Provider Factory.

Manages provider selection and initialization based on configuration.
Uses the Factory pattern to provide plug-and-play AI provider support.
"""
from ...core.config import OPENAI_API_KEY, AI_PROVIDER
from ...core.logging_config import get_logger
from .base import AIProvider
from .openai_provider import OpenAIProvider
from .mock_provider import MockProvider

logger = get_logger(__name__)


class AIProviderFactory:
    """
    Factory for creating AI provider instances.
    
    Selects OpenAI when configured with a key, otherwise falls back
    to MockProvider.
    """
    
    @staticmethod
    def get_provider() -> AIProvider:
        provider_type = (AI_PROVIDER or "").lower()
        
        if provider_type == "mock":
            logger.info("Using MockProvider (configured)")
            return MockProvider()
        
        if provider_type != "openai":
            logger.warning(f"⚠️  Unknown provider '{provider_type}', checking available API keys...")
        
        if OPENAI_API_KEY:
            logger.info("Using OpenAI provider")
            return OpenAIProvider()
        
        logger.warning("⚠️  OpenAI API key not configured, using MockProvider")
        return MockProvider()
