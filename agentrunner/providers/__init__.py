from .base import BaseAgentProvider, MAX_TURNS
from .openai import OpenAICompatibleProvider
from .gemini import GeminiAgentProvider

__all__ = ["BaseAgentProvider", "OpenAICompatibleProvider", "GeminiAgentProvider", "MAX_TURNS"]
