"""Backend adapters, one per generation provider."""

from .anthropic_adapter import AnthropicAdapter
from .base import GenerationParams, IBackendAdapter
from .google_adapter import GoogleAdapter
from .openai_adapter import OpenAIAdapter

__all__ = [
    "AnthropicAdapter",
    "GenerationParams",
    "GoogleAdapter",
    "IBackendAdapter",
    "OpenAIAdapter",
]
