"""Provider implementations for different AI services."""

from .base import Provider, ProviderResponse, StreamChunk, TokenUsage
from .openai import OpenAICompatibleProvider, create_provider

__all__ = [
    "Provider",
    "ProviderResponse",
    "StreamChunk",
    "TokenUsage",
    "OpenAICompatibleProvider",
    "create_provider",
]
