"""LLM provider implementations."""

from fitnation.core.llm.providers.anthropic import AnthropicProvider
from fitnation.core.llm.providers.mock import MockProvider
from fitnation.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
