"""Completion-service adapters for the extraction engine."""

from .base import LLMAPIError, LLMClient, LLMResponse
from .openai import OpenAIClient

__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMAPIError",
    "OpenAIClient",
]
