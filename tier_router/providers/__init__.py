"""Vendor providers. Each binds one LLM vendor's REST API to the AIProvider contract."""

from tier_router.providers.base import HTTPProvider
from tier_router.providers.claude import ClaudeProvider
from tier_router.providers.groq import GroqProvider
from tier_router.providers.openai import OpenAIProvider

__all__ = [
    "HTTPProvider",
    "ClaudeProvider",
    "GroqProvider",
    "OpenAIProvider",
]
