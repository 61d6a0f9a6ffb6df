"""Chat model backends for Dardasha."""

from .base import AbstractChatBackend
from ..models.api import ChatRequest, ChatResponse
from .gemini_backend import GeminiChatBackend
from .openai_backend import OpenAIChatBackend

__all__ = [
    "AbstractChatBackend",
    "ChatRequest",
    "ChatResponse",
    "GeminiChatBackend",
    "OpenAIChatBackend",
]
