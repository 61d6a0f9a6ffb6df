"""HTTP clients for hosted model APIs."""

from .gemini_client import GeminiClient, GeminiAPIError

__all__ = [
    "GeminiClient",
    "GeminiAPIError",
]
