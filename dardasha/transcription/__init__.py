"""Transcription module for Dardasha."""

from .base import AbstractTranscriptionBackend
from ..models.api import TranscriptionRequest, TranscriptionResponse
from .gemini_backend import GeminiTranscriptionBackend
from .google_backend import GoogleSpeechBackend
from .client import TranscriptionClient

__all__ = [
    "AbstractTranscriptionBackend",
    "TranscriptionRequest",
    "TranscriptionResponse",
    "GeminiTranscriptionBackend",
    "GoogleSpeechBackend",
    "TranscriptionClient",
]
