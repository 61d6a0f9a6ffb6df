"""Data models for the Dardasha application."""

from .chat import Sender, Attachment, Message
from .audio import AudioStats, AudioBlob
from .state import MicrophonePermissionState, ActivityState
from .events import Notification
from .api import ChatRequest, ChatResponse, TranscriptionRequest, TranscriptionResponse

__all__ = [
    "Sender",
    "Attachment",
    "Message",
    "AudioStats",
    "AudioBlob",
    "MicrophonePermissionState",
    "ActivityState",
    "Notification",
    # Remote call schemas
    "ChatRequest",
    "ChatResponse",
    "TranscriptionRequest",
    "TranscriptionResponse",
]
