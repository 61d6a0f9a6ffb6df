"""Audio capture and encoding module."""

from .permission import MicrophonePermissionManager
from .capture import AudioRecorder, RecordingSession
from .encoder import AudioEncoder

__all__ = [
    'MicrophonePermissionManager',
    'AudioRecorder',
    'RecordingSession',
    'AudioEncoder',
]
