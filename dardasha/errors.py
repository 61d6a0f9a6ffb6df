"""Error taxonomy for Dardasha.

Every error a user action can hit is a ``DardashaError``. Each one carries the
title and description of the notification shown to the user, so the chat
session can report any of them the same way and return to an idle state.
"""

from typing import Optional


class DardashaError(Exception):
    """Base class for all recoverable Dardasha errors."""

    title = "Error"
    description = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.description)


class PermissionDeniedError(DardashaError):
    title = "Microphone access denied"
    description = "Please allow microphone access for this terminal to use voice input."


class CaptureUnsupportedError(DardashaError):
    title = "Microphone not supported"
    description = "No audio input device or capture API is available on this system."


class EmptyRecordingError(DardashaError):
    title = "Empty recording"
    description = "No audio was captured. Please try recording again."


class AudioReadError(DardashaError):
    title = "Audio processing error"
    description = "The recorded audio could not be read. Please try again."


class TranscriptionTransportError(DardashaError):
    title = "Transcription failed"
    description = "Failed to transcribe the audio. Please try again."


class NoSpeechDetectedError(DardashaError):
    title = "No speech detected"
    description = "No speech could be understood in the recording. Please try again."


class ChatTransportError(DardashaError):
    title = "Error"
    description = "Failed to get a response from the AI. Please try again."


class FileTooLargeError(DardashaError):
    title = "File too large"
    description = "Please select a file smaller than 4 MB."


class UnsupportedFileTypeError(DardashaError):
    title = "Unsupported file type"
    description = "Please select an image, PDF, text, JSON or CSV file."


class FileReadError(DardashaError):
    title = "File read error"
    description = "The selected file could not be read."


class RecorderStateError(DardashaError):
    title = "Recorder busy"
    description = "The recorder cannot do that right now."


class InvalidStateTransitionError(DardashaError):
    title = "Busy"
    description = "Another operation is still in progress."
