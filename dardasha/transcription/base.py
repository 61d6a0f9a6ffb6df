"""Abstract base classes for transcription backends."""

from abc import ABC, abstractmethod
import logging

from ..models.api import TranscriptionRequest, TranscriptionResponse

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    service_name = "transcription"

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        """Transcribe one audio data URI.

        Args:
            request: Request carrying the audio data URI

        Returns:
            TranscriptionResponse; the text is empty when nothing was recognized

        Raises:
            TranscriptionTransportError: If the service cannot be reached or fails
        """
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
