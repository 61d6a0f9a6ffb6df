"""Transcription client: one speech-to-text round-trip per recording."""

import logging

from pydantic import ValidationError

from .base import AbstractTranscriptionBackend
from ..errors import AudioReadError, NoSpeechDetectedError, TranscriptionTransportError
from ..models.api import TranscriptionRequest

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Sends an audio data URI to the backend once and returns the plain text."""

    def __init__(self, backend: AbstractTranscriptionBackend):
        self.backend = backend
        self.calls = 0

    async def transcribe(self, data_uri: str) -> str:
        """Transcribe the audio. No retry.

        Raises:
            AudioReadError: If the data URI is not audio.
            TranscriptionTransportError: If the service call fails.
            NoSpeechDetectedError: If the service understood nothing.
        """
        try:
            request = TranscriptionRequest(audio_data_uri=data_uri)
        except ValidationError as e:
            raise AudioReadError(f"Not an audio data URI: {e}") from e

        self.calls += 1
        logger.info(f"Transcribing {len(data_uri)} chars of audio with {self.backend.service_name}")
        try:
            response = await self.backend.transcribe(request)
        except TranscriptionTransportError:
            raise
        except Exception as e:
            logger.exception("Transcription backend failed")
            raise TranscriptionTransportError(f"Transcription failed: {e}") from e

        text = response.transcribed_text.strip()
        if not text:
            logger.info("Transcription returned no speech")
            raise NoSpeechDetectedError()

        logger.info(f"Transcribed: '{text[:80]}'")
        return text
