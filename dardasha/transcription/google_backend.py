"""Google Speech-to-Text transcription backend."""

import asyncio
import time
import logging
from typing import Optional, Dict

import numpy as np

from .base import AbstractTranscriptionBackend
from ..encoding import parse_data_uri, base_mime_type
from ..errors import TranscriptionTransportError
from ..models.api import TranscriptionRequest, TranscriptionResponse

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


def _mime_parameters(mime_type: str) -> Dict[str, str]:
    """``audio/l16;rate=16000;channels=1`` -> ``{'rate': '16000', 'channels': '1'}``."""
    params = {}
    for item in mime_type.split(";")[1:]:
        key, _, value = item.partition("=")
        params[key.strip().lower()] = value.strip()
    return params


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for transcription."""

    service_name = "Google Speech-to-Text"

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 timeout: float = 30.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            language: Language code (e.g., 'en-US', 'ar-EG')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            timeout: Per-request deadline in seconds
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        if not self.credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.timeout = timeout
        self.client = None
        self.project_id = None

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)

        # Initialize client with direct credentials - CRASH if credentials are invalid
        self.client = speech.SpeechClient(credentials=credentials)

        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def build_config(self, mime_type: str) -> speech.RecognitionConfig:
        """Recognition config for the given audio MIME type."""
        kwargs = dict(
            language_code=self.language,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            model="latest_short",
        )
        if base_mime_type(mime_type) == "audio/l16":
            params = _mime_parameters(mime_type)
            kwargs["encoding"] = speech.RecognitionConfig.AudioEncoding.LINEAR16
            kwargs["sample_rate_hertz"] = int(params.get("rate", 16000))
            kwargs["audio_channel_count"] = int(params.get("channels", 1))
        # WAV: encoding and sample rate come from the RIFF header
        return speech.RecognitionConfig(**kwargs)

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.transcribe_sync, request)

    def transcribe_sync(self, request: TranscriptionRequest) -> TranscriptionResponse:
        """Transcribe audio using Google Speech-to-Text."""
        if self.client is None:
            raise TranscriptionTransportError("Google Speech backend is not initialized")

        start_time = time.time()
        mime_type, audio_bytes = parse_data_uri(request.audio_data_uri)
        if base_mime_type(mime_type) == "audio/l16":
            # LINEAR16 is little-endian; audio/l16 is big-endian
            audio_bytes = np.frombuffer(audio_bytes, dtype=">i2").astype("<i2").tobytes()

        logger.debug(f"Audio size: {len(audio_bytes)} bytes; Type: {mime_type}; Language: {self.language}")

        audio = speech.RecognitionAudio(content=audio_bytes)
        try:
            response = self.client.recognize(config=self.build_config(mime_type), audio=audio, timeout=self.timeout)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise TranscriptionTransportError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise TranscriptionTransportError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise TranscriptionTransportError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        if not response.results:
            logger.debug("--- NO SPEECH DETECTED ---")
            return TranscriptionResponse(transcribed_text="")

        # Each result covers a consecutive stretch of audio; join the best alternatives
        transcript = " ".join(
            result.alternatives[0].transcript.strip()
            for result in response.results
            if result.alternatives
        ).strip()
        logger.debug(f"✅ TRANSCRIPTION SUCCESS: '{transcript}' (processing_time: {processing_time:.3f}s)")
        return TranscriptionResponse(transcribed_text=transcript)
