"""Gemini multimodal transcription backend."""

import time
import logging
from typing import Optional

import aiohttp

from .base import AbstractTranscriptionBackend
from ..clients.gemini_client import GeminiClient, GeminiAPIError, text_part, inline_part
from ..errors import TranscriptionTransportError
from ..models.api import TranscriptionRequest, TranscriptionResponse

logger = logging.getLogger(__name__)

TRANSCRIBE_PROMPT = (
    "Please transcribe the following audio to text. Respond with only the transcribed text. "
    "Ensure the transcription is accurate."
)


class GeminiTranscriptionBackend(AbstractTranscriptionBackend):
    """Sends the audio data URI to Gemini with a transcription prompt."""

    service_name = "Gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", language: str = "en-US", base_url: Optional[str] = None):
        super().__init__(language)
        if not api_key:
            raise ValueError("Gemini API key is required - cannot initialize without it")
        kwargs = {"base_url": base_url} if base_url else {}
        self.client = GeminiClient(api_key=api_key, model=model, **kwargs)

    def initialize(self) -> bool:
        logger.info(f"Gemini transcription backend ready (model: {self.client.model})")
        return True

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        start_time = time.time()
        parts = [text_part(TRANSCRIBE_PROMPT), inline_part(request.audio_data_uri)]
        try:
            text = await self.client.generate_content(parts, temperature=0.0)
        except (GeminiAPIError, aiohttp.ClientError) as e:
            logger.error(f"Gemini transcription call failed: {e}")
            raise TranscriptionTransportError(f"Gemini transcription failed: {e}") from e

        logger.debug(f"Gemini transcription took {time.time() - start_time:.3f}s: '{text}'")
        return TranscriptionResponse(transcribed_text=text)
