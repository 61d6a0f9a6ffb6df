"""Gemini chat backend."""

import logging
from typing import Optional

import aiohttp

from .base import AbstractChatBackend
from ..clients.gemini_client import GeminiClient, GeminiAPIError, text_part, inline_part
from ..errors import ChatTransportError
from ..models.api import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class GeminiChatBackend(AbstractChatBackend):
    """Sends the user's text, plus any attached file as inline data, to Gemini."""

    service_name = "Gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", base_url: Optional[str] = None,
                 temperature: Optional[float] = None):
        if not api_key:
            raise ValueError("Gemini API key is required - cannot initialize without it")
        kwargs = {"base_url": base_url} if base_url else {}
        self.client = GeminiClient(api_key=api_key, model=model, **kwargs)
        self.temperature = temperature

    def build_parts(self, request: ChatRequest) -> list:
        parts = []
        if request.file_data_uri:
            parts.append(inline_part(request.file_data_uri))
        if request.message or not parts:
            parts.append(text_part(request.message))
        return parts

    async def send(self, request: ChatRequest) -> ChatResponse:
        try:
            text = await self.client.generate_content(self.build_parts(request), temperature=self.temperature)
        except (GeminiAPIError, aiohttp.ClientError, ValueError) as e:
            logger.error(f"Gemini chat call failed: {e}")
            raise ChatTransportError(f"Gemini chat failed: {e}") from e
        return ChatResponse(response=text)
