"""OpenAI-compatible chat completions backend."""

import logging
from typing import Optional, Dict, Any, List

import aiohttp

from .base import AbstractChatBackend
from ..errors import ChatTransportError
from ..models.api import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class OpenAIChatBackend(AbstractChatBackend):
    """Simple backend for sending one message to ChatGPT and getting the response."""

    service_name = "OpenAI"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", base_url: Optional[str] = None,
                 temperature: float = 0.7, max_tokens: int = 2000):
        """Initialize OpenAI chat backend.

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            base_url: API root (any OpenAI-compatible server), without trailing slash
            temperature: Temperature for response generation (0.0 to 1.0)
            max_tokens: Maximum tokens in response
        """
        if not api_key:
            raise ValueError("OpenAI API key is required - cannot initialize without it")
        self.api_key = api_key
        self.model = model
        self.base_url = f"{(base_url or 'https://api.openai.com/v1').rstrip('/')}/chat/completions"
        self.temperature = temperature
        self.max_tokens = max_tokens

        logger.info(f"OpenAIChatBackend initialized with model: {model}")

    def build_content(self, request: ChatRequest) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        if request.message:
            content.append({"type": "text", "text": request.message})
        if request.file_data_uri:
            if (request.file_mime_type or "").startswith("image/"):
                content.append({"type": "image_url", "image_url": {"url": request.file_data_uri}})
            else:
                content.append({
                    "type": "file",
                    "file": {"filename": request.file_name or "attachment", "file_data": request.file_data_uri},
                })
        return content

    async def send(self, request: ChatRequest) -> ChatResponse:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": self.build_content(request)
                }
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.base_url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ChatTransportError(f"OpenAI API error: {response.status} - {error_text}")

                    result = await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"OpenAI chat call failed: {e}")
            raise ChatTransportError(f"OpenAI chat failed: {e}") from e

        try:
            text = result["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ChatTransportError(f"OpenAI API returned an unexpected body: {result}") from e
        return ChatResponse(response=text.strip())
