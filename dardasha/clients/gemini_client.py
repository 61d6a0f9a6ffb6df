"""Minimal async client for the Gemini generateContent REST endpoint."""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..encoding import split_data_uri

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAPIError(Exception):
    """Raised when the Gemini API answers with a non-200 status or a malformed body."""


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def inline_part(data_uri: str) -> Dict[str, Any]:
    """Build an inline_data part from a base64 data URI."""
    mime_type, payload = split_data_uri(data_uri)
    return {"inline_data": {"mime_type": mime_type, "data": payload}}


def extract_text(result: Dict[str, Any]) -> str:
    """Join the text parts of the first candidate. No candidates means no text."""
    candidates = result.get("candidates") or []
    if not candidates:
        logger.debug(f"Gemini returned no candidates: {result.get('promptFeedback')}")
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()


class GeminiClient:
    """Sends a single generateContent request and returns the reply text."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", base_url: str = GEMINI_BASE_URL):
        """Initialize Gemini client.

        Args:
            api_key: Google AI Studio API key
            model: Gemini model name
            base_url: API root, without trailing slash
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

        logger.info(f"GeminiClient initialized with model: {model}")

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, parts: List[Dict[str, Any]], temperature: Optional[float] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}
        return payload

    async def generate_content(self, parts: List[Dict[str, Any]], temperature: Optional[float] = None) -> str:
        """Send the parts and return the reply text.

        Raises:
            GeminiAPIError: If the API call fails
            aiohttp.ClientError: On connection problems
        """
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(self.url, headers=headers, json=self.build_payload(parts, temperature)) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise GeminiAPIError(f"Gemini API error: {response.status} - {error_text}")

                try:
                    result = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise GeminiAPIError(f"Gemini API returned an invalid body: {e}") from e

        return extract_text(result)
