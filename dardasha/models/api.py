"""Request/response schemas for the remote chat and transcription calls."""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

AUDIO_DATA_URI_PATTERN = re.compile(r"^data:audio/[\w.+-]+(;[\w.+-]+=[\w.+-]+)*;base64,[A-Za-z0-9+/=]*$")


class ChatRequest(BaseModel):
    """Input of the remote chat call."""
    message: str = ""
    file_data_uri: Optional[str] = None
    file_mime_type: Optional[str] = None
    file_name: Optional[str] = None


class ChatResponse(BaseModel):
    """Output of the remote chat call."""
    response: str


class TranscriptionRequest(BaseModel):
    """Input of the remote transcription call."""
    audio_data_uri: str = Field(
        description="Audio data as a data URI: 'data:audio/<subtype>;base64,<encoded_data>'."
    )

    @field_validator("audio_data_uri")
    @classmethod
    def _check_audio_data_uri(cls, value: str) -> str:
        if not AUDIO_DATA_URI_PATTERN.match(value):
            raise ValueError("expected 'data:audio/<subtype>;base64,<payload>'")
        return value


class TranscriptionResponse(BaseModel):
    """Output of the remote transcription call. The text may be empty."""
    transcribed_text: str = ""
