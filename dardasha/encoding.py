"""Base64 data URI helpers shared by audio and file attachments."""

import base64
import binascii
from typing import Tuple


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode bytes as a ``data:<mime>;base64,<payload>`` URI."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def split_data_uri(data_uri: str) -> Tuple[str, str]:
    """Split a base64 data URI into its MIME type and the still-encoded payload.

    Raises:
        ValueError: If the URI is not a base64 data URI.
    """
    if not data_uri.startswith("data:"):
        raise ValueError("not a data URI")
    header, sep, payload = data_uri[len("data:"):].partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("data URI is not base64 encoded")
    return header[: -len(";base64")], payload


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into its MIME type (with parameters) and raw bytes."""
    mime_type, payload = split_data_uri(data_uri)
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    return mime_type, data


def base_mime_type(mime_type: str) -> str:
    """Strip parameters: ``audio/l16;rate=16000`` -> ``audio/l16``."""
    return mime_type.split(";", 1)[0].strip().lower()
