"""Unit tests for the remote chat and transcription backends."""

import asyncio
import pytest
import numpy as np
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
from google.api_core import exceptions as gax_exceptions
from google.cloud import speech

from dardasha.chat.gemini_backend import GeminiChatBackend
from dardasha.chat.openai_backend import OpenAIChatBackend
from dardasha.clients.gemini_client import GeminiAPIError, GeminiClient, extract_text, inline_part
from dardasha.encoding import to_data_uri
from dardasha.errors import ChatTransportError, TranscriptionTransportError
from dardasha.models.api import ChatRequest, TranscriptionRequest
from dardasha.transcription.gemini_backend import GeminiTranscriptionBackend, TRANSCRIBE_PROMPT
from dardasha.transcription.google_backend import GoogleSpeechBackend, _mime_parameters

PDF_URI = "data:application/pdf;base64,JVBERi0="
PNG_URI = "data:image/png;base64,iVBORw=="


def _mock_http(status=200, body=None, text=""):
    """Patch aiohttp.ClientSession so post() answers with the given response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)

    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response

    patcher = patch('aiohttp.ClientSession')
    session_class = patcher.start()
    session_class.return_value.__aenter__.return_value = session
    return patcher, session


@pytest.mark.unit
class TestGeminiClient:
    """Test cases for the Gemini REST helpers."""

    def test_inline_part(self):
        assert inline_part("data:audio/wav;base64,UklGRg==") == {
            "inline_data": {"mime_type": "audio/wav", "data": "UklGRg=="}
        }

    def test_extract_text(self):
        result = {"candidates": [{"content": {"parts": [{"text": "Hi "}, {"text": "there!"}]}}]}

        assert extract_text(result) == "Hi there!"

    def test_extract_text_without_candidates(self):
        assert extract_text({"promptFeedback": {"blockReason": "SAFETY"}}) == ""

    def test_url_and_payload(self):
        client = GeminiClient("key", model="gemini-2.0-flash", base_url="http://localhost:8080/v1beta/")

        assert client.url == "http://localhost:8080/v1beta/models/gemini-2.0-flash:generateContent"
        assert client.build_payload([{"text": "hi"}]) == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}
        assert client.build_payload([], temperature=0.0)["generationConfig"] == {"temperature": 0.0}

    def test_generate_content(self):
        patcher, session = _mock_http(body={"candidates": [{"content": {"parts": [{"text": "Hi there!"}]}}]})
        try:
            text = asyncio.run(GeminiClient("secret").generate_content([{"text": "Hello"}]))
        finally:
            patcher.stop()

        assert text == "Hi there!"
        _, kwargs = session.post.call_args
        assert kwargs["headers"]["x-goog-api-key"] == "secret"

    def test_generate_content_error_status(self):
        patcher, _ = _mock_http(status=429, text="quota exceeded")
        try:
            with pytest.raises(GeminiAPIError, match="429"):
                asyncio.run(GeminiClient("secret").generate_content([{"text": "Hello"}]))
        finally:
            patcher.stop()


@pytest.mark.unit
class TestGeminiChatBackend:
    """Test cases for the Gemini chat backend."""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            GeminiChatBackend(api_key="")

    def test_build_parts_text_only(self):
        backend = GeminiChatBackend(api_key="key")

        assert backend.build_parts(ChatRequest(message="Hello")) == [{"text": "Hello"}]

    def test_build_parts_file_first(self):
        backend = GeminiChatBackend(api_key="key")
        request = ChatRequest(message="Summarize", file_data_uri=PDF_URI, file_mime_type="application/pdf")

        parts = backend.build_parts(request)

        assert parts[0] == {"inline_data": {"mime_type": "application/pdf", "data": "JVBERi0="}}
        assert parts[1] == {"text": "Summarize"}

    def test_build_parts_file_only(self):
        backend = GeminiChatBackend(api_key="key")

        parts = backend.build_parts(ChatRequest(file_data_uri=PDF_URI))

        assert len(parts) == 1

    def test_send(self):
        backend = GeminiChatBackend(api_key="key", temperature=0.5)
        with patch.object(backend.client, 'generate_content', new=AsyncMock(return_value="Hi there!")) as mock_generate:
            response = asyncio.run(backend.send(ChatRequest(message="Hello")))

        assert response.response == "Hi there!"
        assert mock_generate.call_args.kwargs["temperature"] == 0.5

    @pytest.mark.parametrize("error", [
        GeminiAPIError("500"),
        aiohttp.ClientConnectionError("refused"),
    ])
    def test_send_failure(self, error):
        backend = GeminiChatBackend(api_key="key")
        with patch.object(backend.client, 'generate_content', new=AsyncMock(side_effect=error)):
            with pytest.raises(ChatTransportError):
                asyncio.run(backend.send(ChatRequest(message="Hello")))


@pytest.mark.unit
class TestOpenAIChatBackend:
    """Test cases for the OpenAI-compatible chat backend."""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            OpenAIChatBackend(api_key="")

    def test_base_url(self):
        backend = OpenAIChatBackend(api_key="key", base_url="http://localhost:11434/v1/")

        assert backend.base_url == "http://localhost:11434/v1/chat/completions"

    def test_build_content_image(self):
        backend = OpenAIChatBackend(api_key="key")
        request = ChatRequest(message="What is this?", file_data_uri=PNG_URI, file_mime_type="image/png")

        content = backend.build_content(request)

        assert content == [
            {"type": "text", "text": "What is this?"},
            {"type": "image_url", "image_url": {"url": PNG_URI}},
        ]

    def test_build_content_document(self):
        backend = OpenAIChatBackend(api_key="key")
        request = ChatRequest(file_data_uri=PDF_URI, file_mime_type="application/pdf", file_name="report.pdf")

        content = backend.build_content(request)

        assert content == [{"type": "file", "file": {"filename": "report.pdf", "file_data": PDF_URI}}]

    def test_send(self):
        patcher, session = _mock_http(body={"choices": [{"message": {"content": " Hi there! "}}]})
        try:
            response = asyncio.run(OpenAIChatBackend(api_key="secret").send(ChatRequest(message="Hello")))
        finally:
            patcher.stop()

        assert response.response == "Hi there!"
        _, kwargs = session.post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["json"]["messages"][0]["content"] == [{"type": "text", "text": "Hello"}]

    def test_send_error_status(self):
        patcher, _ = _mock_http(status=500, text="internal error")
        try:
            with pytest.raises(ChatTransportError, match="500"):
                asyncio.run(OpenAIChatBackend(api_key="secret").send(ChatRequest(message="Hello")))
        finally:
            patcher.stop()

    def test_send_unexpected_body(self):
        patcher, _ = _mock_http(body={"error": "nope"})
        try:
            with pytest.raises(ChatTransportError):
                asyncio.run(OpenAIChatBackend(api_key="secret").send(ChatRequest(message="Hello")))
        finally:
            patcher.stop()


@pytest.mark.unit
class TestGeminiTranscriptionBackend:
    """Test cases for Gemini transcription."""

    def test_sends_prompt_and_audio(self):
        backend = GeminiTranscriptionBackend(api_key="key")
        uri = to_data_uri(b"RIFF", "audio/wav")
        with patch.object(backend.client, 'generate_content', new=AsyncMock(return_value="hello")) as mock_generate:
            response = asyncio.run(backend.transcribe(TranscriptionRequest(audio_data_uri=uri)))

        parts = mock_generate.call_args.args[0]
        assert parts[0] == {"text": TRANSCRIBE_PROMPT}
        assert parts[1]["inline_data"]["mime_type"] == "audio/wav"
        assert response.transcribed_text == "hello"

    def test_failure_is_transport_error(self):
        backend = GeminiTranscriptionBackend(api_key="key")
        uri = to_data_uri(b"RIFF", "audio/wav")
        with patch.object(backend.client, 'generate_content', new=AsyncMock(side_effect=GeminiAPIError("503"))):
            with pytest.raises(TranscriptionTransportError):
                asyncio.run(backend.transcribe(TranscriptionRequest(audio_data_uri=uri)))


@pytest.mark.unit
class TestGoogleSpeechBackend:
    """Test cases for GoogleSpeechBackend with a mocked SpeechClient."""

    @pytest.fixture
    def backend(self):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        backend.client = Mock()
        return backend

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            GoogleSpeechBackend(credentials_path=None)

    def test_mime_parameters(self):
        assert _mime_parameters("audio/l16;rate=8000;channels=2") == {"rate": "8000", "channels": "2"}
        assert _mime_parameters("audio/wav") == {}

    def test_build_config_l16(self, backend):
        config = backend.build_config("audio/l16;rate=8000;channels=1")

        assert config.encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16
        assert config.sample_rate_hertz == 8000
        assert config.audio_channel_count == 1
        assert config.language_code == "en-US"

    def test_build_config_wav_reads_header(self, backend):
        config = backend.build_config("audio/wav")

        assert config.encoding == speech.RecognitionConfig.AudioEncoding.ENCODING_UNSPECIFIED
        assert config.sample_rate_hertz == 0

    def test_transcribe_joins_results(self, backend):
        backend.client.recognize.return_value = Mock(results=[
            Mock(alternatives=[Mock(transcript="Hello ")]),
            Mock(alternatives=[Mock(transcript=" world")]),
        ])
        request = TranscriptionRequest(audio_data_uri=to_data_uri(b"RIFF", "audio/wav"))

        response = asyncio.run(backend.transcribe(request))

        assert response.transcribed_text == "Hello world"

    def test_no_results_is_empty_text(self, backend):
        backend.client.recognize.return_value = Mock(results=[])
        request = TranscriptionRequest(audio_data_uri=to_data_uri(b"RIFF", "audio/wav"))

        assert backend.transcribe_sync(request).transcribed_text == ""

    def test_l16_converted_to_little_endian(self, backend):
        backend.client.recognize.return_value = Mock(results=[])
        big_endian = np.array([1, 256], dtype=">i2").tobytes()
        request = TranscriptionRequest(audio_data_uri=to_data_uri(big_endian, "audio/l16;rate=16000;channels=1"))

        backend.transcribe_sync(request)

        audio = backend.client.recognize.call_args.kwargs["audio"]
        assert audio.content == np.array([1, 256], dtype="<i2").tobytes()

    @pytest.mark.parametrize("error", [
        gax_exceptions.DeadlineExceeded("timeout"),
        gax_exceptions.ServiceUnavailable("unavailable"),
        gax_exceptions.PermissionDenied("forbidden"),
    ])
    def test_api_errors_are_transport_errors(self, backend, error):
        backend.client.recognize.side_effect = error
        request = TranscriptionRequest(audio_data_uri=to_data_uri(b"RIFF", "audio/wav"))

        with pytest.raises(TranscriptionTransportError):
            backend.transcribe_sync(request)

    def test_not_initialized(self):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        request = TranscriptionRequest(audio_data_uri=to_data_uri(b"RIFF", "audio/wav"))

        with pytest.raises(TranscriptionTransportError):
            backend.transcribe_sync(request)
