"""Pytest configuration and fixtures for Dardasha tests."""

import pytest
import tempfile
import time
import logging
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock, patch
import numpy as np
from pubsub import pub

from dardasha.attachments.handler import FileAttachmentHandler
from dardasha.audio.capture import AudioRecorder
from dardasha.audio.encoder import AudioEncoder
from dardasha.audio.permission import MicrophonePermissionManager
from dardasha.chat.base import AbstractChatBackend
from dardasha.models.api import ChatRequest, ChatResponse, TranscriptionRequest, TranscriptionResponse
from dardasha.models.events import NOTIFICATION_TOPIC, Notification
from dardasha.models.state import MicrophonePermissionState
from dardasha.services.activity import ActivityTracker
from dardasha.services.chat_session import ChatSession
from dardasha.services.conversation import ConversationDispatcher, Transcript
from dardasha.services.notifications import Notifier
from dardasha.services.voice_input import VoiceInputPipeline
from dardasha.transcription.base import AbstractTranscriptionBackend
from dardasha.transcription.client import TranscriptionClient


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MockChatBackend(AbstractChatBackend):
    """Chat backend that answers from a script and records every request."""

    service_name = "mock"

    def __init__(self, reply: str = "Hi there!", error: Optional[Exception] = None, activity: Optional[ActivityTracker] = None):
        self.reply = reply
        self.error = error
        self.activity = activity
        self.requests: List[ChatRequest] = []
        self.states_seen = []

    async def send(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if self.activity is not None:
            self.states_seen.append(self.activity.state)
        if self.error is not None:
            raise self.error
        return ChatResponse(response=self.reply)


class MockTranscriptionBackend(AbstractTranscriptionBackend):
    """Transcription backend that returns fixed text and records every request."""

    service_name = "mock"

    def __init__(self, text: str = "hello from the microphone", error: Optional[Exception] = None):
        super().__init__()
        self.text = text
        self.error = error
        self.requests: List[TranscriptionRequest] = []

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return TranscriptionResponse(transcribed_text=self.text)

    def initialize(self) -> bool:
        return True


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio(sample_audio_chunk):
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read_chunk(num_frames, exception_on_overflow=True):
            time.sleep(0.005)  # pace the capture thread like a real device
            return sample_audio_chunk

        # Configure mock stream
        mock_stream.read.side_effect = read_chunk
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2
        mock_pyaudio_instance.get_host_api_count.return_value = 1
        mock_pyaudio_instance.get_default_input_device_info.return_value = {'name': 'Mock Microphone'}

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def notifications():
    """Collect every notification published during the test."""
    received: List[Notification] = []

    def listener(notification: Notification):
        received.append(notification)

    pub.subscribe(listener, NOTIFICATION_TOPIC)
    yield received
    pub.unsubscribe(listener, NOTIFICATION_TOPIC)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def activity():
    return ActivityTracker()


@pytest.fixture
def transcript():
    return Transcript()


@pytest.fixture
def chat_backend(activity):
    return MockChatBackend(activity=activity)


@pytest.fixture
def transcription_backend():
    return MockTranscriptionBackend()


@pytest.fixture
def dispatcher(chat_backend, transcript, activity, notifier):
    return ConversationDispatcher(
        backend=chat_backend,
        transcript=transcript,
        activity=activity,
        notifier=notifier,
    )


@pytest.fixture
def permission(notifier):
    return MicrophonePermissionManager(notifier)


@pytest.fixture
def granted_permission(permission):
    """Permission manager that already holds a grant."""
    permission.state = MicrophonePermissionState.GRANTED
    return permission


@pytest.fixture
def chat_session(transcript, activity, notifier, dispatcher, permission, transcription_backend):
    """Fully wired chat session with mock remote backends."""
    recorder = AudioRecorder(permission, format_preferences=("audio/wav",))
    voice = VoiceInputPipeline(
        recorder=recorder,
        encoder=AudioEncoder(),
        transcriber=TranscriptionClient(transcription_backend),
        dispatcher=dispatcher,
        activity=activity,
    )
    session = ChatSession(
        transcript=transcript,
        activity=activity,
        notifier=notifier,
        dispatcher=dispatcher,
        permission=permission,
        voice=voice,
        attachments=FileAttachmentHandler(),
    )
    yield session
    session.shutdown()


@pytest.fixture
def make_file(temp_data_dir):
    """Write a file of the given size into the temp directory and return its path."""
    def _make_file(name: str, size: int = 128, content: Optional[bytes] = None) -> Path:
        path = Path(temp_data_dir) / name
        path.write_bytes(content if content is not None else b"a" * size)
        return path

    return _make_file


@pytest.fixture
def config_file(temp_data_dir):
    """Write a minimal dardasha.yaml and return its path."""
    path = Path(temp_data_dir) / "dardasha.yaml"
    path.write_text(
        "chat:\n"
        "  provider: gemini\n"
        "  model: gemini-2.0-flash\n"
        "  api_key_env: DARDASHA_TEST_KEY\n"
        "transcription:\n"
        "  provider: gemini\n"
        "  api_key_env: DARDASHA_TEST_KEY\n"
        "audio:\n"
        "  sample_rate: 16000\n"
        "logging:\n"
        "  file_path: logs/dardasha.log\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def audio_test_data():
    """Generate various audio test data patterns."""
    def generate_audio(pattern="sine", duration_seconds=1.0, sample_rate=16000):
        """Generate audio data for testing.

        Args:
            pattern: Type of audio pattern ('sine', 'noise', 'silence')
            duration_seconds: Duration of audio
            sample_rate: Sample rate in Hz

        Returns:
            bytes: Audio data as bytes
        """
        samples = int(duration_seconds * sample_rate)

        if pattern == "sine":
            t = np.linspace(0, duration_seconds, samples, False)
            wave_data = np.sin(2 * np.pi * 440 * t)  # 440 Hz sine wave
        elif pattern == "noise":
            wave_data = np.random.uniform(-1, 1, samples)
        elif pattern == "silence":
            wave_data = np.zeros(samples)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")

        audio_data = (wave_data * 32767).astype(np.int16)
        return audio_data.tobytes()

    return generate_audio
