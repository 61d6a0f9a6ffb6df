"""Audio recorder: captures the microphone into an in-memory buffer."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional, List, Sequence
from datetime import datetime
import numpy as np

from ..errors import CaptureUnsupportedError, EmptyRecordingError, RecorderStateError
from ..models.audio import AudioStats, AudioBlob
from .encoder import SUPPORTED_FORMATS
from .permission import MicrophonePermissionManager
from ..encoding import base_mime_type


logger = logging.getLogger(__name__)

# Ordered preference list; the first format the encoder supports wins.
DEFAULT_FORMAT_PREFERENCES = (
    "audio/webm;codecs=opus",
    "audio/ogg;codecs=opus",
    "audio/wav",
    "audio/l16",
)


class RecordingSession:
    """One recording: owns the live capture handle and the chunks captured for it.

    Use as a context manager; leaving the block always releases the device and
    clears the buffer.
    """

    def __init__(
        self,
        mime_type: str,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        self.mime_type = mime_type
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.chunks: List[bytes] = []
        self.stop_event = Event()
        self.recording_thread: Optional[Thread] = None
        self.capture_error: Optional[Exception] = None

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0

        # PyAudio instance and live stream
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def is_open(self) -> bool:
        return self.stream is not None

    def open(self) -> None:
        """Open the input stream and start buffering in a background thread."""
        self.pyaudio_instance = pyaudio.PyAudio()
        self.stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk, {self.mime_type}")
        self.start_time = datetime.now()

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        # close() may drop self.stream while a read is still blocking
        stream = self.stream
        try:
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self._store_chunk(audio_chunk)
        except OSError as e:
            logger.error(f"Audio capture stopped on error: {e}")
            self.capture_error = e
            self.stop_event.set()

    def _store_chunk(self, audio_chunk: bytes) -> None:
        if not audio_chunk:
            return
        self.chunks.append(audio_chunk)
        self.total_chunks += 1
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if samples.size:
            level = float(np.max(np.abs(samples.astype(np.int32)))) / 32768.0
            self.peak_level = max(self.peak_level, level)

    def _join_thread(self) -> None:
        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

    def finalize(self) -> AudioBlob:
        """Stop capturing and join all buffered chunks into one blob."""
        self._join_thread()
        sample_width = self.pyaudio_instance.get_sample_size(self.format) if self.pyaudio_instance else 2
        return AudioBlob(
            data=b"".join(self.chunks),
            mime_type=self.mime_type,
            sample_rate=self.sample_rate,
            channels=self.channels,
            sample_width=sample_width,
        )

    def close(self) -> None:
        """Release the capture device and drop the buffer. Safe to call twice."""
        self._join_thread()
        try:
            if self.stream:
                self.stream.stop_stream()
                self.stream.close()
        finally:
            self.stream = None
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
            self.chunks.clear()
        logger.info(f"Recording session closed. Total chunks: {self.total_chunks}")

    def __enter__(self) -> "RecordingSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class AudioRecorder:
    """Starts and stops recording sessions; at most one is active at a time."""

    def __init__(
        self,
        permission: MicrophonePermissionManager,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format_preferences: Sequence[str] = DEFAULT_FORMAT_PREFERENCES,
        supported_formats: Sequence[str] = SUPPORTED_FORMATS,
    ):
        """Initialize audio recorder.

        Args:
            permission: Permission manager; recording needs a granted state
            sample_rate: Audio sample rate (16kHz suits speech recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format_preferences: Ordered list of MIME types to try
            supported_formats: MIME types the encoder can produce
        """
        self.permission = permission
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format_preferences = tuple(format_preferences)
        self.supported_formats = tuple(supported_formats)
        self.session: Optional[RecordingSession] = None

    @property
    def is_recording(self) -> bool:
        return self.session is not None

    def select_format(self) -> str:
        """Pick the first preferred MIME type the encoder supports."""
        for mime_type in self.format_preferences:
            if base_mime_type(mime_type) in self.supported_formats:
                return base_mime_type(mime_type)
        raise CaptureUnsupportedError(
            f"None of the preferred audio formats are supported: {', '.join(self.format_preferences)}"
        )

    def start(self) -> None:
        """Start a new recording session.

        Raises:
            RecorderStateError: If permission is not granted or a session is active.
            CaptureUnsupportedError: If no format is usable or the device cannot be opened.
        """
        if not self.permission.is_granted:
            raise RecorderStateError("Microphone permission has not been granted")
        if self.session is not None:
            raise RecorderStateError("Recording already in progress")

        mime_type = self.select_format()
        session = RecordingSession(
            mime_type=mime_type,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            channels=self.channels,
        )
        try:
            session.open()
        except OSError as e:
            session.close()
            raise CaptureUnsupportedError(f"Could not open the microphone: {e}") from e

        self.session = session
        logger.info("Starting audio recording")

    def stop(self) -> AudioBlob:
        """Stop the active session and return its audio.

        The capture device is released before this returns, whatever happens.

        Raises:
            RecorderStateError: If no session is active.
            EmptyRecordingError: If nothing was captured.
        """
        if self.session is None:
            raise RecorderStateError("No recording in progress")

        session, self.session = self.session, None
        logger.info("Stopping audio recording")
        with session:
            blob = session.finalize()

        if blob.size == 0:
            if session.capture_error:
                logger.warning(f"Recording captured nothing after error: {session.capture_error}")
            raise EmptyRecordingError()

        logger.info(f"Recorded {blob.size} bytes ({blob.duration_seconds:.1f}s) as {blob.mime_type}")
        return blob

    def abandon(self) -> None:
        """Drop the active session without producing audio."""
        if self.session is None:
            return
        session, self.session = self.session, None
        logger.info("Abandoning audio recording")
        session.close()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        session = self.session
        duration = 0.0
        if session and session.start_time:
            duration = (datetime.now() - session.start_time).total_seconds()

        return AudioStats(
            is_recording=session is not None,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=session.total_chunks if session else 0,
            peak_level=session.peak_level if session else 0.0,
        )

    def __del__(self):
        """Ensure the device is released on deletion."""
        session = getattr(self, "session", None)
        if session is not None:
            session.close()
