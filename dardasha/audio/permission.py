"""Microphone permission manager.

The terminal equivalent of a browser permission prompt: the platform either
has no capture API at all (no PortAudio host API, no default input device),
refuses to open an input stream (OS privacy settings, device busy), or lets
us open one. Probing opens a stream and closes it straight away, so asking
for permission never leaves the microphone open.
"""

import asyncio
import logging
from typing import Optional

import pyaudio

from ..errors import CaptureUnsupportedError, PermissionDeniedError
from ..models.state import MicrophonePermissionState
from ..services.notifications import Notifier

logger = logging.getLogger(__name__)


class MicrophonePermissionManager:
    """Requests and tracks microphone permission. One request per user action."""

    def __init__(self, notifier: Notifier, sample_rate: int = 16000, channels: int = 1, chunk_size: int = 1024):
        self.notifier = notifier
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = chunk_size
        self.state = MicrophonePermissionState.IDLE
        self.request_count = 0

    @property
    def is_granted(self) -> bool:
        return self.state is MicrophonePermissionState.GRANTED

    async def request_permission(self) -> bool:
        """Ask the platform for microphone access.

        Only acts from ``idle`` or ``denied``. Returns True when access is granted.
        """
        if self.state is MicrophonePermissionState.GRANTED:
            return True
        if self.state in (MicrophonePermissionState.REQUESTING, MicrophonePermissionState.UNSUPPORTED):
            logger.debug(f"Permission request ignored in state: {self.state.value}")
            return False

        self.request_count += 1
        previous_state = self.state
        self.state = MicrophonePermissionState.REQUESTING
        logger.info("Requesting microphone access...")
        loop = asyncio.get_running_loop()
        try:
            if not await loop.run_in_executor(None, self._capture_available):
                self.state = MicrophonePermissionState.UNSUPPORTED
                self.notifier.report(CaptureUnsupportedError())
                return False
            await loop.run_in_executor(None, self._probe_input_stream)
            self.state = MicrophonePermissionState.GRANTED
        except OSError as e:
            logger.error(f"Error accessing microphone: {e}")
            self.state = MicrophonePermissionState.DENIED
            self.notifier.report(PermissionDeniedError())
            return False
        except Exception as e:
            logger.exception(f"Unexpected error probing microphone: {e}")
            self.state = MicrophonePermissionState.DENIED
            self.notifier.report(PermissionDeniedError())
            return False
        finally:
            # Cancellation must not leave the manager in REQUESTING
            if self.state is MicrophonePermissionState.REQUESTING:
                self.state = previous_state

        logger.info("Microphone access granted")
        self.notifier.info("Microphone access granted", "Press /mic again to start recording.")
        return True

    def _capture_available(self) -> bool:
        """Check that PortAudio has a host API and a default input device."""
        audio: Optional[pyaudio.PyAudio] = None
        try:
            audio = pyaudio.PyAudio()
            if audio.get_host_api_count() == 0:
                logger.warning("No audio host API available")
                return False
            info = audio.get_default_input_device_info()
            logger.debug(f"Default input device: {info.get('name')}")
            return True
        except OSError as e:
            logger.warning(f"No default input device: {e}")
            return False
        finally:
            if audio:
                audio.terminate()

    def _probe_input_stream(self) -> None:
        """Open an input stream and release it immediately."""
        audio = pyaudio.PyAudio()
        try:
            stream = audio.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
            )
            stream.stop_stream()
            stream.close()
        finally:
            audio.terminate()
