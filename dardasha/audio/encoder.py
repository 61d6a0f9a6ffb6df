"""Audio encoder: turns a finished recording into one base64 data URI."""

import asyncio
import io
import logging
import wave

import numpy as np

from ..encoding import to_data_uri, base_mime_type
from ..errors import AudioReadError
from ..models.audio import AudioBlob

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"
L16_MIME_TYPE = "audio/l16"

SUPPORTED_FORMATS = (WAV_MIME_TYPE, L16_MIME_TYPE)


class AudioEncoder:
    """Encodes recorded PCM into a transmittable data URI. Single attempt, no retry."""

    async def encode(self, blob: AudioBlob) -> str:
        """Encode a blob off the event loop.

        Raises:
            AudioReadError: If the blob cannot be read or packaged.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.encode_sync, blob)

    def encode_sync(self, blob: AudioBlob) -> str:
        mime_type = base_mime_type(blob.mime_type)
        try:
            if mime_type == WAV_MIME_TYPE:
                data_uri = to_data_uri(self._to_wav(blob), WAV_MIME_TYPE)
            elif mime_type == L16_MIME_TYPE:
                data_uri = to_data_uri(
                    self._to_l16(blob),
                    f"{L16_MIME_TYPE};rate={blob.sample_rate};channels={blob.channels}",
                )
            else:
                raise AudioReadError(f"Unsupported audio format: {blob.mime_type}")
        except (wave.Error, ValueError, TypeError) as e:
            logger.error(f"Error reading recorded audio: {e}")
            raise AudioReadError(f"Could not read recorded audio: {e}") from e

        logger.debug(f"Encoded {blob.size} bytes of audio into a {len(data_uri)} char data URI")
        return data_uri

    @staticmethod
    def _to_wav(blob: AudioBlob) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(blob.channels)
            wf.setsampwidth(blob.sample_width)
            wf.setframerate(blob.sample_rate)
            wf.writeframes(blob.data)
        return buffer.getvalue()

    @staticmethod
    def _to_l16(blob: AudioBlob) -> bytes:
        if blob.sample_width != 2:
            raise ValueError(f"audio/l16 needs 16-bit samples, got {blob.sample_width * 8}-bit")
        # audio/l16 is big-endian; PortAudio hands us native little-endian
        samples = np.frombuffer(blob.data, dtype="<i2")
        return samples.astype(">i2").tobytes()
