"""Voice input pipeline: record, encode, transcribe, then send as a message."""

import asyncio
import logging

from .activity import ActivityTracker
from .conversation import ConversationDispatcher
from ..audio.capture import AudioRecorder
from ..audio.encoder import AudioEncoder
from ..errors import EmptyRecordingError
from ..models.state import ActivityState
from ..transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)


class VoiceInputPipeline:
    """Drives one recording session from the mic press to the dispatched message.

    Each finished recording ends in exactly one of: a sent message, a
    no-speech error or another error. Errors propagate to the caller with the
    activity back at idle and the microphone released.
    """

    def __init__(
        self,
        recorder: AudioRecorder,
        encoder: AudioEncoder,
        transcriber: TranscriptionClient,
        dispatcher: ConversationDispatcher,
        activity: ActivityTracker,
    ):
        self.recorder = recorder
        self.encoder = encoder
        self.transcriber = transcriber
        self.dispatcher = dispatcher
        self.activity = activity

    @property
    def is_recording(self) -> bool:
        return self.activity.is_recording

    async def start(self) -> None:
        """Begin recording. The activity stays idle if the recorder cannot start."""
        self.activity.transition(ActivityState.RECORDING)
        loop = asyncio.get_running_loop()
        try:
            # Opening the device blocks
            await loop.run_in_executor(None, self.recorder.start)
        except Exception:
            self.activity.reset()
            raise

    def abandon(self) -> None:
        """Release the microphone and forget the recording, if one is running."""
        if self.activity.is_recording:
            self.recorder.abandon()
            self.activity.transition(ActivityState.IDLE)

    async def finish(self) -> str:
        """Stop recording and run the audio through to a sent message.

        Returns:
            The transcribed text that was sent.
        """
        loop = asyncio.get_running_loop()
        try:
            blob = await loop.run_in_executor(None, self.recorder.stop)
        except EmptyRecordingError:
            self.activity.transition(ActivityState.IDLE)
            raise
        except Exception:
            self.activity.reset()
            raise

        with self.activity.busy(ActivityState.TRANSCRIBING):
            data_uri = await self.encoder.encode(blob)
            text = await self.transcriber.transcribe(data_uri)

        await self.dispatcher.send(text)
        return text
