"""Chat session: the user-facing actions, and where every error ends up."""

import logging
from pathlib import Path
from typing import Awaitable, Optional, Union

from .activity import ActivityTracker
from .conversation import ConversationDispatcher, Transcript
from .notifications import Notifier
from .voice_input import VoiceInputPipeline
from ..attachments.handler import FileAttachmentHandler
from ..audio.permission import MicrophonePermissionManager
from ..errors import CaptureUnsupportedError, DardashaError
from ..models.chat import Attachment
from ..models.state import MicrophonePermissionState
from ..models.ui import MicButtonState

logger = logging.getLogger(__name__)


class ChatSession:
    """Composes the conversation components behind four user actions.

    Errors never escape: each one becomes a notification and the session is
    left idle and ready for the next action.
    """

    def __init__(
        self,
        transcript: Transcript,
        activity: ActivityTracker,
        notifier: Notifier,
        dispatcher: ConversationDispatcher,
        permission: MicrophonePermissionManager,
        voice: VoiceInputPipeline,
        attachments: FileAttachmentHandler,
    ):
        self.transcript = transcript
        self.activity = activity
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.permission = permission
        self.voice = voice
        self.attachments = attachments

    async def _guard(self, operation: Awaitable) -> bool:
        """Await an operation, reporting any Dardasha error. Returns True on success."""
        try:
            await operation
            return True
        except DardashaError as e:
            self.notifier.report(e)
            return False

    async def submit_text(self, text: str) -> None:
        """Send typed text together with the staged attachment, if any."""
        if not self.dispatcher.can_send(text, self.attachments.staged):
            logger.debug("Nothing to send or another operation is in progress")
            return
        await self._guard(self.dispatcher.send(text, self.attachments.take()))

    async def toggle_microphone(self) -> None:
        """The microphone button: ask for permission, start recording, or finish recording."""
        state = self.permission.state
        if state in (MicrophonePermissionState.IDLE, MicrophonePermissionState.DENIED):
            # A grant does not start recording; the user presses again.
            await self._guard(self.permission.request_permission())
            return
        if state is MicrophonePermissionState.REQUESTING:
            return
        if state is MicrophonePermissionState.UNSUPPORTED:
            self.notifier.report(CaptureUnsupportedError())
            return

        if self.voice.is_recording:
            await self._guard(self.voice.finish())
            return

        if self.activity.is_busy:
            self.notifier.info("Please wait", "Another operation is still in progress.")
            return
        if self.attachments.has_attachment:
            self.notifier.info("Attachment staged", "Send or remove the attachment before recording.")
            return
        try:
            await self.voice.start()
        except DardashaError as e:
            self.notifier.report(e)
            return
        self.notifier.info("Recording...", "Press /mic again to stop and send.")

    async def attach(self, path: Union[str, Path]) -> Optional[Attachment]:
        """Stage a file for the next message."""
        if self.activity.is_recording or self.activity.is_transcribing:
            self.notifier.info("Please wait", "Finish the voice message before attaching a file.")
            return None
        try:
            attachment = await self.attachments.select(path)
        except DardashaError as e:
            self.notifier.report(e)
            return None
        self.notifier.info("File attached", f"{attachment.name} will be sent with your next message.")
        return attachment

    def remove_attachment(self) -> None:
        removed = self.attachments.remove()
        if removed:
            self.notifier.info("Attachment removed", removed.name)

    def mic_button_state(self) -> MicButtonState:
        """Label and enabled flag for the microphone control."""
        state = self.permission.state
        busy = self.activity.is_busy
        if state is MicrophonePermissionState.REQUESTING:
            return MicButtonState("Requesting microphone access...", enabled=False, icon="⏳")
        if state is MicrophonePermissionState.UNSUPPORTED:
            return MicButtonState("Microphone not supported", enabled=False, icon="🔇")
        if state is MicrophonePermissionState.DENIED:
            return MicButtonState("Microphone access denied. Press to ask again.", enabled=not busy, icon="🔇")
        if state is MicrophonePermissionState.GRANTED:
            if self.activity.is_recording:
                return MicButtonState("Stop recording and send", enabled=True, icon="🔴")
            if self.activity.is_transcribing:
                return MicButtonState("Transcribing...", enabled=False, icon="⏳")
            return MicButtonState(
                "Start recording",
                enabled=not busy and not self.attachments.has_attachment,
            )
        return MicButtonState("Enable voice input (needs microphone permission)", enabled=not busy)

    def shutdown(self) -> None:
        """Release the microphone if a recording is still open."""
        self.voice.abandon()
