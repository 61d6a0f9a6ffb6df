"""Conversation dispatcher and the append-only transcript."""

import logging
from typing import Iterator, List, Optional, Tuple

from pubsub import pub

from .activity import ActivityTracker
from .notifications import Notifier
from ..chat.base import AbstractChatBackend
from ..errors import ChatTransportError
from ..models.api import ChatRequest
from ..models.chat import Attachment, Message, Sender
from ..models.events import TRANSCRIPT_TOPIC
from ..models.state import ActivityState

logger = logging.getLogger(__name__)

DEFAULT_GREETING = "Hello! I'm Dardasha AI. How can I help you today?"
DEFAULT_FALLBACK_MESSAGE = "Sorry, I encountered an error. Please try again."


class Transcript:
    """Append-only, ordered list of messages. Insertion order is display order."""

    def __init__(self, topic: str = TRANSCRIPT_TOPIC):
        self.topic = topic
        self._messages: List[Message] = []

    def append(self, message: Message) -> Message:
        self._messages.append(message)
        pub.sendMessage(self.topic, message=message)
        return message

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self._messages)


class ConversationDispatcher:
    """Sends user messages to the chat model and records both sides.

    The user's message is appended before the model is called; a failed call
    appends a fallback reply instead of touching the user's entry.
    """

    def __init__(
        self,
        backend: AbstractChatBackend,
        transcript: Transcript,
        activity: ActivityTracker,
        notifier: Notifier,
        fallback_message: str = DEFAULT_FALLBACK_MESSAGE,
    ):
        self.backend = backend
        self.transcript = transcript
        self.activity = activity
        self.notifier = notifier
        self.fallback_message = fallback_message

    def can_send(self, text: str, attachment: Optional[Attachment] = None) -> bool:
        if not (text or "").strip() and attachment is None:
            return False
        return self.activity.is_idle

    async def send(self, text: str, attachment: Optional[Attachment] = None) -> None:
        """Send a message. A no-op when there is nothing to send or another operation is running."""
        if not self.can_send(text, attachment):
            logger.debug(f"Send ignored (activity: {self.activity.state.value})")
            return

        text = (text or "").strip()
        self.transcript.append(Message(sender=Sender.USER, text=text, file=attachment))

        with self.activity.busy(ActivityState.SENDING):
            request = ChatRequest(
                message=text,
                file_data_uri=attachment.data_uri if attachment else None,
                file_mime_type=attachment.mime_type if attachment else None,
                file_name=attachment.name if attachment else None,
            )
            try:
                response = await self.backend.send(request)
            except ChatTransportError as e:
                logger.error(f"Error calling {self.backend.service_name}: {e}")
                self._append_fallback(e)
            except Exception as e:
                logger.exception(f"Unexpected error calling {self.backend.service_name}")
                self._append_fallback(ChatTransportError(str(e)))
            else:
                self.transcript.append(Message(sender=Sender.AI, text=response.response))

    def _append_fallback(self, error: ChatTransportError) -> None:
        self.notifier.report(error)
        self.transcript.append(Message(sender=Sender.AI, text=self.fallback_message))
