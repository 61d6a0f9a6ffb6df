"""Abstract base class for chat model backends."""

from abc import ABC, abstractmethod

from ..models.api import ChatRequest, ChatResponse


class AbstractChatBackend(ABC):
    """A hosted chat model: one request in, one reply out."""

    service_name = "chat"

    @abstractmethod
    async def send(self, request: ChatRequest) -> ChatResponse:
        """Send one message (and optional file) and return the model's reply.

        Raises:
            ChatTransportError: If the model cannot be reached or fails
        """
        pass
