"""Chat transcript data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Sender(Enum):
    """Who authored a message."""
    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class Attachment:
    """A file staged for the next message, already read into a data URI."""
    data_uri: str
    mime_type: str
    name: str
    size_bytes: int = 0

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass(frozen=True)
class Message:
    """A single transcript entry. Never mutated once created."""
    sender: Sender
    text: str
    file: Optional[Attachment] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_user(self) -> bool:
        return self.sender is Sender.USER
