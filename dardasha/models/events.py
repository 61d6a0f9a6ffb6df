"""Event models published over pubsub."""

from dataclasses import dataclass, field
from datetime import datetime

# Pub/sub topics
TRANSCRIPT_TOPIC = "transcript.message"
NOTIFICATION_TOPIC = "ui.notification"


@dataclass(frozen=True)
class Notification:
    """A transient user-visible notice (toast)."""
    title: str
    description: str
    level: str = "info"  # "info" | "error"
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.level == "error"
