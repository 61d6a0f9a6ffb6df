"""Services layer for Dardasha application logic."""

from .notifications import Notifier
from .activity import ActivityTracker
from .conversation import ConversationDispatcher, Transcript

__all__ = [
    "Notifier",
    "ActivityTracker",
    "ConversationDispatcher",
    "Transcript",
]
