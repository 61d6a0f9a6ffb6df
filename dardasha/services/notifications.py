"""Notification publisher for transient user-visible notices."""

import logging
from pubsub import pub

from ..errors import DardashaError
from ..models.events import Notification, NOTIFICATION_TOPIC

logger = logging.getLogger(__name__)


class Notifier:
    """Publishes notifications using pubsub.pub so any screen can show them."""

    def __init__(self, topic: str = NOTIFICATION_TOPIC):
        """Initialize notifier.

        Args:
            topic: Pub/sub topic name for notifications
        """
        self.topic = topic
        logger.info(f"Notifier initialized with topic: {topic}")

    def publish(self, notification: Notification) -> None:
        pub.sendMessage(self.topic, notification=notification)
        logger.debug(f"Published notification: {notification.title} ({notification.level})")

    def info(self, title: str, description: str = "") -> None:
        self.publish(Notification(title=title, description=description, level="info"))

    def error(self, title: str, description: str = "") -> None:
        self.publish(Notification(title=title, description=description, level="error"))

    def report(self, error: DardashaError) -> None:
        """Publish the notification an error of the taxonomy carries."""
        logger.warning(f"{type(error).__name__}: {error}")
        self.error(error.title, error.description)
