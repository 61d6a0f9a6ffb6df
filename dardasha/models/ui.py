"""UI-related data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MicButtonState:
    """How the microphone control should look right now."""
    label: str
    enabled: bool
    icon: str = "🎤"
