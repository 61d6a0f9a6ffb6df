"""State enumerations for the microphone and the conversation."""

from enum import Enum


class MicrophonePermissionState(Enum):
    """Microphone permission lifecycle."""
    IDLE = "idle"
    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class ActivityState(Enum):
    """What the conversation is doing. Only one at a time."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    SENDING = "sending"


# Allowed activity transitions; anything else is rejected.
ACTIVITY_TRANSITIONS = {
    ActivityState.IDLE: {ActivityState.RECORDING, ActivityState.SENDING},
    ActivityState.RECORDING: {ActivityState.TRANSCRIBING, ActivityState.IDLE},
    ActivityState.TRANSCRIBING: {ActivityState.IDLE},
    ActivityState.SENDING: {ActivityState.IDLE},
}
