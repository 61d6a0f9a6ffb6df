"""Activity tracker: the single busy state of a conversation."""

import logging
from contextlib import contextmanager
from typing import Iterator

from ..errors import InvalidStateTransitionError
from ..models.state import ActivityState, ACTIVITY_TRANSITIONS

logger = logging.getLogger(__name__)


class ActivityTracker:
    """Validated state machine over recording, transcribing and sending.

    Only one activity can be current, so at most one of the derived flags is
    ever true.
    """

    def __init__(self):
        self._state = ActivityState.IDLE

    @property
    def state(self) -> ActivityState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is ActivityState.IDLE

    @property
    def is_busy(self) -> bool:
        return not self.is_idle

    @property
    def is_recording(self) -> bool:
        return self._state is ActivityState.RECORDING

    @property
    def is_transcribing(self) -> bool:
        return self._state is ActivityState.TRANSCRIBING

    @property
    def is_sending(self) -> bool:
        return self._state is ActivityState.SENDING

    def can_transition(self, new_state: ActivityState) -> bool:
        return new_state in ACTIVITY_TRANSITIONS[self._state]

    def transition(self, new_state: ActivityState) -> None:
        """Move to a new state.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed.
        """
        if not self.can_transition(new_state):
            raise InvalidStateTransitionError(
                f"Cannot go from {self._state.value} to {new_state.value}"
            )
        logger.debug(f"Activity: {self._state.value} -> {new_state.value}")
        self._state = new_state

    def reset(self) -> None:
        """Force the tracker back to idle after an aborted operation."""
        if not self.is_idle:
            logger.debug(f"Activity: {self._state.value} -> idle (reset)")
        self._state = ActivityState.IDLE

    @contextmanager
    def busy(self, state: ActivityState) -> Iterator[None]:
        """Hold ``state`` for the duration of the block; idle again on every exit path."""
        self.transition(state)
        try:
            yield
        finally:
            self.reset()
