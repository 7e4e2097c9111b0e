import logging
import time
from enum import Enum
from typing import Callable, Dict, Iterable, Optional


class InvalidTransitionError(RuntimeError):
    """Raised when a transition is not allowed from the current state"""

    def __init__(self, name: str, current: Enum, requested: Enum):
        super().__init__(
            f"{name}: cannot transition {current.value} -> {requested.value}",
        )
        self.current = current
        self.requested = requested


class StateMachine:
    """
    Table-driven state machine shared by the recording session and the
    pipeline orchestrator.

    Each owner declares its allowed transitions up front; every transition
    is logged and validated, so guards like "only one stop may be in
    progress" live in the table instead of ad hoc boolean flags.

    Usage:
        machine = StateMachine(
            RecordingState.IDLE,
            {RecordingState.IDLE: {RecordingState.REQUESTING_DEVICE}},
            name="RecordingSession",
        )
        machine.transition_to(RecordingState.REQUESTING_DEVICE, "start")
    """

    def __init__(
        self,
        initial_state: Enum,
        transitions: Dict[Enum, Iterable[Enum]],
        name: str = "StateMachine",
    ):
        self.name = name
        self.current_state = initial_state
        self.previous_state: Optional[Enum] = None
        self.state_start_time = time.monotonic()
        self.logger = logging.getLogger(__name__)

        self._transitions = {
            state: frozenset(targets) for state, targets in transitions.items()
        }

        # Called as on_state_change(old_state, new_state, reason)
        self.on_state_change: Optional[Callable[[Enum, Enum, str], None]] = None

        self.logger.debug(f"{name} initialized in {initial_state.value} state")

    def get_current_state(self) -> Enum:
        """Get the current state"""
        return self.current_state

    def get_state_duration(self) -> float:
        """Get how long we've been in the current state (seconds)"""
        return time.monotonic() - self.state_start_time

    def is_in(self, *states: Enum) -> bool:
        return self.current_state in states

    def can_transition(self, new_state: Enum) -> bool:
        return new_state in self._transitions.get(self.current_state, frozenset())

    def transition_to(self, new_state: Enum, reason: str = "") -> None:
        """
        Transition to a new state with logging and callback notification.

        Raises:
            InvalidTransitionError: If the table does not allow the move
        """
        if not self.can_transition(new_state):
            raise InvalidTransitionError(self.name, self.current_state, new_state)

        old_state = self.current_state
        self.previous_state = old_state
        self.current_state = new_state
        self.state_start_time = time.monotonic()

        log_msg = f"{self.name}: {old_state.value} -> {new_state.value}"
        if reason:
            log_msg += f" ({reason})"
        self.logger.info(log_msg)

        # Notify observers of state change
        if self.on_state_change:
            try:
                self.on_state_change(old_state, new_state, reason)
            except Exception as e:
                self.logger.error(f"Error in state change callback: {e}")

    def get_status_info(self) -> Dict:
        """Get detailed status information for debugging/monitoring"""
        return {
            "name": self.name,
            "current_state": self.current_state.value,
            "previous_state": (
                self.previous_state.value if self.previous_state else None
            ),
            "state_duration": self.get_state_duration(),
        }
