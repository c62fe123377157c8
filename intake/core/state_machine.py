"""Generic state machine for record status transitions.

Example:
    sm = create_queue_state_machine(QueueStatus.PENDING_REVIEW)

    if sm.can_transition(QueueStatus.APPROVED):
        sm.transition(QueueStatus.APPROVED)

    sm.transition_to(QueueStatus.REJECTED)  # Raises InvalidTransitionError
"""

from enum import Enum
from typing import Generic, TypeVar

from intake.core.exceptions import IntakeError

T = TypeVar("T", bound=str | Enum)

TransitionMap = dict[T, list[T]]


def _label(state: object) -> str:
    return state.value if isinstance(state, Enum) else str(state)


class InvalidTransitionError(IntakeError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current: T, target: T, allowed: list[T] | None = None):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        self.error_code = "INVALID_TRANSITION"
        allowed_str = ", ".join(_label(s) for s in self.allowed) if self.allowed else "none"
        super().__init__(
            message=f"Invalid transition from '{_label(current)}' to '{_label(target)}'. "
            f"Allowed transitions: {allowed_str}",
            context={
                "current": _label(current),
                "target": _label(target),
                "allowed": [_label(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Generic state machine for status transitions.

    Attributes:
        current: Current state
        transitions: Map of allowed transitions from each state
    """

    def __init__(self, initial: T, transitions: TransitionMap[T]):
        """Initialize state machine.

        Args:
            initial: Initial state
            transitions: Map of state -> list of allowed target states
        """
        self._current = initial
        self._transitions = transitions

    @property
    def current(self) -> T:
        """Get current state."""
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """Get list of states we can transition to from current state."""
        return self._transitions.get(self._current, [])

    @property
    def is_terminal(self) -> bool:
        """Whether no transition leaves the current state."""
        return not self.allowed_transitions

    def can_transition(self, target: T) -> bool:
        """Check if transition to target state is allowed.

        Args:
            target: Target state to check

        Returns:
            True if transition is allowed, False otherwise
        """
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Perform transition to target state.

        Args:
            target: Target state

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
            )
        self._current = target

    def transition_to(self, target: T) -> T:
        """Perform transition and return new state.

        Args:
            target: Target state

        Returns:
            The new current state (same as target)

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        self.transition(target)
        return self._current

    def __str__(self) -> str:
        return f"StateMachine(current={self._current})"

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


# ============================================
# Queue record transitions
# ============================================


def get_queue_transitions() -> TransitionMap:
    """Get transition map for QueueStatus."""
    from intake.models.queue import QueueStatus

    return {
        QueueStatus.PENDING_REVIEW: [QueueStatus.APPROVED, QueueStatus.REJECTED],
        QueueStatus.APPROVED: [],  # Terminal state
        QueueStatus.REJECTED: [],  # Terminal state
    }


def create_queue_state_machine(initial_status: str | None = None) -> StateMachine:
    """Create a state machine for queue record status.

    Args:
        initial_status: Initial status (default: PENDING_REVIEW)

    Returns:
        Configured StateMachine for queue records
    """
    from intake.models.queue import QueueStatus

    initial = QueueStatus(initial_status) if initial_status else QueueStatus.PENDING_REVIEW
    return StateMachine(initial, get_queue_transitions())
