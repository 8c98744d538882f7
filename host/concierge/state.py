# concierge/state.py
"""
Orchestrator state enum, legal transitions and the UI status projection
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from .errors import InvariantViolation
from .transcript import Turn

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    """Turn-taking states"""
    IDLE = "idle"                # Ready for a new turn
    LISTENING = "listening"      # Capture attempt in flight
    THINKING = "thinking"        # Inference call in flight
    SPEAKING = "speaking"        # Reply or apology being spoken
    ERRORED = "errored"          # Error surfaced, resolves to idle


LEGAL_TRANSITIONS: Dict[OrchestratorState, FrozenSet[OrchestratorState]] = {
    OrchestratorState.IDLE: frozenset({OrchestratorState.LISTENING, OrchestratorState.THINKING}),
    OrchestratorState.LISTENING: frozenset({
        OrchestratorState.IDLE, OrchestratorState.THINKING, OrchestratorState.ERRORED,
    }),
    OrchestratorState.THINKING: frozenset({OrchestratorState.SPEAKING, OrchestratorState.ERRORED}),
    OrchestratorState.SPEAKING: frozenset({OrchestratorState.IDLE, OrchestratorState.ERRORED}),
    OrchestratorState.ERRORED: frozenset({OrchestratorState.IDLE}),
}

STATUS_LABELS = {
    OrchestratorState.IDLE: "Ready",
    OrchestratorState.LISTENING: "Listening...",
    OrchestratorState.THINKING: "Thinking...",
    OrchestratorState.SPEAKING: "Speaking...",
    OrchestratorState.ERRORED: "Error",
}


class StateHolder:
    """Single authoritative state value with a validating setter"""

    def __init__(self, on_change: Optional[Callable[[OrchestratorState, OrchestratorState], None]] = None):
        self._state = OrchestratorState.IDLE
        self._on_change = on_change

    @property
    def state(self) -> OrchestratorState:
        return self._state

    def transition(self, new_state: OrchestratorState):
        """Move to ``new_state``; raises InvariantViolation on an illegal edge"""
        old_state = self._state
        if new_state not in LEGAL_TRANSITIONS[old_state]:
            raise InvariantViolation(f"Illegal transition: {old_state.value} -> {new_state.value}")

        self._state = new_state
        logger.info(f"State transition: {old_state.value} -> {new_state.value}")

        if self._on_change:
            try:
                self._on_change(old_state, new_state)
            except Exception as e:
                logger.warning(f"State listener failed: {e}")


@dataclass(frozen=True)
class StatusView:
    """Read-only projection consumed by presentation code"""
    state: OrchestratorState
    label: str
    transcript: Tuple[Turn, ...]
    error_message: Optional[str]
    input_locked: bool


def project(state: OrchestratorState, transcript: Tuple[Turn, ...], error_message: Optional[str]) -> StatusView:
    """Pure projection of orchestrator state into UI status"""
    return StatusView(
        state=state,
        label=STATUS_LABELS[state],
        transcript=transcript,
        error_message=error_message or None,
        input_locked=state is OrchestratorState.THINKING,
    )
