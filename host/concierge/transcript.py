# concierge/transcript.py
"""
Ordered conversation log shared by rendering and inference requests
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple

from .errors import InvariantViolation

logger = logging.getLogger(__name__)


class Speaker(Enum):
    """Who authored a turn"""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One conversation entry"""
    speaker: Speaker
    text: str
    pending: bool = False

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(Speaker.USER, text)

    @classmethod
    def assistant(cls, text: str, pending: bool = False) -> "Turn":
        return cls(Speaker.ASSISTANT, text, pending)


class Transcript:
    """Append-only turn log.

    The only mutation besides ``append`` is ``replace_pending``, which
    finalizes the trailing pending assistant turn. Turns are never reordered
    or removed.
    """

    def __init__(self, greeting: str):
        self._turns: List[Turn] = [Turn.assistant(greeting)]

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def has_pending(self) -> bool:
        return bool(self._turns) and self._turns[-1].pending

    def append(self, turn: Turn):
        """Add a turn at the end of the log"""
        if self.has_pending:
            raise InvariantViolation("Cannot append while an assistant turn is pending")
        if turn.pending and turn.speaker is not Speaker.ASSISTANT:
            raise InvariantViolation("Only assistant turns may be pending")
        self._turns.append(turn)
        logger.debug(f"Transcript append ({turn.speaker.value}, pending={turn.pending}): {turn.text[:60]}")

    def replace_pending(self, text: str) -> Turn:
        """Finalize the trailing pending turn with ``text``"""
        if not self.has_pending:
            raise InvariantViolation("No pending assistant turn to replace")
        finalized = replace(self._turns[-1], text=text, pending=False)
        self._turns[-1] = finalized
        return finalized

    def snapshot(self) -> Tuple[Turn, ...]:
        """Immutable copy of the full ordered log"""
        return tuple(self._turns)
