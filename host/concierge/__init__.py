# concierge/__init__.py
"""
Voice Concierge Package
"""

from .config import Config, setup_logging
from .errors import (
    ConciergeError,
    MissingCredential,
    UpstreamError,
    CaptureUnavailable,
    CaptureStartFailed,
    PlaybackFailed,
    InvariantViolation,
)
from .transcript import Speaker, Turn, Transcript
from .state import OrchestratorState, StatusView
from .capture import CaptureAdapter, CaptureErrorKind, CaptureOutcome
from .inference import InferenceClient
from .playback import PlaybackAdapter
from .orchestrator import TurnOrchestrator

__version__ = "1.0.0"
