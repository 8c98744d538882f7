# concierge/errors.py
"""
Exception types raised by the concierge components
"""


class ConciergeError(Exception):
    """Base class for all concierge errors"""


class MissingCredential(ConciergeError):
    """No API key was configured for the inference provider"""


class UpstreamError(ConciergeError):
    """The inference call failed, timed out or returned an unusable body"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class CaptureUnavailable(ConciergeError):
    """No speech recognition capability is available"""


class CaptureStartFailed(ConciergeError):
    """The speech recognition capability refused to start"""


class PlaybackFailed(ConciergeError):
    """The speech synthesis capability failed to start an utterance"""


class InvariantViolation(ConciergeError):
    """Internal state inconsistency; indicates a bug in the orchestrator"""
