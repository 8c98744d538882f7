# concierge/capture.py
"""
Capture adapter: turns a callback-style speech recognizer into one
awaitable outcome per listening attempt
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Optional

from .errors import CaptureStartFailed, CaptureUnavailable
from .model_providers.base import RecognitionCallbacks, SpeechRecognizer

logger = logging.getLogger(__name__)


class CaptureErrorKind(Enum):
    PERMISSION_DENIED = "permission-denied"
    NETWORK = "network"
    NO_SPEECH = "no-speech"
    OTHER = "other"


PERMISSION_CODES = {"not-allowed", "service-not-allowed", "permission-denied"}


def classify_capture_error(code: str) -> CaptureErrorKind:
    """Map a platform error code onto the capture error kinds"""
    code = (code or "").lower()
    if code in PERMISSION_CODES:
        return CaptureErrorKind.PERMISSION_DENIED
    if code == "network":
        return CaptureErrorKind.NETWORK
    if code == "no-speech":
        return CaptureErrorKind.NO_SPEECH
    return CaptureErrorKind.OTHER


@dataclass(frozen=True)
class CaptureOutcome:
    """What one listening attempt produced"""
    text: Optional[str] = None
    error: Optional[CaptureErrorKind] = None
    detail: str = ""
    cancelled: bool = False

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.error is None


class CaptureAdapter:
    """Single-flight wrapper around a SpeechRecognizer.

    Every attempt gets an id; callbacks carry the id of the attempt that
    registered them and are dropped once that attempt is no longer current.
    Recognizer callbacks may arrive on any thread and are marshalled onto
    the event loop that called ``start``.
    """

    def __init__(self, recognizer: Optional[SpeechRecognizer], locale: str = "en-US"):
        self.recognizer = recognizer
        self.locale = locale
        self._attempt = 0
        self._active = False
        self._outcome: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def available(self) -> bool:
        return self.recognizer is not None

    @property
    def listening(self) -> bool:
        return self._active

    @property
    def attempt(self) -> int:
        return self._attempt

    def start(self) -> int:
        """Begin one listening attempt and return its id"""
        if self.recognizer is None:
            raise CaptureUnavailable("No speech recognition capability")

        self.stop()

        self._loop = asyncio.get_running_loop()
        self._attempt += 1
        attempt = self._attempt
        self._outcome = self._loop.create_future()

        callbacks = RecognitionCallbacks(
            on_start=partial(self._dispatch, attempt, self._handle_start),
            on_result=partial(self._dispatch, attempt, self._handle_result),
            on_error=partial(self._dispatch, attempt, self._handle_error),
            on_end=partial(self._dispatch, attempt, self._handle_end),
        )

        try:
            self.recognizer.start(callbacks, self.locale)
        except Exception as e:
            logger.error(f"Mic start error: {e}")
            self._attempt += 1
            self._outcome = None
            raise CaptureStartFailed(str(e)) from e

        self._active = True
        logger.info(f"Capture attempt {attempt} started ({self.locale})")
        return attempt

    def stop(self):
        """Cancel the in-flight attempt; no-op when not listening"""
        if not self._active:
            return

        logger.info(f"Capture attempt {self._attempt} stopped")
        self._active = False
        self._resolve(CaptureOutcome(cancelled=True))
        # Late callbacks from the stopped attempt no longer match
        self._attempt += 1

        try:
            self.recognizer.stop()
        except Exception as e:
            logger.warning(f"Recognizer stop failed: {e}")

    async def wait(self) -> CaptureOutcome:
        """Suspend until the current attempt produces its outcome"""
        if self._outcome is None:
            return CaptureOutcome(cancelled=True)
        return await self._outcome

    # ------------------------------------------------------------------ #
    def _dispatch(self, attempt: int, handler, *args):
        self._loop.call_soon_threadsafe(self._deliver, attempt, handler, args)

    def _deliver(self, attempt: int, handler, args):
        if attempt != self._attempt:
            logger.debug(f"Ignoring {handler.__name__} from stale capture attempt {attempt}")
            return
        handler(*args)

    def _handle_start(self):
        logger.debug(f"Capture attempt {self._attempt} is listening")

    def _handle_result(self, text: str):
        text = (text or "").strip()
        if not text:
            self._resolve(CaptureOutcome())
            return
        logger.info(f"Capture result: {text[:100]}")
        self._resolve(CaptureOutcome(text=text))

    def _handle_error(self, code: str, detail: str = ""):
        kind = classify_capture_error(code)
        logger.error(f"Speech Error: {code} {detail}".rstrip())
        self._resolve(CaptureOutcome(error=kind, detail=code))

    def _handle_end(self):
        self._active = False
        self._resolve(CaptureOutcome())

    def _resolve(self, outcome: CaptureOutcome):
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(outcome)
