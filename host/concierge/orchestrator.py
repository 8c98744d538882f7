# concierge/orchestrator.py
"""
Turn orchestrator: the single-threaded state machine that sequences
capture, inference and playback and owns the transcript.

All commands and continuations run on one asyncio event loop. Every turn
cycle carries an id; a continuation that resumes after its cycle was
superseded (barge-in, toggle-off) returns without touching state.
"""

import asyncio
import logging
from typing import Callable, Optional

from .capture import CaptureAdapter, CaptureErrorKind, CaptureOutcome
from .errors import (
    CaptureStartFailed,
    CaptureUnavailable,
    MissingCredential,
    PlaybackFailed,
    UpstreamError,
)
from .inference import InferenceClient
from .playback import PlaybackAdapter
from .state import OrchestratorState, StateHolder, StatusView, project
from .transcript import Transcript, Turn

logger = logging.getLogger(__name__)

GREETING_READY = "Greetings. I am Aurora. I am ready to assist you."
GREETING_UNCONFIGURED = "Greetings. I am Aurora. Please configure my API key in settings to begin."
PENDING_TEXT = "Processing..."
MISSING_CREDENTIAL_TEXT = "Please enter a valid Gemini API Key in settings."
APOLOGY_TEXT = "I apologize, I am unable to connect to my knowledge base right now."
SPOKEN_APOLOGY = "I apologize, I encountered an error processing your request."

CAPTURE_MESSAGES = {
    CaptureErrorKind.NETWORK: "Network error with Voice API. Please check connection or use text input.",
    CaptureErrorKind.PERMISSION_DENIED: "Microphone access denied. Please use text input.",
    CaptureErrorKind.NO_SPEECH: "I didn't hear anything. Please try again.",
}
CAPTURE_UNAVAILABLE_TEXT = "Speech Recognition is not supported in this environment. Please use text input."
CAPTURE_START_FAILED_TEXT = "Could not start microphone. Try again."
PLAYBACK_UNAVAILABLE_TEXT = "Text-to-Speech is not supported in this environment."
PLAYBACK_FAILED_TEXT = "Speech playback failed."

State = OrchestratorState


def capture_error_message(outcome: CaptureOutcome) -> str:
    if outcome.error in CAPTURE_MESSAGES:
        return CAPTURE_MESSAGES[outcome.error]
    return f"Microphone error: {outcome.detail or 'unknown'}"


class TurnOrchestrator:
    """Owns the active turn and the only writable copy of the transcript"""

    def __init__(
        self,
        capture: CaptureAdapter,
        inference: InferenceClient,
        playback: PlaybackAdapter,
        credential: Optional[str] = None,
        on_change: Optional[Callable[[StatusView], None]] = None,
    ):
        self.capture = capture
        self.inference = inference
        self.playback = playback
        self.on_change = on_change
        self._credential = credential
        self._machine = StateHolder(on_change=lambda old, new: self._changed())
        self._transcript = Transcript(GREETING_READY if credential else GREETING_UNCONFIGURED)
        self._error_message: Optional[str] = None if playback.available else PLAYBACK_UNAVAILABLE_TEXT
        self._cycle = 0
        self._task: Optional[asyncio.Task] = None

    # ---- read-only projection ---------------------------------------- #
    @property
    def state(self) -> OrchestratorState:
        return self._machine.state

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def transcript(self):
        return self._transcript.snapshot()

    def view(self) -> StatusView:
        return project(self.state, self._transcript.snapshot(), self._error_message)

    # ---- commands ----------------------------------------------------- #
    def set_credential(self, credential: Optional[str]):
        """Replace the API key used for subsequent turns"""
        self._credential = (credential or "").strip() or None
        if self._credential:
            logger.info("API key updated")
        else:
            logger.info("API key cleared")

    def dismiss_error(self):
        if self._error_message is not None:
            self._error_message = None
            self._changed()

    async def activate_voice(self):
        """Mic toggle: barge-in, toggle-off, or start listening"""
        if self._input_locked():
            logger.info("Voice activation ignored while thinking")
            return

        if self.state is State.SPEAKING:
            self._barge_in()

        if self.state is State.LISTENING:
            self._stop_listening()
            return

        self._set_error(None)
        try:
            self.capture.start()
        except CaptureUnavailable as e:
            logger.warning(f"Capture unavailable: {e}")
            self._set_error(CAPTURE_UNAVAILABLE_TEXT)
            return
        except CaptureStartFailed as e:
            logger.warning(f"Capture start failed: {e}")
            self._set_error(CAPTURE_START_FAILED_TEXT)
            return

        cycle = self._next_cycle()
        self._machine.transition(State.LISTENING)
        self._spawn(self._listen(cycle))

    async def submit_text(self, text: str):
        """Typed input; skips capture and goes straight to inference"""
        text = (text or "").strip()
        if not text:
            return

        if self._input_locked():
            logger.info("Text submission ignored while thinking")
            return

        if self.state is State.SPEAKING:
            self._barge_in()
        elif self.state is State.LISTENING:
            self._stop_listening()

        cycle = self._next_cycle()
        self._begin_turn(text)
        self._spawn(self._reply(cycle))

    async def wait_until_settled(self):
        """Suspend until no turn continuation is running"""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def shutdown(self):
        """Stop capture and playback; abandons the current cycle"""
        self._next_cycle()
        self.capture.stop()
        self.playback.cancel()
        if self.state in (State.LISTENING, State.SPEAKING):
            self._machine.transition(State.IDLE)

    # ---- turn flow ---------------------------------------------------- #
    async def _listen(self, cycle: int):
        outcome = await self.capture.wait()
        if cycle != self._cycle or outcome.cancelled:
            return

        if outcome.error is not None:
            self._surface_error(capture_error_message(outcome))
            return

        if outcome.is_empty:
            logger.info("Capture ended without an utterance")
            self._machine.transition(State.IDLE)
            return

        self._begin_turn(outcome.text)
        await self._reply(cycle)

    def _begin_turn(self, text: str):
        self._transcript.append(Turn.user(text))
        self._transcript.append(Turn.assistant(PENDING_TEXT, pending=True))
        self._machine.transition(State.THINKING)

    async def _reply(self, cycle: int):
        snapshot = self._transcript.snapshot()
        try:
            reply = await self.inference.complete(snapshot, self._credential)
            display, spoken = reply, reply
        except MissingCredential:
            logger.warning("No API key configured; skipping inference")
            display = spoken = MISSING_CREDENTIAL_TEXT
            self._error_message = MISSING_CREDENTIAL_TEXT
        except UpstreamError as e:
            logger.error(f"Inference failed: {e}")
            display, spoken = APOLOGY_TEXT, SPOKEN_APOLOGY

        self._transcript.replace_pending(display)
        self._changed()

        if cycle != self._cycle:
            return
        await self._speak(cycle, spoken)

    async def _speak(self, cycle: int, text: str):
        self._machine.transition(State.SPEAKING)
        try:
            self.playback.speak(text)
        except PlaybackFailed as e:
            logger.error(f"TTS error: {e}")
            self._surface_error(PLAYBACK_FAILED_TEXT)
            return

        await self.playback.wait()
        if cycle != self._cycle:
            return
        self._machine.transition(State.IDLE)

    async def _guarded(self, coro):
        try:
            await coro
        except Exception:
            # InvariantViolation or an unexpected provider fault
            logger.exception("Turn aborted by internal error")
            self._abort_turn()

    # ---- helpers ------------------------------------------------------ #
    def _input_locked(self) -> bool:
        return self.state is State.THINKING or self._transcript.has_pending

    def _next_cycle(self) -> int:
        self._cycle += 1
        return self._cycle

    def _spawn(self, coro):
        self._task = asyncio.create_task(self._guarded(coro))

    def _barge_in(self):
        logger.info("Barge-in: cancelling playback")
        self._next_cycle()
        self.playback.cancel()
        self._machine.transition(State.IDLE)

    def _stop_listening(self):
        self._next_cycle()
        self.capture.stop()
        self._machine.transition(State.IDLE)

    def _surface_error(self, message: str):
        self._error_message = message
        self._machine.transition(State.ERRORED)
        self._machine.transition(State.IDLE)

    def _abort_turn(self):
        self._next_cycle()
        self.capture.stop()
        self.playback.cancel()
        if self._transcript.has_pending:
            self._transcript.replace_pending(APOLOGY_TEXT)
        if self.state is State.IDLE:
            self._changed()
            return
        if self.state is not State.ERRORED:
            self._machine.transition(State.ERRORED)
        self._machine.transition(State.IDLE)

    def _set_error(self, message: Optional[str]):
        if message != self._error_message:
            self._error_message = message
            self._changed()

    def _changed(self):
        if self.on_change is None:
            return
        try:
            self.on_change(self.view())
        except Exception as e:
            logger.warning(f"Status listener failed: {e}")
