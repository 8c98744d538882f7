# concierge/playback.py
"""
Playback adapter: one audible utterance at a time, awaitable completion
"""

import asyncio
import logging
from functools import partial
from typing import List, Optional, Sequence

from .errors import PlaybackFailed
from .model_providers.base import SpeechOptions, SpeechSynthesizer, UtteranceCallbacks, Voice

logger = logging.getLogger(__name__)

DEFAULT_VOICE_PREFERENCES = ["Google US English", "Natural", "Samantha"]


def select_voice(voices: Sequence[Voice], preferences: Sequence[str]) -> Optional[Voice]:
    """First voice whose name contains a preference, in preference order,
    else the platform default (first voice), else None"""
    for preference in preferences:
        for voice in voices:
            if preference in voice.name:
                return voice
    return voices[0] if voices else None


class PlaybackAdapter:
    """Single-flight wrapper around a SpeechSynthesizer.

    ``speak`` pre-empts whatever is playing. Each utterance gets an id and
    callbacks from a pre-empted utterance are dropped, so the orchestrator
    never sees an ``on_end`` that belongs to an older utterance.
    """

    def __init__(
        self,
        synthesizer: Optional[SpeechSynthesizer],
        voice_preferences: Optional[List[str]] = None,
        pitch: float = 1.0,
        rate: float = 0.9,
    ):
        self.synthesizer = synthesizer
        self.voice_preferences = voice_preferences or list(DEFAULT_VOICE_PREFERENCES)
        self.pitch = pitch
        self.rate = rate
        self._utterance = 0
        self._active = False
        self._finished: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def available(self) -> bool:
        return self.synthesizer is not None

    @property
    def speaking(self) -> bool:
        return self._active

    @property
    def utterance(self) -> int:
        return self._utterance

    def speak(self, text: str) -> int:
        """Cancel any current utterance and start speaking ``text``"""
        self.cancel()

        self._loop = asyncio.get_running_loop()
        self._utterance += 1
        utterance = self._utterance
        self._finished = self._loop.create_future()

        if self.synthesizer is None:
            logger.debug("No speech synthesizer; skipping playback")
            self._finished.set_result(True)
            return utterance

        options = SpeechOptions(voice=self._pick_voice(), pitch=self.pitch, rate=self.rate)
        callbacks = UtteranceCallbacks(
            on_start=partial(self._dispatch, utterance, self._handle_start),
            on_end=partial(self._dispatch, utterance, self._handle_end),
        )

        self._active = True
        try:
            self.synthesizer.speak(text, options, callbacks)
        except Exception as e:
            self._active = False
            self._utterance += 1
            self._finished = None
            raise PlaybackFailed(str(e)) from e

        logger.info(f"Speaking: {text[:50]}...")
        return utterance

    def cancel(self):
        """Silence the current utterance; safe when nothing is speaking"""
        if not self._active:
            return

        logger.info(f"Utterance {self._utterance} cancelled")
        self._active = False
        self._resolve(False)
        self._utterance += 1

        try:
            self.synthesizer.cancel()
        except Exception as e:
            logger.warning(f"Synthesizer cancel failed: {e}")

    async def wait(self) -> bool:
        """True when the utterance ended on its own, False when pre-empted"""
        if self._finished is None:
            return False
        return await self._finished

    # ------------------------------------------------------------------ #
    def _pick_voice(self) -> Optional[Voice]:
        try:
            voices = self.synthesizer.voices()
        except Exception as e:
            logger.warning(f"Could not list voices: {e}")
            return None

        voice = select_voice(voices, self.voice_preferences)
        if voice:
            logger.debug(f"Selected voice: {voice.name}")
        return voice

    def _dispatch(self, utterance: int, handler):
        self._loop.call_soon_threadsafe(self._deliver, utterance, handler)

    def _deliver(self, utterance: int, handler):
        if utterance != self._utterance:
            logger.debug(f"Ignoring {handler.__name__} from pre-empted utterance {utterance}")
            return
        handler()

    def _handle_start(self):
        logger.debug(f"Utterance {self._utterance} started")

    def _handle_end(self):
        self._active = False
        self._resolve(True)
        logger.info("Audio playback completed")

    def _resolve(self, completed: bool):
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(completed)
