# concierge/model_providers/pyttsx3_tts.py
"""
Offline speech synthesis through pyttsx3
"""

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

from .base import SpeechOptions, SpeechSynthesizer, UtteranceCallbacks, Voice

logger = logging.getLogger(__name__)

BASE_RATE_WPM = 180


class Pyttsx3Synthesizer(SpeechSynthesizer):
    """pyttsx3 engine driven from a single worker thread.

    ``runAndWait`` blocks, so every utterance runs on the worker; start/end
    callbacks therefore fire on that thread. An utterance is live while its
    name is registered in ``_callbacks``; ``cancel`` unregisters all of them
    so queued utterances never reach the engine.
    """

    def __init__(self, base_rate: int = BASE_RATE_WPM):
        import pyttsx3
        self.engine = pyttsx3.init()
        self.base_rate = base_rate
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tts")
        self._callbacks: Dict[str, UtteranceCallbacks] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

        self.engine.connect('started-utterance', self._on_started)
        self.engine.connect('finished-utterance', self._on_finished)

    def voices(self) -> List[Voice]:
        return [Voice(id=v.id, name=v.name or v.id) for v in self.engine.getProperty('voices')]

    def speak(self, text: str, options: SpeechOptions, callbacks: UtteranceCallbacks) -> None:
        name = f"utt-{next(self._ids)}"
        with self._lock:
            self._callbacks[name] = callbacks
        self._executor.submit(self._run, name, text, options)

    def _run(self, name: str, text: str, options: SpeechOptions):
        try:
            # A concurrent cancel either unregisters the name before this
            # check or stops the engine after say() has queued it
            with self._lock:
                if name not in self._callbacks:
                    logger.debug(f"Skipping cancelled utterance {name}")
                    return
                if options.voice:
                    self.engine.setProperty('voice', options.voice.id)
                # pyttsx3 has no portable pitch control
                self.engine.setProperty('rate', int(self.base_rate * options.rate))
                self.engine.say(text, name)
            self.engine.runAndWait()
        except Exception as e:
            logger.error(f"pyttsx3 playback error: {e}")
            self._on_finished(name, False)

    def cancel(self) -> None:
        with self._lock:
            self._callbacks.clear()
        # Drivers may fire finished-utterance from inside stop()
        try:
            self.engine.stop()
        except Exception as e:
            logger.debug(f"pyttsx3 stop failed: {e}")

    def _on_started(self, name):
        with self._lock:
            callbacks = self._callbacks.get(name)
        if callbacks:
            callbacks.on_start()

    def _on_finished(self, name, completed):
        with self._lock:
            callbacks = self._callbacks.pop(name, None)
        if callbacks:
            callbacks.on_end()
