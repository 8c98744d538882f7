"""
In-memory speech capabilities and chat provider for tests
"""

import asyncio
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "host"))

from concierge.model_providers.base import (  # noqa: E402
    ChatCompletionProvider,
    RecognitionCallbacks,
    SpeechOptions,
    SpeechRecognizer,
    SpeechSynthesizer,
    UtteranceCallbacks,
    Voice,
)


async def settle(rounds: int = 5):
    """Let call_soon_threadsafe deliveries run"""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_for(predicate, timeout: float = 2.0):
    """Poll until ``predicate()`` holds; inference runs on executor threads"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class FakeRecognizer(SpeechRecognizer):
    def __init__(self, fail_start: Optional[Exception] = None, log: Optional[list] = None):
        self.fail_start = fail_start
        self.log = log if log is not None else []
        self.callbacks: Optional[RecognitionCallbacks] = None
        self.locale = None
        self.start_calls = 0
        self.stop_calls = 0

    def start(self, callbacks: RecognitionCallbacks, locale: str) -> None:
        if self.fail_start:
            raise self.fail_start
        self.start_calls += 1
        self.callbacks = callbacks
        self.locale = locale
        self.log.append("capture.start")
        callbacks.on_start()

    def stop(self) -> None:
        self.stop_calls += 1
        self.log.append("capture.stop")

    def emit_result(self, text: str):
        self.callbacks.on_result(text)
        self.callbacks.on_end()

    def emit_error(self, code: str, detail: str = ""):
        self.callbacks.on_error(code, detail)
        self.callbacks.on_end()


@dataclass
class SpokenUtterance:
    text: str
    options: SpeechOptions
    callbacks: UtteranceCallbacks

    def finish(self):
        self.callbacks.on_end()


class FakeSynthesizer(SpeechSynthesizer):
    def __init__(self, voices: Optional[List[Voice]] = None, fail_speak: Optional[Exception] = None,
                 log: Optional[list] = None):
        self._voices = voices if voices is not None else [Voice("default", "Default Voice")]
        self.fail_speak = fail_speak
        self.log = log if log is not None else []
        self.spoken: List[SpokenUtterance] = []
        self.cancel_calls = 0

    def voices(self) -> List[Voice]:
        return list(self._voices)

    def speak(self, text: str, options: SpeechOptions, callbacks: UtteranceCallbacks) -> None:
        if self.fail_speak:
            raise self.fail_speak
        self.spoken.append(SpokenUtterance(text, options, callbacks))
        self.log.append("playback.speak")
        callbacks.on_start()

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.log.append("playback.cancel")

    @property
    def last(self) -> SpokenUtterance:
        return self.spoken[-1]


class FakeChatProvider(ChatCompletionProvider):
    """Replies with ``reply`` or raises ``error``; optionally blocks until released"""

    def __init__(self, reply: str = "Certainly.", error: Optional[Exception] = None, gated: bool = False):
        self.reply = reply
        self.error = error
        self.release = threading.Event()
        if not gated:
            self.release.set()
        self.calls = []

    def complete(self, contents, system_prompt, api_key, timeout=None) -> str:
        self.calls.append({
            "contents": contents,
            "system_prompt": system_prompt,
            "api_key": api_key,
            "timeout": timeout,
        })
        self.release.wait(5)
        if self.error:
            raise self.error
        return self.reply
