# concierge/model_providers/base.py
"""
Base interfaces for model providers and platform speech capabilities
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

# Canonical request entry: {"role": "user" | "model", "parts": [{"text": ...}]}
Content = Dict[str, Any]


class ChatCompletionProvider(ABC):
    """Base interface for chat completion providers"""

    @abstractmethod
    def complete(
        self,
        contents: List[Content],
        system_prompt: str,
        api_key: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Send one request and return the reply text"""
        pass


@dataclass
class RecognitionCallbacks:
    """Hooks a speech recognizer fires for one listening attempt"""
    on_start: Callable[[], None]
    on_result: Callable[[str], None]
    on_error: Callable[[str, str], None]  # (error code, detail)
    on_end: Callable[[], None]


class SpeechRecognizer(ABC):
    """Single-utterance, non-continuous speech-to-text capability"""

    @abstractmethod
    def start(self, callbacks: RecognitionCallbacks, locale: str) -> None:
        """Begin one listening attempt; raise if the device cannot start"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Abort the current attempt"""
        pass


@dataclass(frozen=True)
class Voice:
    id: str
    name: str


@dataclass(frozen=True)
class SpeechOptions:
    voice: Optional[Voice]
    pitch: float = 1.0
    rate: float = 1.0


@dataclass
class UtteranceCallbacks:
    """Hooks a speech synthesizer fires for one utterance"""
    on_start: Callable[[], None]
    on_end: Callable[[], None]


class SpeechSynthesizer(ABC):
    """Text-to-speech capability"""

    @abstractmethod
    def voices(self) -> List[Voice]:
        """Voices installed on the platform, default first"""
        pass

    @abstractmethod
    def speak(self, text: str, options: SpeechOptions, callbacks: UtteranceCallbacks) -> None:
        """Begin speaking ``text``; must not block until the utterance ends"""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Silence the current utterance, if any"""
        pass
