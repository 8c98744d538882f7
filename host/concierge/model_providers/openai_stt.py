# concierge/model_providers/openai_stt.py
"""
Microphone capture with sounddevice, transcription with the OpenAI API
"""

import io
import logging
import threading
from typing import Optional

import openai
from openai import OpenAI

from .base import RecognitionCallbacks, SpeechRecognizer

logger = logging.getLogger(__name__)


class OpenAIRecognizer(SpeechRecognizer):
    """Records one fixed-length clip per attempt and transcribes it"""

    def __init__(self, api_key: str, model: str = "whisper-1", sample_rate: int = 16000, seconds: float = 5.0):
        import sounddevice as sd
        import soundfile as sf
        self._sd = sd
        self._sf = sf

        # Fails fast when there is no input device at all
        sd.query_devices(kind='input')

        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.sample_rate = sample_rate
        self.seconds = seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, callbacks: RecognitionCallbacks, locale: str) -> None:
        if self._thread and self._thread.is_alive():
            raise RuntimeError("Recognizer is already listening")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._listen, args=(callbacks, locale), daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def _listen(self, callbacks: RecognitionCallbacks, locale: str):
        callbacks.on_start()
        try:
            audio = self._record()
            if audio is None:
                return

            text = self._transcribe(audio, locale)
            if self._stop_event.is_set():
                return
            if text:
                callbacks.on_result(text)
            else:
                callbacks.on_error("no-speech", "empty transcription")

        except self._sd.PortAudioError as e:
            logger.error(f"Microphone error: {e}")
            callbacks.on_error("audio-capture", str(e))
        except openai.APIConnectionError as e:
            logger.error(f"STT connection error: {e}")
            callbacks.on_error("network", str(e))
        except openai.PermissionDeniedError as e:
            logger.error(f"STT permission error: {e}")
            callbacks.on_error("not-allowed", str(e))
        except Exception as e:
            logger.error(f"STT error: {e}")
            callbacks.on_error("other", str(e))
        finally:
            callbacks.on_end()

    def _record(self):
        frames = int(self.seconds * self.sample_rate)
        recording = self._sd.rec(frames, samplerate=self.sample_rate, channels=1, dtype="float32")

        if self._stop_event.wait(self.seconds):
            self._sd.stop()
            logger.info("Recording stopped before completion")
            return None

        self._sd.wait()
        return recording

    def _transcribe(self, audio, locale: str) -> str:
        buffer = io.BytesIO()
        self._sf.write(buffer, audio, self.sample_rate, format="WAV")
        buffer.seek(0)
        buffer.name = "speech.wav"

        response = self.client.audio.transcriptions.create(
            model=self.model,
            file=buffer,
            language=locale.split("-")[0],
        )
        return response.text.strip()
