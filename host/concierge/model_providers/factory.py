# concierge/model_providers/factory.py
"""
Factory for creating model providers and speech capabilities
"""

import logging
from typing import Optional

from .base import ChatCompletionProvider, SpeechRecognizer, SpeechSynthesizer
from .gemini_chat import GeminiChatProvider
from .openai_chat import OpenAIChatProvider

logger = logging.getLogger(__name__)


class ModelProviderFactory:
    """Factory for creating model providers"""

    @staticmethod
    def create_chat_provider(provider_type: str, **kwargs) -> ChatCompletionProvider:
        """Create a chat completion provider"""
        if provider_type == "openai":
            model = kwargs.get("model", "gpt-4o")
            logger.info(f"✅ Using OpenAI {model}")
            return OpenAIChatProvider(model=model)

        if provider_type != "gemini":
            logger.warning(f"Chat provider {provider_type} not implemented, using Gemini")

        model = kwargs.get("model", "gemini-2.5-flash-preview-09-2025")
        base_url = kwargs.get("base_url", "https://generativelanguage.googleapis.com/v1beta")
        logger.info(f"✅ Using Gemini {model}")
        return GeminiChatProvider(model=model, base_url=base_url)

    @staticmethod
    def create_speech_synthesizer(**kwargs) -> Optional[SpeechSynthesizer]:
        """Create the offline TTS engine, or None when the platform has none"""
        try:
            from .pyttsx3_tts import Pyttsx3Synthesizer
            return Pyttsx3Synthesizer()
        except Exception as e:
            logger.warning(f"❌ Speech synthesis unavailable: {e}")
            return None

    @staticmethod
    def create_speech_recognizer(**kwargs) -> Optional[SpeechRecognizer]:
        """Create the microphone + transcription recognizer, or None"""
        api_key = kwargs.get("api_key")
        if not api_key:
            logger.warning("❌ Speech recognition needs an OpenAI API key")
            return None

        try:
            from .openai_stt import OpenAIRecognizer
            return OpenAIRecognizer(
                api_key=api_key,
                model=kwargs.get("model", "whisper-1"),
                sample_rate=kwargs.get("sample_rate", 16000),
                seconds=kwargs.get("seconds", 5.0),
            )
        except Exception as e:
            logger.warning(f"❌ Speech recognition unavailable: {e}")
            return None
