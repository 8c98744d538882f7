# concierge/config.py
"""
Configuration management for the voice concierge
"""

import os
import sys
import logging
from dataclasses import dataclass, field
from typing import List

from .inference import PERSONA_PROMPT
from .playback import DEFAULT_VOICE_PREFERENCES


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """Configuration settings for the voice concierge"""
    # === API KEYS ===
    gemini_api_key: str
    openai_api_key: str

    # === MODEL CONFIGURATION ===
    chat_provider: str
    gemini_model: str
    gemini_base_url: str
    openai_chat_model: str
    stt_model: str
    persona_prompt: str

    # === INFERENCE HARDENING ===
    inference_timeout: float
    max_history_turns: int

    # === CAPTURE CONFIGURATION ===
    locale: str
    capture_seconds: float
    sample_rate: int

    # === PLAYBACK CONFIGURATION ===
    speech_pitch: float
    speech_rate: float

    # === LOGGING CONFIGURATION ===
    log_level: str
    log_file: str

    voice_preferences: List[str] = field(default_factory=lambda: list(DEFAULT_VOICE_PREFERENCES))

    @property
    def credential(self) -> str:
        """API key for whichever chat provider is selected"""
        if self.chat_provider == "openai":
            return self.openai_api_key
        return self.gemini_api_key

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables"""
        return cls(
            # === API KEYS ===
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),

            # === MODEL CONFIGURATION ===
            chat_provider=os.getenv("CHAT_PROVIDER", "gemini").lower(),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-09-2025"),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
            openai_chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4o"),
            stt_model=os.getenv("STT_MODEL", "whisper-1"),
            persona_prompt=os.getenv("PERSONA_PROMPT", PERSONA_PROMPT),

            # === INFERENCE HARDENING ===
            inference_timeout=float(os.getenv("INFERENCE_TIMEOUT", "30")),
            max_history_turns=int(os.getenv("MAX_HISTORY_TURNS", "20")),

            # === CAPTURE CONFIGURATION ===
            locale=os.getenv("CAPTURE_LOCALE", "en-US"),
            capture_seconds=float(os.getenv("CAPTURE_SECONDS", "5.0")),
            sample_rate=int(os.getenv("SAMPLE_RATE", "16000")),

            # === PLAYBACK CONFIGURATION ===
            speech_pitch=float(os.getenv("SPEECH_PITCH", "1.0")),
            # 0.9 reads smoother than 1.0 for the concierge voice
            speech_rate=float(os.getenv("SPEECH_RATE", "0.9")),

            # === LOGGING CONFIGURATION ===
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "concierge.log"),

            voice_preferences=_split_list(
                os.getenv("VOICE_PREFERENCES", ",".join(DEFAULT_VOICE_PREFERENCES))
            ),
        )


def setup_logging(config: Config):
    """Configure file and console logging"""
    handlers = [
        logging.FileHandler(config.log_file, encoding='utf-8'),
        logging.StreamHandler(sys.stderr),
    ]

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True  # Reconfigure even if already configured
    )

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("comtypes").setLevel(logging.WARNING)
