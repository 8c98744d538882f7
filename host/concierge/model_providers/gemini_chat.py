# concierge/model_providers/gemini_chat.py
"""
Gemini generateContent provider
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .base import ChatCompletionProvider, Content

logger = logging.getLogger(__name__)


class GeminiResponseError(Exception):
    """Non-success status or unusable body from the Gemini endpoint"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeminiChatProvider(ChatCompletionProvider):
    """Gemini chat provider over plain HTTP"""

    def __init__(
        self,
        model: str = "gemini-2.5-flash-preview-09-2025",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        session: Optional[requests.Session] = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.last_provider = "gemini"

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, contents: List[Content], system_prompt: str) -> Dict[str, Any]:
        return {
            "contents": contents,
            "systemInstruction": {"parts": [{"text": system_prompt}]},
        }

    def complete(
        self,
        contents: List[Content],
        system_prompt: str,
        api_key: str,
        timeout: Optional[float] = None,
    ) -> str:
        """POST the conversation and return the first candidate's text"""
        start_time = time.time()

        response = self.session.post(
            self.url,
            params={"key": api_key},
            json=self.build_payload(contents, system_prompt),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

        if not response.ok:
            # Body may echo the request URL; keep the key out of the logs
            raise GeminiResponseError(f"Gemini API error {response.status_code}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GeminiResponseError(f"Gemini returned invalid JSON: {e}", response.status_code)

        text = self.extract_text(data)

        elapsed = time.time() - start_time
        logger.debug(f"Gemini responded in {elapsed:.2f}s: {text[:100]}...")
        return text

    @staticmethod
    def extract_text(data: Any) -> str:
        """Read ``candidates[0].content.parts[0].text``"""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise GeminiResponseError("Gemini response missing candidates[0].content.parts[0].text")

        if not isinstance(text, str):
            raise GeminiResponseError("Gemini reply text is not a string")
        return text
