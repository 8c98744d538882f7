# concierge/model_providers/openai_chat.py
"""
OpenAI Chat provider implementation
"""

from typing import Any, Dict, List, Optional
from openai import OpenAI
import logging

from .base import ChatCompletionProvider, Content

logger = logging.getLogger(__name__)


class OpenAIChatProvider(ChatCompletionProvider):
    """OpenAI Chat completion provider"""

    def __init__(self, model: str = "gpt-4o", temperature: float = 0.7):
        self.model = model
        self.temperature = temperature
        self.last_provider = "openai"
        self._clients: Dict[str, OpenAI] = {}

    def _client(self, api_key: str) -> OpenAI:
        # The key can change at runtime from the settings command
        if api_key not in self._clients:
            self._clients[api_key] = OpenAI(api_key=api_key, max_retries=0)
        return self._clients[api_key]

    def complete(
        self,
        contents: List[Content],
        system_prompt: str,
        api_key: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Create a chat completion using OpenAI"""
        response = self._client(api_key).chat.completions.create(
            model=self.model,
            messages=self._convert_messages(contents, system_prompt),
            temperature=self.temperature,
            timeout=timeout,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ValueError("OpenAI returned empty response")
        return content

    def _convert_messages(self, contents: List[Content], system_prompt: str) -> List[Dict[str, Any]]:
        """Convert Gemini-style contents to OpenAI chat messages"""
        messages = [{"role": "system", "content": system_prompt.strip()}]

        for entry in contents:
            role = "assistant" if entry.get("role") == "model" else "user"
            text = "".join(part.get("text", "") for part in entry.get("parts", []))
            messages.append({"role": role, "content": text})

        return messages
