# concierge/inference.py
"""
Inference client: turns the transcript into one chat request and maps every
provider failure onto UpstreamError
"""

import asyncio
import logging
import time
from functools import partial
from typing import List, Optional, Sequence

from .errors import MissingCredential, UpstreamError
from .model_providers.base import ChatCompletionProvider, Content
from .transcript import Speaker, Turn

logger = logging.getLogger(__name__)

PERSONA_PROMPT = """
You are Aurora, a high-end, polite, and sophisticated intelligent concierge.
Keep your answers concise (under 3 sentences) but helpful.
Just provide the direct answer or assistance naturally.
"""

ROLE_MAP = {
    Speaker.USER: "user",
    Speaker.ASSISTANT: "model",
}


def history_to_contents(history: Sequence[Turn], max_turns: Optional[int] = None) -> List[Content]:
    """Build request contents from transcript turns.

    Pending placeholders are skipped and leading model entries (the seeded
    greeting) are dropped, since the first entry must be user-authored.
    ``max_turns`` keeps only the most recent entries.
    """
    contents = [
        {"role": ROLE_MAP[turn.speaker], "parts": [{"text": turn.text}]}
        for turn in history
        if not turn.pending
    ]

    if max_turns and len(contents) > max_turns:
        contents = contents[-max_turns:]

    while contents and contents[0]["role"] == "model":
        contents = contents[1:]

    return contents


class InferenceClient:
    """One request per call, no retries, bounded by ``timeout`` seconds"""

    def __init__(
        self,
        provider: ChatCompletionProvider,
        system_prompt: str = PERSONA_PROMPT,
        timeout: float = 30.0,
        max_history_turns: Optional[int] = 20,
    ):
        self.provider = provider
        self.system_prompt = system_prompt
        self.timeout = timeout
        self.max_history_turns = max_history_turns

    async def complete(self, history: Sequence[Turn], credential: Optional[str]) -> str:
        """Return the model's reply to ``history``"""
        if not credential or not credential.strip():
            raise MissingCredential("No API key configured")

        contents = history_to_contents(history, self.max_history_turns)
        if not contents:
            raise UpstreamError("No user turn to send")

        logger.info(f"Requesting reply for {len(contents)} turns")
        start_time = time.time()

        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(
            None,
            partial(self.provider.complete, contents, self.system_prompt, credential.strip(), self.timeout),
        )

        try:
            reply = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise UpstreamError(f"Inference timed out after {self.timeout}s")
        except Exception as e:
            raise UpstreamError(f"{type(e).__name__}: {e}", getattr(e, "status_code", None)) from e

        if not isinstance(reply, str) or not reply.strip():
            raise UpstreamError("Empty reply from provider")

        elapsed = time.time() - start_time
        logger.info(f"Reply received in {elapsed:.1f}s")
        return reply.strip()
