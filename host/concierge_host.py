# concierge_host.py
"""
Console host for the voice concierge.

Typed lines are submitted as text turns. Commands:
  /mic       toggle voice capture (also interrupts speech)
  /dismiss   clear the status message
  /key KEY   set the API key for the selected provider
  /quit      exit
"""

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from concierge.config import Config, setup_logging
from concierge.capture import CaptureAdapter
from concierge.inference import InferenceClient
from concierge.model_providers.factory import ModelProviderFactory
from concierge.orchestrator import TurnOrchestrator
from concierge.playback import PlaybackAdapter
from concierge.state import StatusView
from concierge.transcript import Speaker

logger = logging.getLogger(__name__)


class ConsoleView:
    """Prints finalized turns, status labels and status messages"""

    def __init__(self):
        self.printed = 0
        self.label = None
        self.error = None

    def render(self, view: StatusView):
        for turn in view.transcript[self.printed:]:
            if turn.pending:
                break
            icon = "👤 You" if turn.speaker is Speaker.USER else "🤖 Aurora"
            print(f"\n{icon}: {turn.text}")
            self.printed += 1

        if view.label != self.label:
            self.label = view.label
            print(f"   [{view.label}]")

        if view.error_message != self.error:
            self.error = view.error_message
            if view.error_message:
                print(f"⚠️  {view.error_message}")


def build_orchestrator(config: Config, view: ConsoleView) -> TurnOrchestrator:
    """Wire providers, adapters and the orchestrator from configuration"""
    if config.chat_provider == "openai":
        chat_model = config.openai_chat_model
    else:
        chat_model = config.gemini_model

    chat_provider = ModelProviderFactory.create_chat_provider(
        config.chat_provider,
        model=chat_model,
        base_url=config.gemini_base_url,
    )

    recognizer = ModelProviderFactory.create_speech_recognizer(
        api_key=config.openai_api_key,
        model=config.stt_model,
        sample_rate=config.sample_rate,
        seconds=config.capture_seconds,
    )
    synthesizer = ModelProviderFactory.create_speech_synthesizer()

    return TurnOrchestrator(
        capture=CaptureAdapter(recognizer, locale=config.locale),
        inference=InferenceClient(
            chat_provider,
            system_prompt=config.persona_prompt,
            timeout=config.inference_timeout,
            max_history_turns=config.max_history_turns,
        ),
        playback=PlaybackAdapter(
            synthesizer,
            voice_preferences=config.voice_preferences,
            pitch=config.speech_pitch,
            rate=config.speech_rate,
        ),
        credential=config.credential,
        on_change=view.render,
    )


async def console_main(config: Config):
    view = ConsoleView()
    orchestrator = build_orchestrator(config, view)

    print("\n" + "=" * 60)
    print("✨ Aurora - Voice Concierge")
    print("=" * 60)
    print("💡 Type a request, or '/mic' to speak")
    print("💡 '/dismiss' clears messages, '/key KEY' sets the API key, '/quit' exits")
    print("=" * 60)
    view.render(orchestrator.view())

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            line = line.strip()

            if line in ("/quit", "/exit"):
                break
            elif line == "/mic":
                await orchestrator.activate_voice()
            elif line == "/dismiss":
                orchestrator.dismiss_error()
            elif line.startswith("/key"):
                orchestrator.set_credential(line[len("/key"):].strip())
            elif line:
                await orchestrator.submit_text(line)
    finally:
        orchestrator.shutdown()
        print("🔧 Shutdown complete")


def main():
    # Load environment variables
    load_dotenv()
    config = Config.from_env()
    setup_logging(config)
    logger.info(f"Starting concierge with {config.chat_provider} provider")

    try:
        asyncio.run(console_main(config))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")


if __name__ == "__main__":
    main()
