"""
Console host wiring tests
"""

import io
import os
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from fakes import PROJECT_ROOT  # noqa: F401

import concierge_host
from concierge.config import Config
from concierge.model_providers.gemini_chat import GeminiChatProvider
from concierge.model_providers.openai_chat import OpenAIChatProvider
from concierge.state import OrchestratorState, project
from concierge.transcript import Turn


class TestConsoleView(unittest.TestCase):
    def test_prints_finalized_turns_once(self):
        view = concierge_host.ConsoleView()
        out = io.StringIO()

        with redirect_stdout(out):
            view.render(project(OrchestratorState.THINKING, (
                Turn.assistant("Greetings."),
                Turn.user("hi"),
                Turn.assistant("Processing...", pending=True),
            ), None))
            view.render(project(OrchestratorState.SPEAKING, (
                Turn.assistant("Greetings."),
                Turn.user("hi"),
                Turn.assistant("Hello!"),
            ), "Speech playback failed."))

        text = out.getvalue()
        self.assertEqual(text.count("Greetings."), 1)
        self.assertNotIn("Processing...", text)
        self.assertIn("🤖 Aurora: Hello!", text)
        self.assertIn("[Thinking...]", text)
        self.assertIn("[Speaking...]", text)
        self.assertIn("Speech playback failed.", text)


class TestBuildOrchestrator(unittest.TestCase):
    def _config(self, **env):
        with patch.dict(os.environ, env, clear=True):
            return Config.from_env()

    @patch.object(concierge_host.ModelProviderFactory, "create_speech_synthesizer", return_value=None)
    def test_gemini_wiring(self, _):
        config = self._config(GEMINI_API_KEY="g-key", INFERENCE_TIMEOUT="9")
        orch = concierge_host.build_orchestrator(config, concierge_host.ConsoleView())

        self.assertIsInstance(orch.inference.provider, GeminiChatProvider)
        self.assertEqual(orch.inference.timeout, 9.0)
        self.assertFalse(orch.capture.available)
        self.assertFalse(orch.playback.available)
        self.assertIn("ready to assist", orch.transcript[0].text)

    @patch.object(concierge_host.ModelProviderFactory, "create_speech_recognizer", return_value=None)
    @patch.object(concierge_host.ModelProviderFactory, "create_speech_synthesizer", return_value=None)
    def test_openai_wiring(self, *_):
        config = self._config(CHAT_PROVIDER="openai", OPENAI_API_KEY="o-key", OPENAI_CHAT_MODEL="gpt-test")
        orch = concierge_host.build_orchestrator(config, concierge_host.ConsoleView())

        self.assertIsInstance(orch.inference.provider, OpenAIChatProvider)
        self.assertEqual(orch.inference.provider.model, "gpt-test")


class TestMain(unittest.TestCase):
    def test_dotenv_loaded_by_host_before_config(self):
        def fake_load_dotenv():
            os.environ["GEMINI_API_KEY"] = "from-dotenv"

        with patch.dict(os.environ, {}, clear=True), \
                patch.object(concierge_host, "load_dotenv", side_effect=fake_load_dotenv) as load, \
                patch.object(concierge_host, "setup_logging"), \
                patch.object(concierge_host, "console_main") as console_main, \
                patch.object(concierge_host.asyncio, "run"):
            concierge_host.main()

        load.assert_called_once_with()
        config = console_main.call_args.args[0]
        self.assertEqual(config.gemini_api_key, "from-dotenv")

    def test_core_config_does_not_read_dotenv(self):
        import concierge.config

        self.assertFalse(hasattr(concierge.config, "load_dotenv"))


if __name__ == "__main__":
    unittest.main()
