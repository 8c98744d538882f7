"""
Capture adapter tests
"""

import unittest

from fakes import FakeRecognizer, settle

from concierge.capture import CaptureAdapter, CaptureErrorKind, classify_capture_error
from concierge.errors import CaptureStartFailed, CaptureUnavailable


class TestClassifyCaptureError(unittest.TestCase):
    def test_kinds(self):
        self.assertIs(classify_capture_error("not-allowed"), CaptureErrorKind.PERMISSION_DENIED)
        self.assertIs(classify_capture_error("service-not-allowed"), CaptureErrorKind.PERMISSION_DENIED)
        self.assertIs(classify_capture_error("permission-denied"), CaptureErrorKind.PERMISSION_DENIED)
        self.assertIs(classify_capture_error("network"), CaptureErrorKind.NETWORK)
        self.assertIs(classify_capture_error("no-speech"), CaptureErrorKind.NO_SPEECH)
        self.assertIs(classify_capture_error("aborted"), CaptureErrorKind.OTHER)
        self.assertIs(classify_capture_error(""), CaptureErrorKind.OTHER)


class TestCaptureAdapter(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.recognizer = FakeRecognizer()
        self.adapter = CaptureAdapter(self.recognizer, locale="en-GB")

    async def test_result(self):
        self.adapter.start()
        self.assertTrue(self.adapter.listening)
        self.assertEqual(self.recognizer.locale, "en-GB")

        self.recognizer.emit_result("  turn on the lights ")
        outcome = await self.adapter.wait()

        self.assertEqual(outcome.text, "turn on the lights")
        self.assertIsNone(outcome.error)
        await settle()
        self.assertFalse(self.adapter.listening)

    async def test_error(self):
        self.adapter.start()
        self.recognizer.emit_error("network")
        outcome = await self.adapter.wait()
        self.assertIs(outcome.error, CaptureErrorKind.NETWORK)
        self.assertIsNone(outcome.text)

    async def test_end_without_result_is_empty(self):
        self.adapter.start()
        self.recognizer.callbacks.on_end()
        outcome = await self.adapter.wait()
        self.assertTrue(outcome.is_empty)
        self.assertFalse(outcome.cancelled)

    async def test_blank_result_is_empty(self):
        self.adapter.start()
        self.recognizer.emit_result("   ")
        self.assertTrue((await self.adapter.wait()).is_empty)

    async def test_stop_cancels_and_ignores_late_events(self):
        self.adapter.start()
        callbacks = self.recognizer.callbacks

        self.adapter.stop()
        outcome = await self.adapter.wait()
        self.assertTrue(outcome.cancelled)
        self.assertEqual(self.recognizer.stop_calls, 1)

        # A new attempt must not see the old attempt's result
        self.adapter.start()
        callbacks.on_result("stale words")
        callbacks.on_end()
        await settle()
        self.assertTrue(self.adapter.listening)

        self.recognizer.emit_result("fresh words")
        self.assertEqual((await self.adapter.wait()).text, "fresh words")

    async def test_stop_when_idle_is_noop(self):
        self.adapter.stop()
        self.assertEqual(self.recognizer.stop_calls, 0)

    async def test_unavailable(self):
        with self.assertRaises(CaptureUnavailable):
            CaptureAdapter(None).start()

    async def test_start_failure(self):
        adapter = CaptureAdapter(FakeRecognizer(fail_start=RuntimeError("device busy")))
        with self.assertRaises(CaptureStartFailed):
            adapter.start()
        self.assertFalse(adapter.listening)


if __name__ == "__main__":
    unittest.main()
