"""
State machine and projection tests
"""

import unittest
from unittest.mock import Mock

from fakes import PROJECT_ROOT  # noqa: F401

from concierge.errors import InvariantViolation
from concierge.state import LEGAL_TRANSITIONS, OrchestratorState, StateHolder, project
from concierge.transcript import Turn

State = OrchestratorState


class TestStateHolder(unittest.TestCase):
    def test_starts_idle(self):
        self.assertIs(StateHolder().state, State.IDLE)

    def test_full_cycle(self):
        holder = StateHolder()
        for state in (State.LISTENING, State.THINKING, State.SPEAKING, State.IDLE):
            holder.transition(state)
        self.assertIs(holder.state, State.IDLE)

    def test_illegal_transition_raises_and_keeps_state(self):
        holder = StateHolder()
        with self.assertRaises(InvariantViolation):
            holder.transition(State.SPEAKING)
        self.assertIs(holder.state, State.IDLE)

    def test_listening_and_speaking_never_adjacent(self):
        self.assertNotIn(State.SPEAKING, LEGAL_TRANSITIONS[State.LISTENING])
        self.assertNotIn(State.LISTENING, LEGAL_TRANSITIONS[State.SPEAKING])

    def test_errored_only_resolves_to_idle(self):
        self.assertEqual(LEGAL_TRANSITIONS[State.ERRORED], frozenset({State.IDLE}))
        for source in (State.LISTENING, State.THINKING, State.SPEAKING):
            self.assertIn(State.ERRORED, LEGAL_TRANSITIONS[source])

    def test_listener_notified_and_failures_contained(self):
        listener = Mock(side_effect=RuntimeError("boom"))
        holder = StateHolder(on_change=listener)

        holder.transition(State.LISTENING)

        listener.assert_called_once_with(State.IDLE, State.LISTENING)
        self.assertIs(holder.state, State.LISTENING)


class TestProjection(unittest.TestCase):
    def test_labels_and_lock(self):
        transcript = (Turn.assistant("hi"),)

        thinking = project(State.THINKING, transcript, None)
        self.assertEqual(thinking.label, "Thinking...")
        self.assertTrue(thinking.input_locked)

        idle = project(State.IDLE, transcript, "")
        self.assertEqual(idle.label, "Ready")
        self.assertFalse(idle.input_locked)
        self.assertIsNone(idle.error_message)

        listening = project(State.LISTENING, transcript, "Microphone error: aborted")
        self.assertEqual(listening.label, "Listening...")
        self.assertEqual(listening.error_message, "Microphone error: aborted")
        self.assertEqual(listening.transcript, transcript)


if __name__ == "__main__":
    unittest.main()
