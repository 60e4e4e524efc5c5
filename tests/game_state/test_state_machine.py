"""
Tests for the dialogue phase state machine.
"""

import pytest

from narrative_engine.game_state import (
    DialogueCursor,
    DialoguePhase,
    DialogueStateMachine,
    InvalidTransitionError,
)
from narrative_engine.observability.run_log import RunLog


@pytest.fixture
def machine():
    return DialogueStateMachine()


class TestPhases:
    """Tests for phase changes."""

    def test_starts_idle(self, machine):
        assert machine.current_state == DialoguePhase.IDLE
        assert machine.cursor is None

    def test_talk_to_enters_dialogue(self, machine):
        assert machine.observe(DialogueCursor("shop", "start"), "talk_to")
        assert machine.current_state == DialoguePhase.IN_DIALOGUE

    def test_choice_leaves_dialogue(self, machine):
        machine.observe(DialogueCursor("shop", "start"), "talk_to")
        machine.observe(None, "select_choice")
        assert machine.current_state == DialoguePhase.IDLE

    def test_node_move_is_recorded(self, machine):
        machine.observe(DialogueCursor("shop", "start"), "talk_to")
        assert machine.observe(DialogueCursor("shop", "check"), "select_choice")
        assert machine.state_history[-1].to_state == "in_dialogue(shop:check)"

    def test_unchanged_cursor_records_nothing(self, machine):
        assert not machine.observe(None, "get_snapshot")
        assert machine.state_history == []

    def test_invalid_entry_trigger(self, machine):
        with pytest.raises(InvalidTransitionError):
            machine.observe(DialogueCursor("shop", "start"), "take_item")

    def test_invalid_exit_trigger(self, machine):
        machine.observe(DialogueCursor("shop", "start"), "talk_to")
        with pytest.raises(InvalidTransitionError):
            machine.observe(None, "write_note")

    def test_can_transition(self, machine):
        assert machine.can_transition(DialoguePhase.IN_DIALOGUE, "travel")
        assert not machine.can_transition(DialoguePhase.IN_DIALOGUE, "set_locale")
        assert machine.can_transition(DialoguePhase.IDLE, "anything")


class TestRecording:
    """Tests for history, hooks and run log forwarding."""

    def test_post_hook_receives_cursors(self, machine):
        calls = []
        machine.register_post_hook(lambda old, new, trigger: calls.append((old, new, trigger)))
        cursor = DialogueCursor("shop", "start")
        machine.observe(cursor, "talk_to")
        assert calls == [(None, cursor, "talk_to")]

    def test_transitions_forwarded_to_run_log(self):
        run_log = RunLog()
        machine = DialogueStateMachine(run_log=run_log)
        machine.observe(DialogueCursor("shop", "start"), "talk_to")
        transitions = run_log.get_transitions()
        assert len(transitions) == 1
        assert transitions[0].from_state == "idle"
        assert transitions[0].trigger == "talk_to"

    def test_state_info(self, machine):
        machine.observe(DialogueCursor("shop", "start"), "talk_to")
        info = machine.get_state_info()
        assert info["current_state"] == "in_dialogue"
        assert info["node_id"] == "start"
        assert info["transitions"] == 1
