"""
Dialogue phase state machine.

A session is either IDLE (no dialogue cursor) or IN_DIALOGUE. The engine
reports the cursor after every step through observe(); the machine checks
that any phase change is one the engine is allowed to make, records the
change (and node moves inside a dialogue) as TransitionLog entries, and
forwards them to the run log.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from narrative_engine.game_state.state import DialogueCursor
from narrative_engine.observability.run_log import RunLog


class DialoguePhase(str, Enum):
    """Logical session states."""

    IDLE = "idle"
    IN_DIALOGUE = "in_dialogue"


@dataclass
class StateTransition:
    """A permitted phase change."""

    from_state: DialoguePhase
    to_state: DialoguePhase
    trigger: str
    description: str = ""

    def __hash__(self) -> int:
        return hash((self.from_state, self.to_state, self.trigger))


@dataclass
class TransitionLog:
    """Log entry for a state transition."""
    timestamp: datetime
    from_state: str
    to_state: str
    trigger: str
    context: dict[str, Any] = field(default_factory=dict)


VALID_TRANSITIONS: list[StateTransition] = [
    # Entering a dialogue
    StateTransition(
        DialoguePhase.IDLE, DialoguePhase.IN_DIALOGUE, "new_game",
        "Dialogue triggered at the start location",
    ),
    StateTransition(
        DialoguePhase.IDLE, DialoguePhase.IN_DIALOGUE, "load_game",
        "Restored save was mid-conversation",
    ),
    StateTransition(
        DialoguePhase.IDLE, DialoguePhase.IN_DIALOGUE, "talk_to",
        "Player talked to a character",
    ),
    StateTransition(
        DialoguePhase.IDLE, DialoguePhase.IN_DIALOGUE, "travel",
        "Dialogue triggered at the destination",
    ),
    StateTransition(
        DialoguePhase.IDLE, DialoguePhase.IN_DIALOGUE, "debug",
        "Debug console started a dialogue",
    ),
    # Leaving a dialogue
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "new_game",
        "Fresh session replaced a conversation",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "load_game",
        "Restored save was idle",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "talk_to",
        "New dialogue ended on entry",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "select_choice",
        "Choice or its target ended the dialogue",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "continue_dialogue",
        "Auto-advance found no next node",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "travel",
        "Travel cleared the dialogue",
    ),
    StateTransition(
        DialoguePhase.IN_DIALOGUE, DialoguePhase.IDLE, "debug",
        "Debug console ended a dialogue",
    ),
]


class InvalidTransitionError(Exception):
    """Raised when an invalid phase change is reported."""

    pass


def phase_of(cursor: Optional[DialogueCursor]) -> DialoguePhase:
    return DialoguePhase.IDLE if cursor is None else DialoguePhase.IN_DIALOGUE


class DialogueStateMachine:
    """
    Tracks the dialogue phase of one session.

    Args:
        run_log: Optional run log receiving a TRANSITION event per change
    """

    def __init__(self, run_log: Optional[RunLog] = None):
        self._current_state = DialoguePhase.IDLE
        self._cursor: Optional[DialogueCursor] = None
        self._state_history: list[TransitionLog] = []
        self._post_transition_hooks: list[Callable] = []
        self._run_log = run_log

        self._valid_transitions: set[tuple[DialoguePhase, DialoguePhase, str]] = {
            (t.from_state, t.to_state, t.trigger) for t in VALID_TRANSITIONS
        }

    @property
    def current_state(self) -> DialoguePhase:
        return self._current_state

    @property
    def cursor(self) -> Optional[DialogueCursor]:
        return self._cursor

    @property
    def state_history(self) -> list[TransitionLog]:
        """Get the complete transition history."""
        return self._state_history.copy()

    def can_transition(self, to_state: DialoguePhase, trigger: str) -> bool:
        """Check whether a phase change is permitted for this trigger."""
        if to_state == self._current_state:
            return True
        return (self._current_state, to_state, trigger) in self._valid_transitions

    def register_post_hook(self, hook: Callable) -> None:
        """
        Register a hook called after each recorded transition.

        Args:
            hook: Function called with (old_cursor, new_cursor, trigger)
        """
        self._post_transition_hooks.append(hook)

    def observe(
        self,
        cursor: Optional[DialogueCursor],
        trigger: str,
        context: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Record the cursor after an engine step.

        Args:
            cursor: The session's dialogue cursor after the step
            trigger: The engine action that produced it
            context: Optional context data for the transition

        Returns:
            True if a transition was recorded

        Raises:
            InvalidTransitionError: If the phase change is not permitted
        """
        if cursor == self._cursor:
            return False

        new_state = phase_of(cursor)
        if not self.can_transition(new_state, trigger):
            raise InvalidTransitionError(
                f"Invalid transition: '{trigger}' cannot move from "
                f"'{self._current_state.value}' to '{new_state.value}'"
            )

        old_cursor = self._cursor
        self._log_transition(
            from_state=_describe(old_cursor),
            to_state=_describe(cursor),
            trigger=trigger,
            context=context,
        )
        self._current_state = new_state
        self._cursor = cursor

        for hook in self._post_transition_hooks:
            hook(old_cursor, cursor, trigger)
        return True

    def _log_transition(
        self, from_state: str, to_state: str, trigger: str, context: Optional[dict[str, Any]] = None
    ) -> None:
        log_entry = TransitionLog(
            timestamp=datetime.now(),
            from_state=from_state,
            to_state=to_state,
            trigger=trigger,
            context=context or {},
        )
        self._state_history.append(log_entry)

        if self._run_log is not None:
            self._run_log.log_transition(
                from_state=from_state,
                to_state=to_state,
                trigger=trigger,
                context=context,
            )

    def get_state_info(self) -> dict[str, Any]:
        """Get information about the current phase for display/debugging."""
        return {
            "current_state": self._current_state.value,
            "dialogue_id": self._cursor.dialogue_id if self._cursor else None,
            "node_id": self._cursor.node_id if self._cursor else None,
            "transitions": len(self._state_history),
        }

    def __repr__(self) -> str:
        return f"DialogueStateMachine(state={_describe(self._cursor)})"


def _describe(cursor: Optional[DialogueCursor]) -> str:
    if cursor is None:
        return DialoguePhase.IDLE.value
    return f"{DialoguePhase.IN_DIALOGUE.value}({cursor.dialogue_id}:{cursor.node_id})"
