"""Session state: the GameState record, saved data and the dialogue phase machine."""

from narrative_engine.game_state.state import (
    INVENTORY_LOCATION,
    CharacterState,
    DialogueCursor,
    GameState,
    GameTime,
    PlayerNote,
)
from narrative_engine.game_state.save_data import (
    SUPPORTED_SAVE_VERSIONS,
    SaveData,
    SaveDataError,
)
from narrative_engine.game_state.state_machine import (
    VALID_TRANSITIONS,
    DialoguePhase,
    DialogueStateMachine,
    InvalidTransitionError,
    StateTransition,
    TransitionLog,
)

__all__ = [
    "INVENTORY_LOCATION",
    "SUPPORTED_SAVE_VERSIONS",
    "VALID_TRANSITIONS",
    "CharacterState",
    "DialogueCursor",
    "DialoguePhase",
    "DialogueStateMachine",
    "GameState",
    "GameTime",
    "InvalidTransitionError",
    "PlayerNote",
    "SaveData",
    "SaveDataError",
    "StateTransition",
    "TransitionLog",
]
