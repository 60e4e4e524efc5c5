"""
Narrative Engine.

A scripting engine for narrative games: a dialogue DSL compiled into
dialogue graphs, pure condition and effect interpreters, a session
controller that walks the graphs over one immutable game state, and a
projector that turns state and content into render-ready snapshots.
"""

from narrative_engine.config import EngineConfig, setup_logging
from narrative_engine.data_models import ContentError, ContentRegistry, GameConfig
from narrative_engine.dice import DiceResult, DiceRoller
from narrative_engine.dsl import DialogueSyntaxError, parse_condition, parse_dialogue, parse_effect
from narrative_engine.engine import DebugConsole, Engine
from narrative_engine.game_state import GameState, GameTime, SaveData, SaveDataError
from narrative_engine.observability import ReplayDiceRoller, RunLog
from narrative_engine.snapshot import Snapshot, build_snapshot

__version__ = "0.1.0"

__all__ = [
    "ContentError",
    "ContentRegistry",
    "DebugConsole",
    "DiceResult",
    "DiceRoller",
    "DialogueSyntaxError",
    "Engine",
    "EngineConfig",
    "GameConfig",
    "GameState",
    "GameTime",
    "ReplayDiceRoller",
    "RunLog",
    "SaveData",
    "SaveDataError",
    "Snapshot",
    "build_snapshot",
    "parse_condition",
    "parse_dialogue",
    "parse_effect",
    "setup_logging",
]
