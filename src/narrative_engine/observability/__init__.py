"""Session observability: run log and replay."""

from narrative_engine.observability.replay import ReplayDiceRoller, ReplayMode
from narrative_engine.observability.run_log import (
    ActionEvent,
    EventType,
    LogEvent,
    RollEvent,
    RunLog,
    TimeStepEvent,
    TransitionEvent,
)

__all__ = [
    "ActionEvent",
    "EventType",
    "LogEvent",
    "ReplayDiceRoller",
    "ReplayMode",
    "RollEvent",
    "RunLog",
    "TimeStepEvent",
    "TransitionEvent",
]
