"""Session controller and its debug console."""

from narrative_engine.engine.devtools import DebugConsole
from narrative_engine.engine.engine import Engine

__all__ = ["DebugConsole", "Engine"]
