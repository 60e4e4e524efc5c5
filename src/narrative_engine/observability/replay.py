"""
Replay support for deterministic sessions.

ReplayDiceRoller stands in for a session's DiceRoller and hands back the
draw totals recorded in a run log, in order. Once the recording runs out
it falls back to live draws and counts the overruns.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from narrative_engine.dice import DiceResult, DiceRoller

logger = logging.getLogger(__name__)


class ReplayMode(str, Enum):
    """Replay mode settings."""

    DISABLED = "disabled"  # Live draws
    REPLAYING = "replaying"  # Recorded draws from the stream


class ReplayDiceRoller(DiceRoller):
    """
    DiceRoller that replays recorded draw totals.

    Args:
        roll_stream: Draw totals in the order they were made
        seed: Seed for live draws after the stream is exhausted
        on_roll: Optional callback invoked with every DiceResult
    """

    def __init__(
        self,
        roll_stream: list[int],
        seed: Optional[int] = None,
        on_roll: Optional[Callable[[DiceResult], None]] = None,
    ):
        super().__init__(seed=seed, on_roll=on_roll)
        self.roll_stream = list(roll_stream)
        self.mode = ReplayMode.REPLAYING
        self._position = 0
        self._overruns = 0

    @classmethod
    def from_run_log(cls, log_data: dict[str, Any]) -> "ReplayDiceRoller":
        """
        Create a replaying roller from RunLog.to_dict() output.

        Args:
            log_data: Serialized run log

        Returns:
            ReplayDiceRoller positioned at the first recorded draw
        """
        stream = [
            event.get("total", 0)
            for event in log_data.get("events", [])
            if event.get("event_type") == "roll"
        ]
        return cls(stream, seed=log_data.get("seed"))

    def _draw(self, low: int, high: int) -> int:
        if self.mode != ReplayMode.REPLAYING:
            return super()._draw(low, high)

        if self._position >= len(self.roll_stream):
            self._overruns += 1
            logger.warning(
                f"Replay overrun #{self._overruns}: no more recorded rolls at position {self._position}"
            )
            return super()._draw(low, high)

        value = self.roll_stream[self._position]
        self._position += 1
        return value

    def stop_replay(self) -> None:
        """Switch to live draws."""
        self.mode = ReplayMode.DISABLED
        logger.info(f"Replay stopped at position {self._position}/{len(self.roll_stream)}")

    def get_position(self) -> int:
        return self._position

    def get_remaining_rolls(self) -> int:
        return max(0, len(self.roll_stream) - self._position)

    def get_overrun_count(self) -> int:
        return self._overruns

    def __repr__(self) -> str:
        return (
            f"ReplayDiceRoller(mode={self.mode.value}, "
            f"position={self._position}/{len(self.roll_stream)})"
        )
