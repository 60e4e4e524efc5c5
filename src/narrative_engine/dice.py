"""
Seedable randomization for roll effects and roll conditions.

All random draws go through a DiceRoller instance so a session can be
seeded, logged and replayed. Each engine owns its own roller; nothing here
touches the module-level random state.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class DiceResult:
    """Result of a single draw."""
    notation: str
    rolls: list[int]
    total: int
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.notation}: {self.rolls} = {self.total}"


class DiceRoller:
    """
    Randomization interface for a single session.

    Args:
        seed: Optional seed for reproducible draws
        on_roll: Optional callback invoked with every DiceResult
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        on_roll: Optional[Callable[[DiceResult], None]] = None,
    ):
        self._seed = seed
        self._rng = random.Random(seed)
        self._roll_log: list[DiceResult] = []
        self.on_roll = on_roll

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def set_seed(self, seed: int) -> None:
        """Reseed for reproducibility."""
        self._seed = seed
        self._rng.seed(seed)

    def randint(self, low: int, high: int, reason: str = "") -> int:
        """
        Draw an integer in [low, high], both inclusive.

        Bounds given in reverse order are swapped.
        """
        low, high = int(low), int(high)
        if low > high:
            low, high = high, low
        value = self._draw(low, high)
        self._record(DiceResult(
            notation=f"{low}..{high}",
            rolls=[value],
            total=value,
            reason=reason,
        ))
        return value

    def get_roll_log(self) -> list[DiceResult]:
        """Get the complete roll log for the session."""
        return self._roll_log.copy()

    def clear_roll_log(self) -> None:
        """Clear the roll log."""
        self._roll_log = []

    def _draw(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def _record(self, result: DiceResult) -> None:
        self._roll_log.append(result)
        logger.debug(f"Rolled {result} ({result.reason})")
        if self.on_roll is not None:
            self.on_roll(result)
