"""
Saved session records.

SaveData wraps a GameState with a format version and an ISO-8601
timestamp. Where the record is stored is up to the caller; this module
only converts to and from dictionaries and JSON text.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from narrative_engine.game_state.state import GameState

logger = logging.getLogger(__name__)

SUPPORTED_SAVE_VERSIONS = ("1.0",)


class SaveDataError(ValueError):
    """Raised when saved data is structurally malformed."""
    pass


@dataclass(frozen=True)
class SaveData:
    """A saved session."""
    version: str
    state: GameState
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "state": self.state.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SaveData":
        """
        Deserialize from dictionary.

        Raises:
            SaveDataError: If the record or its state is malformed
        """
        if not isinstance(data, dict):
            raise SaveDataError(f"Save data must be a mapping, got {type(data).__name__}")
        if not isinstance(data.get("state"), dict):
            raise SaveDataError("Save data has no state record")

        version = str(data.get("version", ""))
        if version not in SUPPORTED_SAVE_VERSIONS:
            logger.warning(f"Loading save with unknown version '{version}'")

        try:
            state = GameState.from_dict(data["state"])
        except (KeyError, TypeError, ValueError) as e:
            raise SaveDataError(f"Malformed state record: {e}") from e

        return cls(
            version=version,
            state=state,
            timestamp=data.get("timestamp") or datetime.now().isoformat(),
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "SaveData":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SaveDataError(f"Save data is not valid JSON: {e}") from e
        return cls.from_dict(data)
