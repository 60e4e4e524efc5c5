"""
Game state record.

GameState is the single authoritative record of a session. It is a frozen
dataclass: effects and engine actions never mutate it, they build a new
one with dataclasses.replace() and fresh containers. Collections that are
ordered (inventory, journal, notes, transient cues) are tuples; keyed
collections are plain dicts that are copied, never written to.

The four transient fields (notifications, pending_sounds, pending_video,
pending_interlude) are filled by effects and cleared by the engine right
after each view is produced.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

Scalar = Union[int, float, str]

INVENTORY_LOCATION = "inventory"


@dataclass(frozen=True)
class GameTime:
    """In-game clock: day counter and hour of day (0-23)."""
    day: int = 1
    hour: int = 0

    def advance(self, hours: Union[int, float]) -> "GameTime":
        """Return the time after the given hours, rolling over into days."""
        total = self.hour + hours
        days, hour = divmod(total, 24)
        return GameTime(day=int(self.day + days), hour=_whole(hour))

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.day, "hour": self.hour}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameTime":
        return cls(day=data.get("day", 1), hour=data.get("hour", 0))

    def __str__(self) -> str:
        return f"Day {self.day}, {self.hour}:00"


def _whole(value: Union[int, float]) -> Union[int, float]:
    """Collapse integral floats back to int."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class CharacterState:
    """Mutable-by-replacement per-character state."""
    location: str = ""
    in_party: bool = False
    relationship: Union[int, float] = 0
    stats: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "in_party": self.in_party,
            "relationship": self.relationship,
            "stats": dict(self.stats),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CharacterState":
        return cls(
            location=data.get("location", ""),
            in_party=data.get("in_party", False),
            relationship=data.get("relationship", 0),
            stats=dict(data.get("stats", {})),
        )


@dataclass(frozen=True)
class DialogueCursor:
    """
    Position in a dialogue.

    An empty node_id means the dialogue was started by an effect and still
    has to be entered at its start node.
    """
    dialogue_id: str
    node_id: str = ""

    @property
    def needs_start(self) -> bool:
        return self.node_id == ""

    def to_dict(self) -> dict[str, Any]:
        return {"dialogue_id": self.dialogue_id, "node_id": self.node_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DialogueCursor":
        return cls(dialogue_id=data["dialogue_id"], node_id=data.get("node_id", ""))


@dataclass(frozen=True)
class PlayerNote:
    """A free-text note written by the player."""
    id: str
    title: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerNote":
        return cls(id=data["id"], title=data.get("title", ""), text=data.get("text", ""))


@dataclass(frozen=True)
class GameState:
    """Complete state of one session."""
    current_location: str
    current_time: GameTime = field(default_factory=GameTime)
    flags: dict[str, bool] = field(default_factory=dict)
    variables: dict[str, Scalar] = field(default_factory=dict)
    inventory: tuple[str, ...] = ()
    quest_progress: dict[str, str] = field(default_factory=dict)
    unlocked_journal_entries: tuple[str, ...] = ()
    player_notes: tuple[PlayerNote, ...] = ()
    dialogue_state: Optional[DialogueCursor] = None
    character_state: dict[str, CharacterState] = field(default_factory=dict)
    item_locations: dict[str, str] = field(default_factory=dict)
    map_enabled: bool = True
    notifications: tuple[str, ...] = ()
    pending_sounds: tuple[str, ...] = ()
    pending_video: Optional[str] = None
    pending_interlude: Optional[str] = None
    current_locale: str = "en"

    @property
    def in_dialogue(self) -> bool:
        return self.dialogue_state is not None

    def clear_transients(self) -> "GameState":
        """Return a copy with all four transient fields emptied."""
        return replace(
            self,
            notifications=(),
            pending_sounds=(),
            pending_video=None,
            pending_interlude=None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "current_location": self.current_location,
            "current_time": self.current_time.to_dict(),
            "flags": dict(self.flags),
            "variables": dict(self.variables),
            "inventory": list(self.inventory),
            "quest_progress": dict(self.quest_progress),
            "unlocked_journal_entries": list(self.unlocked_journal_entries),
            "player_notes": [note.to_dict() for note in self.player_notes],
            "dialogue_state": (
                self.dialogue_state.to_dict() if self.dialogue_state else None
            ),
            "character_state": {
                cid: cs.to_dict() for cid, cs in self.character_state.items()
            },
            "item_locations": dict(self.item_locations),
            "map_enabled": self.map_enabled,
            "notifications": list(self.notifications),
            "pending_sounds": list(self.pending_sounds),
            "pending_video": self.pending_video,
            "pending_interlude": self.pending_interlude,
            "current_locale": self.current_locale,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """Create from dictionary."""
        dialogue = data.get("dialogue_state")
        return cls(
            current_location=data["current_location"],
            current_time=GameTime.from_dict(data.get("current_time", {})),
            flags=dict(data.get("flags", {})),
            variables=dict(data.get("variables", {})),
            inventory=tuple(data.get("inventory", [])),
            quest_progress=dict(data.get("quest_progress", {})),
            unlocked_journal_entries=tuple(data.get("unlocked_journal_entries", [])),
            player_notes=tuple(
                PlayerNote.from_dict(n) for n in data.get("player_notes", [])
            ),
            dialogue_state=DialogueCursor.from_dict(dialogue) if dialogue else None,
            character_state={
                cid: CharacterState.from_dict(cs)
                for cid, cs in data.get("character_state", {}).items()
            },
            item_locations=dict(data.get("item_locations", {})),
            map_enabled=data.get("map_enabled", True),
            notifications=tuple(data.get("notifications", [])),
            pending_sounds=tuple(data.get("pending_sounds", [])),
            pending_video=data.get("pending_video"),
            pending_interlude=data.get("pending_interlude"),
            current_locale=data.get("current_locale", "en"),
        )
