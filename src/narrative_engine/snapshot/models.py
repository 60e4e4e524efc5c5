"""
Snapshot view records.

A Snapshot is the only thing a renderer consumes: every localization key
is resolved, every choice condition already evaluated. All records are
frozen; sequences are tuples and mappings are read-only proxies over
copies, so a view cannot be used to reach back into session state.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union


def _plain(value: Any) -> Any:
    """Recursively convert view records into JSON-friendly values."""
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (tuple, list)):
        return [_plain(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    return value


def frozen_mapping(data: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
    """Read-only copy of a mapping."""
    return MappingProxyType(dict(data or {}))


class _View:
    def to_dict(self) -> dict[str, Any]:
        """Convert to plain dictionaries and lists."""
        return _plain(self)


@dataclass(frozen=True)
class SnapshotLocation(_View):
    id: str
    name: str
    description: str
    banner: str


@dataclass(frozen=True)
class SnapshotCharacter(_View):
    id: str
    name: str
    biography: str
    portrait: str
    location: str
    in_party: bool
    relationship: Union[int, float]
    stats: Mapping[str, Any] = field(default_factory=frozen_mapping)


@dataclass(frozen=True)
class SnapshotItem(_View):
    id: str
    name: str
    description: str
    icon: str
    image: str
    stats: Mapping[str, Any] = field(default_factory=frozen_mapping)


@dataclass(frozen=True)
class SnapshotChoice(_View):
    id: str
    text: str


@dataclass(frozen=True)
class SnapshotDialogue(_View):
    """The current dialogue line; speaker is None for narration."""
    speaker: Optional[str]
    speaker_name: str
    text: str
    portrait: Optional[str] = None
    voice: Optional[str] = None


@dataclass(frozen=True)
class SnapshotQuest(_View):
    id: str
    name: str
    description: str
    current_stage: str
    current_stage_description: str


@dataclass(frozen=True)
class SnapshotJournalEntry(_View):
    id: str
    title: str
    text: str
    category: str


@dataclass(frozen=True)
class SnapshotNote(_View):
    id: str
    title: str
    text: str


@dataclass(frozen=True)
class SnapshotMapLocation(_View):
    id: str
    name: str
    x: float
    y: float
    is_current: bool


@dataclass(frozen=True)
class SnapshotMap(_View):
    id: str
    name: str
    image: str
    scale: float
    locations: tuple[SnapshotMapLocation, ...] = ()


@dataclass(frozen=True)
class SnapshotInterlude(_View):
    id: str
    background: str
    text: str
    banner: Optional[str] = None
    music: Optional[str] = None
    voice: Optional[str] = None
    sounds: tuple[str, ...] = ()
    scroll: bool = True
    scroll_speed: int = 30


@dataclass(frozen=True)
class SnapshotTime(_View):
    day: int
    hour: int


@dataclass(frozen=True)
class Snapshot(_View):
    """Immutable, fully resolved view of one moment of a session."""
    location: SnapshotLocation
    characters_here: tuple[SnapshotCharacter, ...]
    items_here: tuple[SnapshotItem, ...]
    choices: tuple[SnapshotChoice, ...]
    dialogue: Optional[SnapshotDialogue]
    party: tuple[SnapshotCharacter, ...]
    inventory: tuple[SnapshotItem, ...]
    quests: tuple[SnapshotQuest, ...]
    journal: tuple[SnapshotJournalEntry, ...]
    notes: tuple[SnapshotNote, ...]
    variables: Mapping[str, Any]
    time: SnapshotTime
    map: Optional[SnapshotMap]
    music: str
    ambient: str
    notifications: tuple[str, ...]
    pending_sounds: tuple[str, ...]
    pending_video: Optional[str]
    pending_interlude: Optional[SnapshotInterlude]
    locale: str
