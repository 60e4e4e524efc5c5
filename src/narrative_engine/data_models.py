"""
Core data models for narrative game content.

This module contains the static content entities that make up a game
(locations, characters, items, maps, quests, journal entries, interludes
and compiled dialogues) and the read-only ContentRegistry that holds them.

Content is built once, before any session, and never mutated by the
engine. Entities are frozen dataclasses with tuple sequences.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from narrative_engine.conditions.types import Condition, condition_from_dict
from narrative_engine.effects.types import Effect, effect_from_dict
from narrative_engine.game_state.state import GameTime, Scalar

logger = logging.getLogger(__name__)


class ContentError(ValueError):
    """Raised when a content record is malformed."""
    pass


def _require(data: dict[str, Any], key: str, kind: str) -> Any:
    if key not in data or data[key] in (None, ""):
        raise ContentError(f"{kind} record is missing '{key}': {data!r}")
    return data[key]


def _conditions(raw: Any) -> tuple[Condition, ...]:
    """Build conditions from dictionaries or expression strings."""
    from narrative_engine.dsl.expressions import parse_condition

    result = []
    for entry in raw or ():
        if isinstance(entry, Condition):
            result.append(entry)
        elif isinstance(entry, str):
            result.append(parse_condition(entry))
        else:
            try:
                result.append(condition_from_dict(entry))
            except ValueError as e:
                raise ContentError(str(e)) from e
    return tuple(result)


def _effects(raw: Any) -> tuple[Effect, ...]:
    """Build effects from dictionaries or expression strings."""
    from narrative_engine.dsl.expressions import parse_effect

    result = []
    for entry in raw or ():
        if isinstance(entry, Effect):
            result.append(entry)
        elif isinstance(entry, str):
            result.append(parse_effect(entry))
        else:
            try:
                result.append(effect_from_dict(entry))
            except ValueError as e:
                raise ContentError(str(e)) from e
    return tuple(result)


# =============================================================================
# WORLD ENTITIES
# =============================================================================


@dataclass(frozen=True)
class Location:
    """A place the player can be."""
    id: str
    name: str
    description: str = ""
    banner: str = ""
    music: str = ""
    ambient: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        return cls(
            id=_require(data, "id", "Location"),
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            banner=data.get("banner", ""),
            music=data.get("music", ""),
            ambient=data.get("ambient", ""),
        )


@dataclass(frozen=True)
class Character:
    """A character the player can meet and talk to."""
    id: str
    name: str
    biography: str = ""
    portrait: str = ""
    location: str = ""
    dialogue: Optional[str] = None
    stats: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Character":
        return cls(
            id=_require(data, "id", "Character"),
            name=data.get("name", data["id"]),
            biography=data.get("biography", ""),
            portrait=data.get("portrait", ""),
            location=data.get("location", ""),
            dialogue=data.get("dialogue") or None,
            stats=dict(data.get("stats", {})),
        )


@dataclass(frozen=True)
class Item:
    """An item that lives at a location or in the inventory."""
    id: str
    name: str
    description: str = ""
    icon: str = ""
    image: str = ""
    location: str = ""
    stats: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        return cls(
            id=_require(data, "id", "Item"),
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            icon=data.get("icon", ""),
            image=data.get("image", ""),
            location=data.get("location", ""),
            stats=dict(data.get("stats", {})),
        )


@dataclass(frozen=True)
class MapLocation:
    """A location marker on a map."""
    id: str
    x: float
    y: float


@dataclass(frozen=True)
class GameMap:
    """
    A travel map.

    scale converts straight-line distance between markers into hours.
    """
    id: str
    name: str
    image: str = ""
    scale: float = 1.0
    locations: tuple[MapLocation, ...] = ()

    def find_location(self, location_id: str) -> Optional[MapLocation]:
        for marker in self.locations:
            if marker.id == location_id:
                return marker
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameMap":
        return cls(
            id=_require(data, "id", "Map"),
            name=data.get("name", data["id"]),
            image=data.get("image", ""),
            scale=data.get("scale", 1.0),
            locations=tuple(
                MapLocation(id=_require(m, "id", "Map location"), x=m.get("x", 0), y=m.get("y", 0))
                for m in data.get("locations", [])
            ),
        )


@dataclass(frozen=True)
class QuestStage:
    id: str
    description: str = ""


@dataclass(frozen=True)
class Quest:
    """A quest with ordered stages."""
    id: str
    name: str
    description: str = ""
    stages: tuple[QuestStage, ...] = ()

    def get_stage(self, stage_id: str) -> Optional[QuestStage]:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quest":
        return cls(
            id=_require(data, "id", "Quest"),
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            stages=tuple(
                QuestStage(id=_require(s, "id", "Quest stage"), description=s.get("description", ""))
                for s in data.get("stages", [])
            ),
        )


@dataclass(frozen=True)
class JournalEntry:
    id: str
    title: str
    text: str = ""
    category: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        return cls(
            id=_require(data, "id", "Journal entry"),
            title=data.get("title", data["id"]),
            text=data.get("text", ""),
            category=data.get("category", ""),
        )


@dataclass(frozen=True)
class Interlude:
    """
    A full-screen narrative interlude.

    Optional presentation fields left as None fall back to engine defaults
    when the interlude is projected into a view.
    """
    id: str
    background: str
    text: str
    banner: Optional[str] = None
    music: Optional[str] = None
    voice: Optional[str] = None
    sounds: tuple[str, ...] = ()
    scroll: Optional[bool] = None
    scroll_speed: Optional[int] = None
    trigger_location: Optional[str] = None
    trigger_conditions: tuple[Condition, ...] = ()
    effects: tuple[Effect, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Interlude":
        return cls(
            id=_require(data, "id", "Interlude"),
            background=data.get("background", ""),
            text=data.get("text", ""),
            banner=data.get("banner"),
            music=data.get("music"),
            voice=data.get("voice"),
            sounds=tuple(data.get("sounds", [])),
            scroll=data.get("scroll"),
            scroll_speed=data.get("scroll_speed"),
            trigger_location=data.get("trigger_location"),
            trigger_conditions=_conditions(data.get("trigger_conditions")),
            effects=_effects(data.get("effects")),
        )


# =============================================================================
# DIALOGUE GRAPH
# =============================================================================


@dataclass(frozen=True)
class Choice:
    """A player-selectable option. An empty next ends the dialogue."""
    id: str
    text: str
    next: str = ""
    conditions: tuple[Condition, ...] = ()
    effects: tuple[Effect, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "next": self.next,
            "conditions": [c.to_dict() for c in self.conditions],
            "effects": [e.to_dict() for e in self.effects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Choice":
        return cls(
            id=_require(data, "id", "Choice"),
            text=data.get("text", ""),
            next=data.get("next") or "",
            conditions=_conditions(data.get("conditions")),
            effects=_effects(data.get("effects")),
        )


@dataclass(frozen=True)
class ConditionalBranch:
    """IF-block routing: go to next when condition passes."""
    condition: Condition
    next: str

    def to_dict(self) -> dict[str, Any]:
        return {"condition": self.condition.to_dict(), "next": self.next}


@dataclass(frozen=True)
class DialogueNode:
    """
    One point in a conversation.

    A node without choices auto-advances: conditional_next is tried top to
    bottom, then next, and with neither the dialogue ends.
    """
    id: str
    speaker: Optional[str]
    text: str
    voice: Optional[str] = None
    portrait: Optional[str] = None
    choices: tuple[Choice, ...] = ()
    effects: tuple[Effect, ...] = ()
    conditional_next: tuple[ConditionalBranch, ...] = ()
    next: Optional[str] = None

    def get_choice(self, choice_id: str) -> Optional[Choice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "speaker": self.speaker,
            "text": self.text,
            "voice": self.voice,
            "portrait": self.portrait,
            "choices": [c.to_dict() for c in self.choices],
            "effects": [e.to_dict() for e in self.effects],
            "conditional_next": [b.to_dict() for b in self.conditional_next],
            "next": self.next,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DialogueNode":
        branches = []
        for branch in data.get("conditional_next", []):
            condition = _conditions([branch["condition"]])[0]
            branches.append(ConditionalBranch(condition=condition, next=branch["next"]))
        return cls(
            id=_require(data, "id", "Dialogue node"),
            speaker=data.get("speaker"),
            text=data.get("text", ""),
            voice=data.get("voice"),
            portrait=data.get("portrait"),
            choices=tuple(Choice.from_dict(c) for c in data.get("choices", [])),
            effects=_effects(data.get("effects")),
            conditional_next=tuple(branches),
            next=data.get("next"),
        )


@dataclass(frozen=True)
class Dialogue:
    """A compiled dialogue graph."""
    id: str
    start_node: str
    nodes: tuple[DialogueNode, ...] = ()
    trigger_location: Optional[str] = None
    conditions: tuple[Condition, ...] = ()

    def get_node(self, node_id: str) -> Optional[DialogueNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_node": self.start_node,
            "nodes": [n.to_dict() for n in self.nodes],
            "trigger_location": self.trigger_location,
            "conditions": [c.to_dict() for c in self.conditions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dialogue":
        nodes = tuple(DialogueNode.from_dict(n) for n in data.get("nodes", []))
        start = data.get("start_node") or (nodes[0].id if nodes else "")
        return cls(
            id=_require(data, "id", "Dialogue"),
            start_node=start,
            nodes=nodes,
            trigger_location=data.get("trigger_location"),
            conditions=_conditions(data.get("conditions")),
        )


# =============================================================================
# GAME CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class GameConfig:
    """Starting conditions for a new session."""
    start_location: str
    start_time: GameTime = field(default_factory=GameTime)
    start_flags: dict[str, bool] = field(default_factory=dict)
    start_variables: dict[str, Scalar] = field(default_factory=dict)
    start_inventory: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameConfig":
        return cls(
            start_location=_require(data, "start_location", "Game config"),
            start_time=GameTime.from_dict(data.get("start_time", {})),
            start_flags=dict(data.get("start_flags", {})),
            start_variables=dict(data.get("start_variables", {})),
            start_inventory=tuple(data.get("start_inventory", [])),
        )


# =============================================================================
# CONTENT REGISTRY
# =============================================================================


@dataclass(frozen=True)
class ContentRegistry:
    """
    Read-only store of all static content.

    Dictionaries keep insertion order; auto-triggered dialogues and
    interludes are matched in that order.
    """
    locations: dict[str, Location] = field(default_factory=dict)
    characters: dict[str, Character] = field(default_factory=dict)
    items: dict[str, Item] = field(default_factory=dict)
    maps: dict[str, GameMap] = field(default_factory=dict)
    dialogues: dict[str, Dialogue] = field(default_factory=dict)
    quests: dict[str, Quest] = field(default_factory=dict)
    journal_entries: dict[str, JournalEntry] = field(default_factory=dict)
    interludes: dict[str, Interlude] = field(default_factory=dict)
    locales: dict[str, dict[str, str]] = field(default_factory=dict)

    def summary(self) -> dict[str, int]:
        """Entity counts per collection."""
        return {
            "locations": len(self.locations),
            "characters": len(self.characters),
            "items": len(self.items),
            "maps": len(self.maps),
            "dialogues": len(self.dialogues),
            "quests": len(self.quests),
            "journal_entries": len(self.journal_entries),
            "interludes": len(self.interludes),
            "locales": len(self.locales),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentRegistry":
        """
        Build a registry from plain dictionaries.

        Each collection is a list of records (or a mapping of id to record).
        Dialogue records may be dictionaries in compiled form or DSL source
        strings keyed by dialogue id.

        Args:
            data: Dictionary with any of the collection keys

        Returns:
            A populated ContentRegistry

        Raises:
            ContentError: If a record is missing its id or holds a malformed
                condition or effect
            DialogueSyntaxError: If dialogue source fails to compile
        """
        from narrative_engine.dsl.parser import parse_dialogue

        def records(key: str) -> list[tuple[Optional[str], Any]]:
            raw = data.get(key) or []
            if isinstance(raw, dict):
                return list(raw.items())
            return [(None, r) for r in raw]

        def build(key: str, factory) -> dict[str, Any]:
            built = {}
            for key_id, record in records(key):
                if key_id is not None and isinstance(record, dict) and "id" not in record:
                    record = {**record, "id": key_id}
                entity = factory(record)
                built[entity.id] = entity
            return built

        dialogues: dict[str, Dialogue] = {}
        for key_id, record in records("dialogues"):
            if isinstance(record, str):
                if key_id is None:
                    raise ContentError("Dialogue source must be keyed by dialogue id")
                dialogue = parse_dialogue(record, key_id)
            else:
                if key_id is not None and "id" not in record:
                    record = {**record, "id": key_id}
                dialogue = Dialogue.from_dict(record)
            dialogues[dialogue.id] = dialogue

        registry = cls(
            locations=build("locations", Location.from_dict),
            characters=build("characters", Character.from_dict),
            items=build("items", Item.from_dict),
            maps=build("maps", GameMap.from_dict),
            dialogues=dialogues,
            quests=build("quests", Quest.from_dict),
            journal_entries=build("journal_entries", JournalEntry.from_dict),
            interludes=build("interludes", Interlude.from_dict),
            locales={k: dict(v) for k, v in (data.get("locales") or {}).items()},
        )
        logger.info(f"Content registry built: {registry.summary()}")
        return registry
