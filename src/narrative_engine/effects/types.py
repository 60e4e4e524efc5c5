"""
Effect types.

An effect is a named, parameterized state transformation. Each kind is a
frozen dataclass tagged with an EffectType whose value is the kind name
used in dictionary form (e.g. "setFlag", "addVariable").
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

from narrative_engine.conditions.types import Number, Scalar, check_field_value


class EffectType(str, Enum):
    """Effect kinds."""

    # Flags and variables
    SET_FLAG = "setFlag"
    CLEAR_FLAG = "clearFlag"
    SET_VARIABLE = "setVariable"
    ADD_VARIABLE = "addVariable"

    # Items
    ADD_ITEM = "addItem"
    REMOVE_ITEM = "removeItem"
    MOVE_ITEM = "moveItem"

    # World
    GO_TO_LOCATION = "goToLocation"
    ADVANCE_TIME = "advanceTime"
    SET_QUEST_STAGE = "setQuestStage"
    ADD_JOURNAL_ENTRY = "addJournalEntry"
    SET_MAP_ENABLED = "setMapEnabled"

    # Dialogue
    START_DIALOGUE = "startDialogue"
    END_DIALOGUE = "endDialogue"

    # Characters
    SET_CHARACTER_LOCATION = "setCharacterLocation"
    ADD_TO_PARTY = "addToParty"
    REMOVE_FROM_PARTY = "removeFromParty"
    SET_RELATIONSHIP = "setRelationship"
    ADD_RELATIONSHIP = "addRelationship"
    SET_CHARACTER_STAT = "setCharacterStat"
    ADD_CHARACTER_STAT = "addCharacterStat"

    # Presentation cues
    PLAY_MUSIC = "playMusic"
    PLAY_SOUND = "playSound"
    NOTIFY = "notify"
    PLAY_VIDEO = "playVideo"
    SHOW_INTERLUDE = "showInterlude"

    # Randomness
    ROLL = "roll"


@dataclass(frozen=True)
class Effect:
    """Base class for all effect kinds."""

    effect_type: ClassVar[EffectType]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"type": self.effect_type.value}
        for f in fields(self):
            data[f.name] = getattr(self, f.name)
        return data


@dataclass(frozen=True)
class SetFlagEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_FLAG
    flag: str


@dataclass(frozen=True)
class ClearFlagEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.CLEAR_FLAG
    flag: str


@dataclass(frozen=True)
class SetVariableEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_VARIABLE
    variable: str
    value: Scalar


@dataclass(frozen=True)
class AddVariableEffect(Effect):
    """Add to a numeric variable; absent or non-numeric values start from the amount."""
    effect_type: ClassVar[EffectType] = EffectType.ADD_VARIABLE
    variable: str
    value: Number


@dataclass(frozen=True)
class AddItemEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADD_ITEM
    item_id: str


@dataclass(frozen=True)
class RemoveItemEffect(Effect):
    """Drop from inventory; the item's recorded location is left alone."""
    effect_type: ClassVar[EffectType] = EffectType.REMOVE_ITEM
    item_id: str


@dataclass(frozen=True)
class MoveItemEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.MOVE_ITEM
    item_id: str
    location_id: str


@dataclass(frozen=True)
class GoToLocationEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.GO_TO_LOCATION
    location_id: str


@dataclass(frozen=True)
class AdvanceTimeEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADVANCE_TIME
    hours: Number


@dataclass(frozen=True)
class SetQuestStageEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_QUEST_STAGE
    quest_id: str
    stage_id: str


@dataclass(frozen=True)
class AddJournalEntryEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADD_JOURNAL_ENTRY
    entry_id: str


@dataclass(frozen=True)
class SetMapEnabledEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_MAP_ENABLED
    enabled: bool


@dataclass(frozen=True)
class StartDialogueEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.START_DIALOGUE
    dialogue_id: str


@dataclass(frozen=True)
class EndDialogueEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.END_DIALOGUE


@dataclass(frozen=True)
class SetCharacterLocationEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_CHARACTER_LOCATION
    character_id: str
    location_id: str


@dataclass(frozen=True)
class AddToPartyEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADD_TO_PARTY
    character_id: str


@dataclass(frozen=True)
class RemoveFromPartyEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.REMOVE_FROM_PARTY
    character_id: str


@dataclass(frozen=True)
class SetRelationshipEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_RELATIONSHIP
    character_id: str
    value: Number


@dataclass(frozen=True)
class AddRelationshipEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADD_RELATIONSHIP
    character_id: str
    value: Number


@dataclass(frozen=True)
class SetCharacterStatEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SET_CHARACTER_STAT
    character_id: str
    stat: str
    value: Scalar


@dataclass(frozen=True)
class AddCharacterStatEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.ADD_CHARACTER_STAT
    character_id: str
    stat: str
    value: Number


@dataclass(frozen=True)
class PlayMusicEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.PLAY_MUSIC
    track: str


@dataclass(frozen=True)
class PlaySoundEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.PLAY_SOUND
    sound: str


@dataclass(frozen=True)
class NotifyEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.NOTIFY
    message: str


@dataclass(frozen=True)
class PlayVideoEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.PLAY_VIDEO
    file: str


@dataclass(frozen=True)
class ShowInterludeEffect(Effect):
    effect_type: ClassVar[EffectType] = EffectType.SHOW_INTERLUDE
    interlude_id: str


@dataclass(frozen=True)
class RollEffect(Effect):
    """Store a random integer in [minimum, maximum] into a variable."""
    effect_type: ClassVar[EffectType] = EffectType.ROLL
    variable: str
    minimum: int
    maximum: int


EFFECT_CLASSES: dict[EffectType, type[Effect]] = {
    cls.effect_type: cls
    for cls in (
        SetFlagEffect,
        ClearFlagEffect,
        SetVariableEffect,
        AddVariableEffect,
        AddItemEffect,
        RemoveItemEffect,
        MoveItemEffect,
        GoToLocationEffect,
        AdvanceTimeEffect,
        SetQuestStageEffect,
        AddJournalEntryEffect,
        SetMapEnabledEffect,
        StartDialogueEffect,
        EndDialogueEffect,
        SetCharacterLocationEffect,
        AddToPartyEffect,
        RemoveFromPartyEffect,
        SetRelationshipEffect,
        AddRelationshipEffect,
        SetCharacterStatEffect,
        AddCharacterStatEffect,
        PlayMusicEffect,
        PlaySoundEffect,
        NotifyEffect,
        PlayVideoEffect,
        ShowInterludeEffect,
        RollEffect,
    )
}

_unmapped = set(EffectType) - set(EFFECT_CLASSES)
if _unmapped:
    raise RuntimeError(f"Effect kinds without a class: {sorted(_unmapped)}")


def effect_from_dict(data: dict[str, Any]) -> Effect:
    """
    Create an effect from its dictionary form.

    Raises:
        ValueError: If the tag is unknown or a field is missing or mistyped
    """
    try:
        effect_type = EffectType(data.get("type"))
    except ValueError:
        raise ValueError(f"Unknown effect type: {data.get('type')!r}") from None

    cls = EFFECT_CLASSES[effect_type]
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            raise ValueError(f"Effect {effect_type.value} is missing field '{f.name}'")
        kwargs[f.name] = check_field_value(effect_type.value, f.name, f.type, data[f.name])
    return cls(**kwargs)
