"""Effect kinds and the processor that applies them."""

from narrative_engine.effects.types import (
    EFFECT_CLASSES,
    AddCharacterStatEffect,
    AddItemEffect,
    AddJournalEntryEffect,
    AddRelationshipEffect,
    AddToPartyEffect,
    AddVariableEffect,
    AdvanceTimeEffect,
    ClearFlagEffect,
    Effect,
    EffectType,
    EndDialogueEffect,
    GoToLocationEffect,
    MoveItemEffect,
    NotifyEffect,
    PlayMusicEffect,
    PlaySoundEffect,
    PlayVideoEffect,
    RemoveFromPartyEffect,
    RemoveItemEffect,
    RollEffect,
    SetCharacterLocationEffect,
    SetCharacterStatEffect,
    SetFlagEffect,
    SetMapEnabledEffect,
    SetQuestStageEffect,
    SetRelationshipEffect,
    SetVariableEffect,
    ShowInterludeEffect,
    StartDialogueEffect,
    effect_from_dict,
)
from narrative_engine.effects.processor import (
    EffectProcessor,
    apply_effect,
    apply_effects,
)

__all__ = [
    "EFFECT_CLASSES",
    "AddCharacterStatEffect",
    "AddItemEffect",
    "AddJournalEntryEffect",
    "AddRelationshipEffect",
    "AddToPartyEffect",
    "AddVariableEffect",
    "AdvanceTimeEffect",
    "ClearFlagEffect",
    "Effect",
    "EffectProcessor",
    "EffectType",
    "EndDialogueEffect",
    "GoToLocationEffect",
    "MoveItemEffect",
    "NotifyEffect",
    "PlayMusicEffect",
    "PlaySoundEffect",
    "PlayVideoEffect",
    "RemoveFromPartyEffect",
    "RemoveItemEffect",
    "RollEffect",
    "SetCharacterLocationEffect",
    "SetCharacterStatEffect",
    "SetFlagEffect",
    "SetMapEnabledEffect",
    "SetQuestStageEffect",
    "SetRelationshipEffect",
    "SetVariableEffect",
    "ShowInterludeEffect",
    "StartDialogueEffect",
    "apply_effect",
    "apply_effects",
    "effect_from_dict",
]
