"""
Effect processing.

EffectProcessor turns (effect, state) into a new state. Each effect type
has a handler method named after the enum member (_apply_set_flag,
_apply_add_variable, ...). Handlers never mutate their input; they return
a new GameState built with dataclasses.replace().

Effects naming unknown characters are no-ops. Effects naming unknown items,
quests or journal entries still record the id, since the state holds no
registry to check against.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional

from narrative_engine.conditions.evaluator import is_number
from narrative_engine.dice import DiceRoller
from narrative_engine.effects.types import (
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
)
from narrative_engine.game_state.state import (
    INVENTORY_LOCATION,
    CharacterState,
    DialogueCursor,
    GameState,
)

logger = logging.getLogger(__name__)


def _handler_name(effect_type: EffectType) -> str:
    return f"_apply_{effect_type.name.lower()}"


class EffectProcessor:
    """
    Applies effects to game state.

    Args:
        dice: Random source for roll effects (a fresh unseeded roller if None)
    """

    def __init__(self, dice: Optional[DiceRoller] = None):
        self._dice = dice or DiceRoller()

    def apply(self, effect: Effect, state: GameState) -> GameState:
        """Apply a single effect and return the new state."""
        handler = getattr(self, _handler_name(effect.effect_type))
        logger.debug(f"Applying effect {effect.effect_type.value}: {effect}")
        return handler(effect, state)

    def apply_all(self, effects: Iterable[Effect], state: GameState) -> GameState:
        """Fold effects left to right over the state, in declared order."""
        for effect in effects:
            state = self.apply(effect, state)
        return state

    # =========================================================================
    # FLAGS AND VARIABLES
    # =========================================================================

    def _apply_set_flag(self, effect: SetFlagEffect, state: GameState) -> GameState:
        return replace(state, flags={**state.flags, effect.flag: True})

    def _apply_clear_flag(self, effect: ClearFlagEffect, state: GameState) -> GameState:
        return replace(state, flags={**state.flags, effect.flag: False})

    def _apply_set_variable(self, effect: SetVariableEffect, state: GameState) -> GameState:
        return replace(state, variables={**state.variables, effect.variable: effect.value})

    def _apply_add_variable(self, effect: AddVariableEffect, state: GameState) -> GameState:
        current = state.variables.get(effect.variable)
        new_value = current + effect.value if is_number(current) else effect.value
        return replace(state, variables={**state.variables, effect.variable: new_value})

    # =========================================================================
    # ITEMS
    # =========================================================================

    def _apply_add_item(self, effect: AddItemEffect, state: GameState) -> GameState:
        if effect.item_id in state.inventory:
            return state
        return replace(
            state,
            inventory=state.inventory + (effect.item_id,),
            item_locations={**state.item_locations, effect.item_id: INVENTORY_LOCATION},
        )

    def _apply_remove_item(self, effect: RemoveItemEffect, state: GameState) -> GameState:
        return replace(
            state,
            inventory=tuple(i for i in state.inventory if i != effect.item_id),
        )

    def _apply_move_item(self, effect: MoveItemEffect, state: GameState) -> GameState:
        return replace(
            state,
            inventory=tuple(i for i in state.inventory if i != effect.item_id),
            item_locations={**state.item_locations, effect.item_id: effect.location_id},
        )

    # =========================================================================
    # WORLD
    # =========================================================================

    def _apply_go_to_location(self, effect: GoToLocationEffect, state: GameState) -> GameState:
        return replace(state, current_location=effect.location_id)

    def _apply_advance_time(self, effect: AdvanceTimeEffect, state: GameState) -> GameState:
        return replace(state, current_time=state.current_time.advance(effect.hours))

    def _apply_set_quest_stage(self, effect: SetQuestStageEffect, state: GameState) -> GameState:
        return replace(
            state,
            quest_progress={**state.quest_progress, effect.quest_id: effect.stage_id},
        )

    def _apply_add_journal_entry(
        self, effect: AddJournalEntryEffect, state: GameState
    ) -> GameState:
        if effect.entry_id in state.unlocked_journal_entries:
            return state
        return replace(
            state,
            unlocked_journal_entries=state.unlocked_journal_entries + (effect.entry_id,),
        )

    def _apply_set_map_enabled(self, effect: SetMapEnabledEffect, state: GameState) -> GameState:
        return replace(state, map_enabled=effect.enabled)

    # =========================================================================
    # DIALOGUE
    # =========================================================================

    def _apply_start_dialogue(self, effect: StartDialogueEffect, state: GameState) -> GameState:
        # Empty node id: the engine enters the dialogue at its start node
        return replace(state, dialogue_state=DialogueCursor(dialogue_id=effect.dialogue_id))

    def _apply_end_dialogue(self, effect: EndDialogueEffect, state: GameState) -> GameState:
        return replace(state, dialogue_state=None)

    # =========================================================================
    # CHARACTERS
    # =========================================================================

    def _update_character(self, state: GameState, character_id: str, **changes) -> GameState:
        character = state.character_state.get(character_id)
        if character is None:
            logger.debug(f"Skipping effect for unknown character '{character_id}'")
            return state
        return replace(
            state,
            character_state={
                **state.character_state,
                character_id: replace(character, **changes),
            },
        )

    def _apply_set_character_location(
        self, effect: SetCharacterLocationEffect, state: GameState
    ) -> GameState:
        return self._update_character(state, effect.character_id, location=effect.location_id)

    def _apply_add_to_party(self, effect: AddToPartyEffect, state: GameState) -> GameState:
        return self._update_character(state, effect.character_id, in_party=True)

    def _apply_remove_from_party(
        self, effect: RemoveFromPartyEffect, state: GameState
    ) -> GameState:
        return self._update_character(state, effect.character_id, in_party=False)

    def _apply_set_relationship(
        self, effect: SetRelationshipEffect, state: GameState
    ) -> GameState:
        return self._update_character(state, effect.character_id, relationship=effect.value)

    def _apply_add_relationship(
        self, effect: AddRelationshipEffect, state: GameState
    ) -> GameState:
        character = state.character_state.get(effect.character_id)
        if character is None:
            return state
        return self._update_character(
            state,
            effect.character_id,
            relationship=character.relationship + effect.value,
        )

    def _apply_set_character_stat(
        self, effect: SetCharacterStatEffect, state: GameState
    ) -> GameState:
        character: Optional[CharacterState] = state.character_state.get(effect.character_id)
        if character is None:
            return state
        return self._update_character(
            state,
            effect.character_id,
            stats={**character.stats, effect.stat: effect.value},
        )

    def _apply_add_character_stat(
        self, effect: AddCharacterStatEffect, state: GameState
    ) -> GameState:
        character = state.character_state.get(effect.character_id)
        if character is None:
            return state
        current = character.stats.get(effect.stat)
        new_value = current + effect.value if is_number(current) else effect.value
        return self._update_character(
            state,
            effect.character_id,
            stats={**character.stats, effect.stat: new_value},
        )

    # =========================================================================
    # PRESENTATION CUES
    # =========================================================================

    def _apply_play_music(self, effect: PlayMusicEffect, state: GameState) -> GameState:
        # Music comes from the current location's static data
        logger.debug(f"playMusic '{effect.track}' has no state to change")
        return state

    def _apply_play_sound(self, effect: PlaySoundEffect, state: GameState) -> GameState:
        return replace(state, pending_sounds=state.pending_sounds + (effect.sound,))

    def _apply_notify(self, effect: NotifyEffect, state: GameState) -> GameState:
        return replace(state, notifications=state.notifications + (effect.message,))

    def _apply_play_video(self, effect: PlayVideoEffect, state: GameState) -> GameState:
        return replace(state, pending_video=effect.file)

    def _apply_show_interlude(self, effect: ShowInterludeEffect, state: GameState) -> GameState:
        return replace(state, pending_interlude=effect.interlude_id)

    # =========================================================================
    # RANDOMNESS
    # =========================================================================

    def _apply_roll(self, effect: RollEffect, state: GameState) -> GameState:
        value = self._dice.randint(
            effect.minimum, effect.maximum, reason=f"ROLL {effect.variable}"
        )
        return replace(state, variables={**state.variables, effect.variable: value})


_unhandled = [t for t in EffectType if not hasattr(EffectProcessor, _handler_name(t))]
if _unhandled:
    raise RuntimeError(f"Effect kinds without a handler: {_unhandled}")


def apply_effect(
    effect: Effect,
    state: GameState,
    dice: Optional[DiceRoller] = None,
) -> GameState:
    """Apply a single effect to the game state."""
    return EffectProcessor(dice).apply(effect, state)


def apply_effects(
    effects: Iterable[Effect],
    state: GameState,
    dice: Optional[DiceRoller] = None,
) -> GameState:
    """
    Apply effects in sequence.

    Each effect receives the state produced by the previous one, so order
    is observable: add-then-set differs from set-then-add.

    Args:
        effects: Effects in declared order
        state: Starting state
        dice: Random source for roll effects

    Returns:
        The state after the last effect
    """
    return EffectProcessor(dice).apply_all(effects, state)
