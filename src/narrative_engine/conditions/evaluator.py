"""
Condition evaluation.

Every condition kind maps to one pure predicate over a GameState. The
dispatch table is checked against ConditionType at import time, so a new
kind without a predicate fails loudly instead of falling through.

Numeric comparisons return False when the variable is absent or holds a
non-numeric value. Unknown characters, quests and items simply fail the
check.
"""

import logging
from typing import Callable, Iterable, Optional

from narrative_engine.conditions.types import (
    AtLocationCondition,
    CharacterAtCondition,
    CharacterInPartyCondition,
    Condition,
    ConditionType,
    HasFlagCondition,
    HasItemCondition,
    ItemAtCondition,
    NotFlagCondition,
    QuestAtStageCondition,
    RelationshipAboveCondition,
    RelationshipBelowCondition,
    RollCondition,
    TimeIsCondition,
    VariableEqualsCondition,
    VariableGreaterThanCondition,
    VariableLessThanCondition,
)
from narrative_engine.dice import DiceRoller
from narrative_engine.game_state.state import GameState

logger = logging.getLogger(__name__)


def is_number(value: object) -> bool:
    """True for int and float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# PREDICATES
# =============================================================================


def _has_flag(condition: HasFlagCondition, state: GameState, dice: DiceRoller) -> bool:
    return state.flags.get(condition.flag) is True


def _not_flag(condition: NotFlagCondition, state: GameState, dice: DiceRoller) -> bool:
    return not state.flags.get(condition.flag, False)


def _has_item(condition: HasItemCondition, state: GameState, dice: DiceRoller) -> bool:
    return condition.item_id in state.inventory


def _variable_equals(
    condition: VariableEqualsCondition, state: GameState, dice: DiceRoller
) -> bool:
    if condition.variable not in state.variables:
        return False
    current = state.variables[condition.variable]
    # 5 and "5" are different values
    if is_number(current) != is_number(condition.value):
        return False
    return current == condition.value


def _variable_greater_than(
    condition: VariableGreaterThanCondition, state: GameState, dice: DiceRoller
) -> bool:
    current = state.variables.get(condition.variable)
    return is_number(current) and current > condition.value


def _variable_less_than(
    condition: VariableLessThanCondition, state: GameState, dice: DiceRoller
) -> bool:
    current = state.variables.get(condition.variable)
    return is_number(current) and current < condition.value


def _at_location(condition: AtLocationCondition, state: GameState, dice: DiceRoller) -> bool:
    return state.current_location == condition.location_id


def _quest_at_stage(
    condition: QuestAtStageCondition, state: GameState, dice: DiceRoller
) -> bool:
    return state.quest_progress.get(condition.quest_id) == condition.stage_id


def _character_at(condition: CharacterAtCondition, state: GameState, dice: DiceRoller) -> bool:
    character = state.character_state.get(condition.character_id)
    return character is not None and character.location == condition.location_id


def _character_in_party(
    condition: CharacterInPartyCondition, state: GameState, dice: DiceRoller
) -> bool:
    character = state.character_state.get(condition.character_id)
    return character is not None and character.in_party


def _relationship_above(
    condition: RelationshipAboveCondition, state: GameState, dice: DiceRoller
) -> bool:
    character = state.character_state.get(condition.character_id)
    return character is not None and character.relationship > condition.value


def _relationship_below(
    condition: RelationshipBelowCondition, state: GameState, dice: DiceRoller
) -> bool:
    character = state.character_state.get(condition.character_id)
    return character is not None and character.relationship < condition.value


def _time_is(condition: TimeIsCondition, state: GameState, dice: DiceRoller) -> bool:
    hour = state.current_time.hour
    start, end = condition.start_hour, condition.end_hour
    if start < end:
        return start <= hour < end
    # Range crosses midnight, e.g. 20 -> 6
    return hour >= start or hour < end


def _item_at(condition: ItemAtCondition, state: GameState, dice: DiceRoller) -> bool:
    return state.item_locations.get(condition.item_id) == condition.location_id


def _roll(condition: RollCondition, state: GameState, dice: DiceRoller) -> bool:
    result = dice.randint(
        condition.minimum,
        condition.maximum,
        reason=f"roll check >= {condition.threshold}",
    )
    return result >= condition.threshold


_EVALUATORS: dict[ConditionType, Callable[[Condition, GameState, DiceRoller], bool]] = {
    ConditionType.HAS_FLAG: _has_flag,
    ConditionType.NOT_FLAG: _not_flag,
    ConditionType.HAS_ITEM: _has_item,
    ConditionType.VARIABLE_EQUALS: _variable_equals,
    ConditionType.VARIABLE_GREATER_THAN: _variable_greater_than,
    ConditionType.VARIABLE_LESS_THAN: _variable_less_than,
    ConditionType.AT_LOCATION: _at_location,
    ConditionType.QUEST_AT_STAGE: _quest_at_stage,
    ConditionType.CHARACTER_AT: _character_at,
    ConditionType.CHARACTER_IN_PARTY: _character_in_party,
    ConditionType.RELATIONSHIP_ABOVE: _relationship_above,
    ConditionType.RELATIONSHIP_BELOW: _relationship_below,
    ConditionType.TIME_IS: _time_is,
    ConditionType.ITEM_AT: _item_at,
    ConditionType.ROLL: _roll,
}

_unhandled = set(ConditionType) - set(_EVALUATORS)
if _unhandled:
    raise RuntimeError(f"Condition kinds without a predicate: {sorted(_unhandled)}")


# =============================================================================
# PUBLIC API
# =============================================================================


def evaluate_condition(
    condition: Condition,
    state: GameState,
    dice: Optional[DiceRoller] = None,
) -> bool:
    """
    Evaluate a single condition against the game state.

    Args:
        condition: The condition to test
        state: Current game state
        dice: Random source for roll checks (a fresh unseeded roller if None)

    Returns:
        True if the condition passes
    """
    predicate = _EVALUATORS[condition.condition_type]
    return predicate(condition, state, dice or DiceRoller())


def evaluate_conditions(
    conditions: Iterable[Condition],
    state: GameState,
    dice: Optional[DiceRoller] = None,
) -> bool:
    """
    Evaluate a list of conditions; all must pass.

    An empty list passes. Evaluation stops at the first failure, so roll
    checks after a failing condition do not draw.
    """
    dice = dice or DiceRoller()
    for condition in conditions:
        if not evaluate_condition(condition, state, dice):
            logger.debug(f"Condition failed: {condition}")
            return False
    return True
