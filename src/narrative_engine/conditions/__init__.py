"""Condition kinds and their evaluation."""

from narrative_engine.conditions.types import (
    CONDITION_CLASSES,
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
    condition_from_dict,
)
from narrative_engine.conditions.evaluator import (
    evaluate_condition,
    evaluate_conditions,
    is_number,
)

__all__ = [
    "CONDITION_CLASSES",
    "AtLocationCondition",
    "CharacterAtCondition",
    "CharacterInPartyCondition",
    "Condition",
    "ConditionType",
    "HasFlagCondition",
    "HasItemCondition",
    "ItemAtCondition",
    "NotFlagCondition",
    "QuestAtStageCondition",
    "RelationshipAboveCondition",
    "RelationshipBelowCondition",
    "RollCondition",
    "TimeIsCondition",
    "VariableEqualsCondition",
    "VariableGreaterThanCondition",
    "VariableLessThanCondition",
    "condition_from_dict",
    "evaluate_condition",
    "evaluate_conditions",
    "is_number",
]
