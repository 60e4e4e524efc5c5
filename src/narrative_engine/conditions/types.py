"""
Condition types.

A condition is a named, parameterized predicate over session state. Each
kind is a frozen dataclass tagged with a ConditionType; the tag value is
the keyword used in dialogue scripts (e.g. "hasFlag", "timeIs").

Supported kinds:
- hasFlag / notFlag: flag set or unset
- hasItem: item id in inventory
- variableEquals / variableGreaterThan / variableLessThan
- atLocation: current location equals
- questAtStage: quest progress equals stage
- characterAt / characterInParty
- relationshipAbove / relationshipBelow: strictly exclusive thresholds
- timeIs: hour within [start, end), wrapping past midnight
- itemAt: item's recorded location equals
- roll: random integer in [min, max] meets a threshold
"""

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Union

Number = Union[int, float]
Scalar = Union[int, float, str]


def check_field_value(owner: str, name: str, annotation: Any, value: Any) -> Any:
    """
    Check a dictionary-form field value against its declared type.

    Whole floats are accepted for int fields. Booleans never count as
    numbers and numeric strings are not converted.

    Args:
        owner: Kind tag, used in error messages
        name: Field name
        annotation: Declared type (str, int, bool, Number or Scalar)
        value: Raw value from the dictionary

    Returns:
        The value, converted to int for whole-number fields

    Raises:
        ValueError: If the value does not fit the declared type
    """
    is_number = (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
    if annotation is str:
        valid = isinstance(value, str)
    elif annotation is bool:
        valid = isinstance(value, bool)
    elif annotation is int:
        valid = is_number and float(value).is_integer()
        if valid:
            value = int(value)
    elif annotation == Number:
        valid = is_number
    elif annotation == Scalar:
        valid = is_number or isinstance(value, str)
    else:
        valid = True

    if not valid:
        raise ValueError(f"{owner} field '{name}' has an invalid value: {value!r}")
    return value


class ConditionType(str, Enum):
    """Condition kinds, valued by their script keyword."""
    HAS_FLAG = "hasFlag"
    NOT_FLAG = "notFlag"
    HAS_ITEM = "hasItem"
    VARIABLE_EQUALS = "variableEquals"
    VARIABLE_GREATER_THAN = "variableGreaterThan"
    VARIABLE_LESS_THAN = "variableLessThan"
    AT_LOCATION = "atLocation"
    QUEST_AT_STAGE = "questAtStage"
    CHARACTER_AT = "characterAt"
    CHARACTER_IN_PARTY = "characterInParty"
    RELATIONSHIP_ABOVE = "relationshipAbove"
    RELATIONSHIP_BELOW = "relationshipBelow"
    TIME_IS = "timeIs"
    ITEM_AT = "itemAt"
    ROLL = "roll"


@dataclass(frozen=True)
class Condition:
    """Base class for all condition kinds."""

    condition_type: ClassVar[ConditionType]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"type": self.condition_type.value}
        for f in fields(self):
            data[f.name] = getattr(self, f.name)
        return data


@dataclass(frozen=True)
class HasFlagCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.HAS_FLAG
    flag: str


@dataclass(frozen=True)
class NotFlagCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.NOT_FLAG
    flag: str


@dataclass(frozen=True)
class HasItemCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.HAS_ITEM
    item_id: str


@dataclass(frozen=True)
class VariableEqualsCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.VARIABLE_EQUALS
    variable: str
    value: Scalar


@dataclass(frozen=True)
class VariableGreaterThanCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.VARIABLE_GREATER_THAN
    variable: str
    value: Number


@dataclass(frozen=True)
class VariableLessThanCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.VARIABLE_LESS_THAN
    variable: str
    value: Number


@dataclass(frozen=True)
class AtLocationCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.AT_LOCATION
    location_id: str


@dataclass(frozen=True)
class QuestAtStageCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.QUEST_AT_STAGE
    quest_id: str
    stage_id: str


@dataclass(frozen=True)
class CharacterAtCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.CHARACTER_AT
    character_id: str
    location_id: str


@dataclass(frozen=True)
class CharacterInPartyCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.CHARACTER_IN_PARTY
    character_id: str


@dataclass(frozen=True)
class RelationshipAboveCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.RELATIONSHIP_ABOVE
    character_id: str
    value: Number


@dataclass(frozen=True)
class RelationshipBelowCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.RELATIONSHIP_BELOW
    character_id: str
    value: Number


@dataclass(frozen=True)
class TimeIsCondition(Condition):
    """Hour in [start_hour, end_hour); wraps past midnight when start >= end."""
    condition_type: ClassVar[ConditionType] = ConditionType.TIME_IS
    start_hour: Number
    end_hour: Number


@dataclass(frozen=True)
class ItemAtCondition(Condition):
    condition_type: ClassVar[ConditionType] = ConditionType.ITEM_AT
    item_id: str
    location_id: str


@dataclass(frozen=True)
class RollCondition(Condition):
    """Silent pass/fail check: draw in [minimum, maximum], pass if >= threshold."""
    condition_type: ClassVar[ConditionType] = ConditionType.ROLL
    minimum: int
    maximum: int
    threshold: Number


CONDITION_CLASSES: dict[ConditionType, type[Condition]] = {
    cls.condition_type: cls
    for cls in (
        HasFlagCondition,
        NotFlagCondition,
        HasItemCondition,
        VariableEqualsCondition,
        VariableGreaterThanCondition,
        VariableLessThanCondition,
        AtLocationCondition,
        QuestAtStageCondition,
        CharacterAtCondition,
        CharacterInPartyCondition,
        RelationshipAboveCondition,
        RelationshipBelowCondition,
        TimeIsCondition,
        ItemAtCondition,
        RollCondition,
    )
}

_unmapped = set(ConditionType) - set(CONDITION_CLASSES)
if _unmapped:
    raise RuntimeError(f"Condition kinds without a class: {sorted(_unmapped)}")


def condition_from_dict(data: dict[str, Any]) -> Condition:
    """
    Create a condition from its dictionary form.

    Args:
        data: Dictionary with a "type" tag and the kind's fields

    Returns:
        The matching Condition instance

    Raises:
        ValueError: If the tag is unknown or a field is missing or mistyped
    """
    try:
        condition_type = ConditionType(data.get("type"))
    except ValueError:
        raise ValueError(f"Unknown condition type: {data.get('type')!r}") from None

    cls = CONDITION_CLASSES[condition_type]
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            raise ValueError(
                f"Condition {condition_type.value} is missing field '{f.name}'"
            )
        kwargs[f.name] = check_field_value(
            condition_type.value, f.name, f.type, data[f.name]
        )
    return cls(**kwargs)
