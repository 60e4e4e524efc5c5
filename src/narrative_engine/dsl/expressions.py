"""
Condition and effect expression compiler.

Expressions are single lines such as:
    hasFlag metBartender
    variableGreaterThan gold 10
    SET variable playerName Hero
    ADD variable gold -50
    NOTIFY @quest.started
    ROLL bluffRoll 1 20

The first word selects the kind (for effects, the first two words unless
the keyword takes free text or stands alone), remaining words are
positional arguments with a fixed arity. Argument tokens are coerced to
numbers where they parse as numbers and kept as strings otherwise.
"""

import math
import re
from typing import Optional, Union

from narrative_engine.conditions.types import (
    AtLocationCondition,
    CharacterAtCondition,
    CharacterInPartyCondition,
    Condition,
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
from narrative_engine.dsl.errors import DialogueSyntaxError
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

# Argument kinds
STR = "str"
NUM = "num"
INT = "int"
VALUE = "value"
BOOL = "bool"

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


# =============================================================================
# LITERALS
# =============================================================================


def parse_text(text: str) -> str:
    """
    Parse a text value.

    - @key: localization reference, kept verbatim with the '@'
    - "text": quoted literal, quotes stripped
    - anything else: used as-is
    """
    trimmed = text.strip()
    if trimmed.startswith("@"):
        return trimmed
    if len(trimmed) >= 2 and trimmed.startswith('"') and trimmed.endswith('"'):
        return trimmed[1:-1]
    return trimmed


def coerce_number(token: str) -> Optional[Union[int, float]]:
    """Return the token as int or float, or None if it is not a finite number."""
    if _INT_PATTERN.match(token):
        return int(token)
    if _FLOAT_PATTERN.match(token):
        value = float(token)
        if math.isfinite(value):
            return value
    return None


def parse_value(token: str) -> Union[int, float, str]:
    """Coerce to a number where possible, otherwise keep the string."""
    number = coerce_number(token)
    return token if number is None else number


def _convert(kind: str, name: str, token: str, line_number: Optional[int]):
    if kind == STR:
        return token
    if kind == VALUE:
        return parse_value(token)
    if kind == BOOL:
        lowered = token.lower()
        if lowered not in ("true", "false"):
            raise DialogueSyntaxError(
                f"Expected true or false for '{name}', got '{token}'", line_number
            )
        return lowered == "true"

    number = coerce_number(token)
    if number is None:
        raise DialogueSyntaxError(
            f"Expected a number for '{name}', got '{token}'", line_number
        )
    if kind == INT:
        if isinstance(number, float) and not number.is_integer():
            raise DialogueSyntaxError(
                f"Expected a whole number for '{name}', got '{token}'", line_number
            )
        return int(number)
    return number


def _build(
    cls,
    signature: tuple[tuple[str, str], ...],
    args: list[str],
    label: str,
    line_number: Optional[int],
):
    if len(args) != len(signature):
        expected = " ".join(f"<{name}>" for name, _ in signature)
        raise DialogueSyntaxError(
            f"{label} expects {len(signature)} argument(s): {label} {expected}".rstrip(),
            line_number,
        )
    kwargs = {
        name: _convert(kind, name, token, line_number)
        for (name, kind), token in zip(signature, args)
    }
    return cls(**kwargs)


# =============================================================================
# CONDITIONS
# =============================================================================

CONDITION_SYNTAX: dict[str, tuple[type[Condition], tuple[tuple[str, str], ...]]] = {
    "hasFlag": (HasFlagCondition, (("flag", STR),)),
    "notFlag": (NotFlagCondition, (("flag", STR),)),
    "hasItem": (HasItemCondition, (("item_id", STR),)),
    "variableEquals": (VariableEqualsCondition, (("variable", STR), ("value", VALUE))),
    "variableGreaterThan": (
        VariableGreaterThanCondition, (("variable", STR), ("value", NUM))
    ),
    "variableLessThan": (VariableLessThanCondition, (("variable", STR), ("value", NUM))),
    "atLocation": (AtLocationCondition, (("location_id", STR),)),
    "questAtStage": (QuestAtStageCondition, (("quest_id", STR), ("stage_id", STR))),
    "characterAt": (CharacterAtCondition, (("character_id", STR), ("location_id", STR))),
    "characterInParty": (CharacterInPartyCondition, (("character_id", STR),)),
    "relationshipAbove": (
        RelationshipAboveCondition, (("character_id", STR), ("value", NUM))
    ),
    "relationshipBelow": (
        RelationshipBelowCondition, (("character_id", STR), ("value", NUM))
    ),
    "timeIs": (TimeIsCondition, (("start_hour", NUM), ("end_hour", NUM))),
    "itemAt": (ItemAtCondition, (("item_id", STR), ("location_id", STR))),
    "roll": (RollCondition, (("minimum", INT), ("maximum", INT), ("threshold", NUM))),
}


def parse_condition(text: str, line_number: Optional[int] = None) -> Condition:
    """
    Compile a condition expression.

    Args:
        text: Expression such as "variableGreaterThan gold 10"
        line_number: Source line for error reporting

    Returns:
        The compiled Condition

    Raises:
        DialogueSyntaxError: On unknown keywords, wrong arity or bad numbers
    """
    parts = text.split()
    if not parts:
        raise DialogueSyntaxError("Empty condition", line_number)

    keyword, args = parts[0], parts[1:]
    if keyword not in CONDITION_SYNTAX:
        raise DialogueSyntaxError(f"Unknown condition type: {keyword}", line_number)

    cls, signature = CONDITION_SYNTAX[keyword]
    return _build(cls, signature, args, keyword, line_number)


# =============================================================================
# EFFECTS
# =============================================================================

# Keywords whose argument is the rest of the line
TEXT_EFFECTS = {
    "NOTIFY": (NotifyEffect, "message"),
    "MUSIC": (PlayMusicEffect, "track"),
    "SOUND": (PlaySoundEffect, "sound"),
    "VIDEO": (PlayVideoEffect, "file"),
}

# Keywords that take positional arguments directly
SIMPLE_EFFECTS: dict[str, tuple[type[Effect], tuple[tuple[str, str], ...]]] = {
    "ROLL": (RollEffect, (("variable", STR), ("minimum", INT), ("maximum", INT))),
    "INTERLUDE": (ShowInterludeEffect, (("interlude_id", STR),)),
}

# (keyword, sub-keyword) pairs
COMPOUND_EFFECTS: dict[tuple[str, str], tuple[type[Effect], tuple[tuple[str, str], ...]]] = {
    ("SET", "flag"): (SetFlagEffect, (("flag", STR),)),
    ("SET", "variable"): (SetVariableEffect, (("variable", STR), ("value", VALUE))),
    ("SET", "questStage"): (SetQuestStageEffect, (("quest_id", STR), ("stage_id", STR))),
    ("SET", "characterLocation"): (
        SetCharacterLocationEffect, (("character_id", STR), ("location_id", STR))
    ),
    ("SET", "relationship"): (
        SetRelationshipEffect, (("character_id", STR), ("value", NUM))
    ),
    ("SET", "characterStat"): (
        SetCharacterStatEffect, (("character_id", STR), ("stat", STR), ("value", VALUE))
    ),
    ("SET", "mapEnabled"): (SetMapEnabledEffect, (("enabled", BOOL),)),
    ("CLEAR", "flag"): (ClearFlagEffect, (("flag", STR),)),
    ("ADD", "variable"): (AddVariableEffect, (("variable", STR), ("value", NUM))),
    ("ADD", "item"): (AddItemEffect, (("item_id", STR),)),
    ("ADD", "journalEntry"): (AddJournalEntryEffect, (("entry_id", STR),)),
    ("ADD", "toParty"): (AddToPartyEffect, (("character_id", STR),)),
    ("ADD", "relationship"): (
        AddRelationshipEffect, (("character_id", STR), ("value", NUM))
    ),
    ("ADD", "characterStat"): (
        AddCharacterStatEffect, (("character_id", STR), ("stat", STR), ("value", NUM))
    ),
    ("REMOVE", "item"): (RemoveItemEffect, (("item_id", STR),)),
    ("REMOVE", "fromParty"): (RemoveFromPartyEffect, (("character_id", STR),)),
    ("MOVE", "item"): (MoveItemEffect, (("item_id", STR), ("location_id", STR))),
    ("GOTO", "location"): (GoToLocationEffect, (("location_id", STR),)),
    ("ADVANCE", "time"): (AdvanceTimeEffect, (("hours", NUM),)),
    ("START", "dialogue"): (StartDialogueEffect, (("dialogue_id", STR),)),
    ("END", "dialogue"): (EndDialogueEffect, ()),
}

_COMPOUND_KEYWORDS = {keyword for keyword, _ in COMPOUND_EFFECTS}


def parse_effect(text: str, line_number: Optional[int] = None) -> Effect:
    """
    Compile an effect expression.

    Args:
        text: Expression such as "ADD variable gold -50" or "NOTIFY @quest.started"
        line_number: Source line for error reporting

    Returns:
        The compiled Effect

    Raises:
        DialogueSyntaxError: On unknown keywords, wrong arity or bad numbers
    """
    stripped = text.strip()
    parts = stripped.split()
    if not parts:
        raise DialogueSyntaxError("Empty effect", line_number)
    keyword = parts[0]

    if keyword in TEXT_EFFECTS:
        cls, field_name = TEXT_EFFECTS[keyword]
        rest = stripped[len(keyword):].strip()
        if not rest:
            raise DialogueSyntaxError(f"{keyword} needs a value", line_number)
        value = parse_text(rest) if keyword == "NOTIFY" else rest
        return cls(**{field_name: value})

    if keyword in SIMPLE_EFFECTS:
        cls, signature = SIMPLE_EFFECTS[keyword]
        return _build(cls, signature, parts[1:], keyword, line_number)

    if keyword in _COMPOUND_KEYWORDS:
        sub_keyword = parts[1] if len(parts) > 1 else ""
        entry = COMPOUND_EFFECTS.get((keyword, sub_keyword))
        if entry is None:
            raise DialogueSyntaxError(
                f"Unknown {keyword} effect: {sub_keyword or '(missing)'}", line_number
            )
        cls, signature = entry
        return _build(cls, signature, parts[2:], f"{keyword} {sub_keyword}", line_number)

    raise DialogueSyntaxError(f"Unknown effect keyword: {keyword}", line_number)
