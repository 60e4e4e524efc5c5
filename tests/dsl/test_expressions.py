"""
Tests for condition and effect expression compiling.
"""

import pytest

from narrative_engine.conditions.types import (
    ConditionType,
    HasFlagCondition,
    RollCondition,
    TimeIsCondition,
    VariableEqualsCondition,
    VariableGreaterThanCondition,
)
from narrative_engine.dsl.errors import DialogueSyntaxError
from narrative_engine.dsl.expressions import (
    coerce_number,
    parse_condition,
    parse_effect,
    parse_text,
    parse_value,
)
from narrative_engine.effects.types import (
    AddVariableEffect,
    AdvanceTimeEffect,
    EffectType,
    EndDialogueEffect,
    GoToLocationEffect,
    NotifyEffect,
    PlayMusicEffect,
    RollEffect,
    SetCharacterStatEffect,
    SetMapEnabledEffect,
    SetVariableEffect,
    ShowInterludeEffect,
    StartDialogueEffect,
)


class TestTextAndValues:
    """Tests for literal text and value coercion."""

    def test_localization_reference_kept_verbatim(self):
        assert parse_text("@bartender.greeting") == "@bartender.greeting"

    def test_quotes_stripped(self):
        assert parse_text('"Hello there"') == "Hello there"

    def test_plain_text_used_literally(self):
        assert parse_text("  Hello there ") == "Hello there"

    def test_integer_and_float_coercion(self):
        assert coerce_number("10") == 10
        assert isinstance(coerce_number("10"), int)
        assert coerce_number("-5") == -5
        assert coerce_number("2.5") == 2.5

    def test_non_numbers_stay_strings(self):
        assert coerce_number("Hero") is None
        assert coerce_number("inf") is None
        assert parse_value("Hero") == "Hero"
        assert parse_value("7") == 7


class TestParseCondition:
    """Tests for parse_condition()."""

    def test_greater_than_is_numeric(self):
        condition = parse_condition("variableGreaterThan gold 10")
        assert condition == VariableGreaterThanCondition(variable="gold", value=10)
        assert isinstance(condition.value, int)

    def test_equals_keeps_string_value(self):
        condition = parse_condition("variableEquals playerName Hero")
        assert condition == VariableEqualsCondition(variable="playerName", value="Hero")

    def test_equals_coerces_numeric_value(self):
        condition = parse_condition("variableEquals gold 5")
        assert condition.value == 5

    def test_flag_condition(self):
        assert parse_condition("hasFlag metKing") == HasFlagCondition(flag="metKing")

    def test_time_range(self):
        assert parse_condition("timeIs 20 6") == TimeIsCondition(start_hour=20, end_hour=6)

    def test_roll_condition(self):
        assert parse_condition("roll 1 20 15") == RollCondition(
            minimum=1, maximum=20, threshold=15
        )

    def test_every_kind_has_a_keyword(self):
        from narrative_engine.dsl.expressions import CONDITION_SYNTAX

        assert set(CONDITION_SYNTAX) == {t.value for t in ConditionType}

    def test_unknown_keyword_raises_with_line(self):
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_condition("isRaining", line_number=12)
        assert excinfo.value.line_number == 12
        assert "Unknown condition type" in str(excinfo.value)

    def test_wrong_arity_raises(self):
        with pytest.raises(DialogueSyntaxError):
            parse_condition("hasFlag")
        with pytest.raises(DialogueSyntaxError):
            parse_condition("hasFlag a b")

    def test_non_numeric_threshold_raises(self):
        with pytest.raises(DialogueSyntaxError):
            parse_condition("variableGreaterThan gold lots")


class TestParseEffect:
    """Tests for parse_effect()."""

    def test_add_variable(self):
        assert parse_effect("ADD variable gold -50") == AddVariableEffect(
            variable="gold", value=-50
        )

    def test_set_variable_string(self):
        assert parse_effect("SET variable mood happy") == SetVariableEffect(
            variable="mood", value="happy"
        )

    def test_set_character_stat(self):
        assert parse_effect("SET characterStat guide strength 7") == SetCharacterStatEffect(
            character_id="guide", stat="strength", value=7
        )

    def test_set_map_enabled(self):
        assert parse_effect("SET mapEnabled false") == SetMapEnabledEffect(enabled=False)
        with pytest.raises(DialogueSyntaxError):
            parse_effect("SET mapEnabled maybe")

    def test_advance_time(self):
        assert parse_effect("ADVANCE time 3") == AdvanceTimeEffect(hours=3)

    def test_start_and_end_dialogue(self):
        assert parse_effect("START dialogue shop") == StartDialogueEffect(dialogue_id="shop")
        assert parse_effect("END dialogue") == EndDialogueEffect()

    def test_goto_location(self):
        assert parse_effect("GOTO location market") == GoToLocationEffect(location_id="market")

    def test_notify_parses_text(self):
        assert parse_effect('NOTIFY "Quest updated"') == NotifyEffect(message="Quest updated")
        assert parse_effect("NOTIFY @quest.updated") == NotifyEffect(message="@quest.updated")

    def test_music_takes_rest_of_line(self):
        assert parse_effect("MUSIC tavern theme.ogg") == PlayMusicEffect(track="tavern theme.ogg")

    def test_roll_and_interlude(self):
        assert parse_effect("ROLL luck 1 6") == RollEffect(variable="luck", minimum=1, maximum=6)
        assert parse_effect("INTERLUDE chapter_two") == ShowInterludeEffect(
            interlude_id="chapter_two"
        )

    def test_roll_bounds_must_be_whole(self):
        with pytest.raises(DialogueSyntaxError):
            parse_effect("ROLL luck 1 6.5")

    def test_unknown_keyword_raises(self):
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_effect("DANCE wildly", line_number=3)
        assert excinfo.value.line_number == 3
        assert str(excinfo.value).startswith("line 3:")

    def test_unknown_sub_keyword_raises(self):
        with pytest.raises(DialogueSyntaxError):
            parse_effect("SET weather rain")

    def test_effect_dict_round_trip_uses_type_tag(self):
        effect = parse_effect("ADD relationship guide 2")
        data = effect.to_dict()
        assert data["type"] == EffectType.ADD_RELATIONSHIP.value
        assert data["character_id"] == "guide"
        assert data["value"] == 2
