"""
Tests for the dialogue parser.

Covers top-level directives, node bodies, CHOICE and IF blocks, GOTO forms,
choice id generation and syntax errors with line numbers.
"""

import pytest

from narrative_engine.conditions.types import (
    HasFlagCondition,
    NotFlagCondition,
    VariableGreaterThanCondition,
)
from narrative_engine.dsl.errors import DialogueSyntaxError
from narrative_engine.dsl.parser import make_choice_id, parse_dialogue
from narrative_engine.effects.types import (
    AddVariableEffect,
    EndDialogueEffect,
    GoToLocationEffect,
    NotifyEffect,
    SetFlagEffect,
)

from tests.helpers import BARTENDER_DIALOGUE, MARKET_WELCOME_DIALOGUE


class TestTopLevel:
    """Tests for TRIGGER, REQUIRE and NODE ordering."""

    def test_trigger_and_conditions(self):
        dialogue = parse_dialogue(MARKET_WELCOME_DIALOGUE, "market_welcome")
        assert dialogue.id == "market_welcome"
        assert dialogue.trigger_location == "market"
        assert dialogue.conditions == (NotFlagCondition(flag="visitedMarket"),)

    def test_first_node_is_start(self):
        dialogue = parse_dialogue(BARTENDER_DIALOGUE, "bartender")
        assert dialogue.start_node == "start"
        assert [n.id for n in dialogue.nodes] == [
            "start", "drink", "rumors", "secret", "farewell",
        ]

    def test_no_trigger_by_default(self):
        dialogue = parse_dialogue(BARTENDER_DIALOGUE, "bartender")
        assert dialogue.trigger_location is None
        assert dialogue.conditions == ()

    def test_unexpected_top_level_token(self):
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_dialogue("TRIGGER tavern\nHELLO world\nNODE a\n  NARRATOR: hi", "d")
        assert excinfo.value.line_number == 2
        assert "Unexpected token at line 2" in str(excinfo.value)

    def test_duplicate_trigger(self):
        with pytest.raises(DialogueSyntaxError):
            parse_dialogue("TRIGGER a\nTRIGGER b\nNODE n\n  NARRATOR: x", "d")

    def test_no_nodes(self):
        with pytest.raises(DialogueSyntaxError):
            parse_dialogue("TRIGGER tavern", "d")

    def test_duplicate_node_ids(self):
        source = "NODE a\n  NARRATOR: one\nNODE a\n  NARRATOR: two"
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_dialogue(source, "d")
        assert excinfo.value.line_number == 3


class TestNodes:
    """Tests for node bodies."""

    @pytest.fixture
    def dialogue(self):
        return parse_dialogue(BARTENDER_DIALOGUE, "bartender")

    def test_speaker_line_lowercases_speaker(self, dialogue):
        start = dialogue.get_node("start")
        assert start.speaker == "bartender"
        assert start.text == "@bartender.greeting"
        assert start.voice == "bartender_hello.ogg"

    def test_narrator_has_no_speaker(self, dialogue):
        rumors = dialogue.get_node("rumors")
        assert rumors.speaker is None
        assert rumors.text == "The bartender leans in."

    def test_quoted_text_is_unquoted(self, dialogue):
        assert dialogue.get_node("drink").text == "Here you go, {playerName}."

    def test_bare_effects_and_default_next(self, dialogue):
        rumors = dialogue.get_node("rumors")
        assert rumors.effects == (SetFlagEffect(flag="heardRumors"),)
        assert rumors.next == "farewell"

    def test_if_block_records_branch(self, dialogue):
        rumors = dialogue.get_node("rumors")
        assert len(rumors.conditional_next) == 1
        branch = rumors.conditional_next[0]
        assert branch.condition == HasFlagCondition(flag="knowsSecret")
        assert branch.next == "secret"

    def test_node_without_routing(self, dialogue):
        secret = dialogue.get_node("secret")
        assert secret.choices == ()
        assert secret.next is None
        assert secret.conditional_next == ()

    def test_goto_location_on_node(self):
        source = "NODE a\n  NARRATOR: Off we go\n  GOTO location forest"
        node = parse_dialogue(source, "d").get_node("a")
        assert node.effects == (GoToLocationEffect(location_id="forest"), EndDialogueEffect())
        assert node.next is None

    def test_speaker_with_punctuation(self):
        node = parse_dialogue("NODE a\n  OLD-MAN: hi", "d").get_node("a")
        assert node.speaker == "old-man"
        assert node.text == "hi"

    def test_colon_after_a_space_is_not_a_speaker(self):
        node = parse_dialogue("NODE a\n  NARRATOR: x\n  NOTIFY Note: read it", "d").get_node("a")
        assert node.effects == (NotifyEffect(message="Note: read it"),)

    def test_portrait_override(self):
        source = "NODE a\n  GUIDE: Hello\n  PORTRAIT guide_angry.png"
        assert parse_dialogue(source, "d").get_node("a").portrait == "guide_angry.png"

    def test_if_block_effects_always_run(self):
        source = (
            "NODE a\n"
            "  NARRATOR: Hmm\n"
            "  IF hasFlag x\n"
            "    SET flag sawIt\n"
            "    GOTO b\n"
            "  END\n"
            "  IF hasFlag y\n"
            "    NOTIFY hello\n"
            "  END\n"
            "NODE b\n"
            "  NARRATOR: B\n"
        )
        node = parse_dialogue(source, "d").get_node("a")
        assert node.effects == (SetFlagEffect(flag="sawIt"), NotifyEffect(message="hello"))
        # A block without GOTO adds no branch
        assert [b.next for b in node.conditional_next] == ["b"]

    def test_branch_order_is_declaration_order(self):
        source = (
            "NODE a\n"
            "  NARRATOR: Which way?\n"
            "  IF hasFlag first\n"
            "    GOTO one\n"
            "  END\n"
            "  IF hasFlag second\n"
            "    GOTO two\n"
            "  END\n"
            "NODE one\n  NARRATOR: 1\n"
            "NODE two\n  NARRATOR: 2\n"
        )
        node = parse_dialogue(source, "d").get_node("a")
        assert [b.next for b in node.conditional_next] == ["one", "two"]

    def test_second_speaker_line_is_an_error(self):
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_dialogue("NODE a\n  NARRATOR: one\n  NARRATOR: two", "d")
        assert excinfo.value.line_number == 3

    def test_second_goto_is_an_error(self):
        with pytest.raises(DialogueSyntaxError):
            parse_dialogue("NODE a\n  NARRATOR: x\n  GOTO b\n  GOTO c", "d")

    def test_unknown_effect_line_reports_line_number(self):
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_dialogue("NODE a\n  NARRATOR: x\n\n  JUMP around", "d")
        assert excinfo.value.line_number == 4


class TestChoices:
    """Tests for CHOICE blocks."""

    @pytest.fixture
    def start(self):
        return parse_dialogue(BARTENDER_DIALOGUE, "bartender").get_node("start")

    def test_choices_in_order(self, start):
        assert [c.text for c in start.choices] == [
            "Buy a drink", "@bartender.ask_rumors", "Head to the market", "Goodbye",
        ]

    def test_choice_requirements_and_effects(self, start):
        buy = start.choices[0]
        assert buy.conditions == (VariableGreaterThanCondition(variable="gold", value=5),)
        assert buy.effects[0] == AddVariableEffect(variable="gold", value=-5)
        assert buy.effects[1] == NotifyEffect(message="Paid 5 gold")
        assert buy.next == "drink"

    def test_choice_goto_location(self, start):
        leave = start.choices[2]
        assert leave.effects == (GoToLocationEffect(location_id="market"), EndDialogueEffect())
        assert leave.next == ""

    def test_choice_without_goto_ends_dialogue(self, start):
        assert start.choices[3].next == ""

    def test_choice_ids(self, start):
        assert start.choices[0].id == "start_choice_buy_a_drink"
        assert start.choices[1].id == "start_choice_bartender_ask_rumors"

    def test_choice_ids_are_stable(self):
        first = parse_dialogue(BARTENDER_DIALOGUE, "bartender")
        second = parse_dialogue(BARTENDER_DIALOGUE, "bartender")
        assert [c.id for c in first.get_node("start").choices] == [
            c.id for c in second.get_node("start").choices
        ]

    def test_missing_end_is_an_error(self):
        source = "NODE a\n  NARRATOR: x\n  CHOICE Go\n    GOTO b\nNODE b\n  NARRATOR: y"
        with pytest.raises(DialogueSyntaxError) as excinfo:
            parse_dialogue(source, "d")
        assert excinfo.value.line_number == 3

    def test_end_must_match_indentation(self):
        source = (
            "NODE a\n"
            "  NARRATOR: x\n"
            "  CHOICE Go\n"
            "    GOTO b\n"
            "    END\n"
        )
        # The inner END is not at the opener's indent, so the block never closes
        with pytest.raises(DialogueSyntaxError):
            parse_dialogue(source, "d")

    def test_duplicate_choice_text_is_an_error(self):
        source = (
            "NODE a\n"
            "  NARRATOR: x\n"
            "  CHOICE Go\n  END\n"
            "  CHOICE Go\n  END\n"
        )
        with pytest.raises(DialogueSyntaxError):
            parse_dialogue(source, "d")


class TestMakeChoiceId:
    """Tests for make_choice_id()."""

    def test_sanitizes_and_lowercases(self):
        assert make_choice_id("n1", "Hello, World!") == "n1_choice_hello__world_"

    def test_drops_at_and_quotes(self):
        assert make_choice_id("n1", "@menu.quit") == "n1_choice_menu_quit"

    def test_truncates_to_thirty_characters(self):
        choice_id = make_choice_id("n", "a" * 50)
        assert choice_id == "n_choice_" + "a" * 30

    def test_deterministic(self):
        assert make_choice_id("x", "Same text") == make_choice_id("x", "Same text")
