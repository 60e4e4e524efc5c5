"""
Tests for the effect processor.

Every handler must return a new GameState and leave its input untouched.
"""

import pytest

from narrative_engine.effects import (
    AddCharacterStatEffect,
    AddItemEffect,
    AddJournalEntryEffect,
    AddRelationshipEffect,
    AddToPartyEffect,
    AddVariableEffect,
    AdvanceTimeEffect,
    ClearFlagEffect,
    EffectProcessor,
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
    apply_effect,
    apply_effects,
    effect_from_dict,
)
from narrative_engine.game_state.state import CharacterState, DialogueCursor, GameTime

from tests.helpers import make_state


class TestFlagsAndVariables:
    """Tests for flag and variable effects."""

    def test_set_and_clear_flag(self, base_state):
        state = apply_effect(SetFlagEffect(flag="met"), base_state)
        assert state.flags["met"] is True
        state = apply_effect(ClearFlagEffect(flag="met"), state)
        assert not state.flags.get("met")

    def test_input_state_is_not_mutated(self, base_state):
        apply_effect(SetFlagEffect(flag="met"), base_state)
        assert base_state.flags == {}

    def test_add_to_absent_variable_initializes(self, base_state):
        state = apply_effect(AddVariableEffect(variable="gold", value=10), base_state)
        assert state.variables["gold"] == 10

    def test_add_to_string_variable_replaces(self):
        state = make_state(variables={"gold": "none"})
        state = apply_effect(AddVariableEffect(variable="gold", value=3), state)
        assert state.variables["gold"] == 3

    def test_set_variable_string(self, base_state):
        state = apply_effect(SetVariableEffect(variable="name", value="Hero"), base_state)
        assert state.variables["name"] == "Hero"


class TestFoldOrder:
    """Tests for left-to-right effect application."""

    def test_two_additions_combine(self, base_state):
        state = apply_effects(
            [AddVariableEffect(variable="gold", value=10), AddVariableEffect(variable="gold", value=-5)],
            base_state,
        )
        assert state.variables["gold"] == 5

    def test_set_then_add(self, base_state):
        state = apply_effects(
            [SetVariableEffect(variable="gold", value=100), AddVariableEffect(variable="gold", value=-5)],
            base_state,
        )
        assert state.variables["gold"] == 95

    def test_add_then_set_is_not_commutative(self, base_state):
        state = apply_effects(
            [AddVariableEffect(variable="gold", value=-5), SetVariableEffect(variable="gold", value=100)],
            base_state,
        )
        assert state.variables["gold"] == 100

    def test_empty_list_returns_same_state(self, base_state):
        assert apply_effects([], base_state) is base_state


class TestItems:
    """Tests for item effects."""

    def test_add_item(self, base_state):
        state = apply_effect(AddItemEffect(item_id="old_key"), base_state)
        assert state.inventory == ("old_key",)
        assert state.item_locations["old_key"] == "inventory"

    def test_add_item_twice_keeps_one(self, base_state):
        state = apply_effects([AddItemEffect(item_id="old_key")] * 2, base_state)
        assert state.inventory == ("old_key",)

    def test_remove_item_keeps_location_record(self):
        state = make_state(inventory=("old_key",), item_locations={"old_key": "inventory"})
        state = apply_effect(RemoveItemEffect(item_id="old_key"), state)
        assert state.inventory == ()
        assert state.item_locations["old_key"] == "inventory"

    def test_move_item(self):
        state = make_state(inventory=("old_key",), item_locations={"old_key": "inventory"})
        state = apply_effect(MoveItemEffect(item_id="old_key", location_id="market"), state)
        assert state.inventory == ()
        assert state.item_locations["old_key"] == "market"


class TestWorld:
    """Tests for location, time, quest, journal and map effects."""

    def test_go_to_location(self, base_state):
        state = apply_effect(GoToLocationEffect(location_id="forest"), base_state)
        assert state.current_location == "forest"

    def test_advance_time_rolls_over(self):
        state = make_state(current_time=GameTime(day=1, hour=22))
        state = apply_effect(AdvanceTimeEffect(hours=5), state)
        assert state.current_time == GameTime(day=2, hour=3)

    def test_advance_time_multiple_days(self):
        state = make_state(current_time=GameTime(day=1, hour=0))
        state = apply_effect(AdvanceTimeEffect(hours=50), state)
        assert state.current_time == GameTime(day=3, hour=2)

    def test_set_quest_stage(self, base_state):
        state = apply_effect(SetQuestStageEffect(quest_id="main_quest", stage_id="find_key"), base_state)
        assert state.quest_progress == {"main_quest": "find_key"}

    def test_journal_entry_unlocked_once(self, base_state):
        state = apply_effects([AddJournalEntryEffect(entry_id="lore")] * 2, base_state)
        assert state.unlocked_journal_entries == ("lore",)

    def test_set_map_enabled(self, base_state):
        state = apply_effect(SetMapEnabledEffect(enabled=False), base_state)
        assert state.map_enabled is False


class TestDialogue:
    """Tests for dialogue effects."""

    def test_start_dialogue_sets_sentinel(self, base_state):
        state = apply_effect(StartDialogueEffect(dialogue_id="shop"), base_state)
        assert state.dialogue_state == DialogueCursor(dialogue_id="shop", node_id="")
        assert state.dialogue_state.needs_start

    def test_end_dialogue(self):
        state = make_state(dialogue_state=DialogueCursor("shop", "start"))
        assert apply_effect(EndDialogueEffect(), state).dialogue_state is None


class TestCharacters:
    """Tests for character effects."""

    @pytest.fixture
    def state(self):
        return make_state(
            character_state={"guide": CharacterState(location="forest", relationship=2, stats={"str": 3})}
        )

    def test_set_character_location(self, state):
        state = apply_effect(SetCharacterLocationEffect(character_id="guide", location_id="tavern"), state)
        assert state.character_state["guide"].location == "tavern"

    def test_party_membership(self, state):
        state = apply_effect(AddToPartyEffect(character_id="guide"), state)
        assert state.character_state["guide"].in_party
        state = apply_effect(RemoveFromPartyEffect(character_id="guide"), state)
        assert not state.character_state["guide"].in_party

    def test_relationship(self, state):
        state = apply_effect(AddRelationshipEffect(character_id="guide", value=3), state)
        assert state.character_state["guide"].relationship == 5
        state = apply_effect(SetRelationshipEffect(character_id="guide", value=-1), state)
        assert state.character_state["guide"].relationship == -1

    def test_stats(self, state):
        state = apply_effect(AddCharacterStatEffect(character_id="guide", stat="str", value=2), state)
        assert state.character_state["guide"].stats["str"] == 5
        state = apply_effect(AddCharacterStatEffect(character_id="guide", stat="dex", value=4), state)
        assert state.character_state["guide"].stats["dex"] == 4
        state = apply_effect(SetCharacterStatEffect(character_id="guide", stat="title", value="Scout"), state)
        assert state.character_state["guide"].stats["title"] == "Scout"

    @pytest.mark.parametrize(
        "effect",
        [
            SetCharacterLocationEffect(character_id="nobody", location_id="tavern"),
            AddToPartyEffect(character_id="nobody"),
            AddRelationshipEffect(character_id="nobody", value=1),
            SetCharacterStatEffect(character_id="nobody", stat="x", value=1),
            AddCharacterStatEffect(character_id="nobody", stat="x", value=1),
        ],
    )
    def test_unknown_character_is_a_no_op(self, state, effect):
        assert apply_effect(effect, state) == state


class TestPresentationCues:
    """Tests for transient cue effects."""

    def test_sounds_and_notifications_accumulate(self, base_state):
        state = apply_effects(
            [
                NotifyEffect(message="one"),
                PlaySoundEffect(sound="a.ogg"),
                NotifyEffect(message="two"),
                PlaySoundEffect(sound="b.ogg"),
            ],
            base_state,
        )
        assert state.notifications == ("one", "two")
        assert state.pending_sounds == ("a.ogg", "b.ogg")

    def test_video_and_interlude(self, base_state):
        state = apply_effects(
            [PlayVideoEffect(file="intro.mp4"), ShowInterludeEffect(interlude_id="chapter_two")],
            base_state,
        )
        assert state.pending_video == "intro.mp4"
        assert state.pending_interlude == "chapter_two"

    def test_play_music_changes_nothing(self, base_state):
        assert apply_effect(PlayMusicEffect(track="song.ogg"), base_state) == base_state


class TestRollEffect:
    """Tests for ROLL effects."""

    def test_roll_stores_value(self, fixed_dice, base_state):
        state = apply_effect(RollEffect(variable="luck", minimum=1, maximum=6), base_state, fixed_dice(4))
        assert state.variables["luck"] == 4

    def test_roll_within_bounds(self, seeded_dice, base_state):
        processor = EffectProcessor(seeded_dice)
        for _ in range(20):
            state = processor.apply(RollEffect(variable="d", minimum=3, maximum=5), base_state)
            assert 3 <= state.variables["d"] <= 5


class TestEffectFromDict:
    """Tests for the dictionary form."""

    def test_every_type_round_trips(self):
        samples = [
            SetFlagEffect(flag="a"),
            MoveItemEffect(item_id="k", location_id="l"),
            EndDialogueEffect(),
            RollEffect(variable="v", minimum=1, maximum=6),
        ]
        for effect in samples:
            assert effect_from_dict(effect.to_dict()) == effect

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            effect_from_dict({"type": "explode"})

    def test_enum_values_are_camel_case_tags(self):
        assert EffectType.ADD_VARIABLE.value == "addVariable"
        assert len(EffectType) == 27

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "addVariable", "variable": "gold", "value": "5"},
            {"type": "advanceTime", "hours": None},
            {"type": "setMapEnabled", "enabled": 1},
            {"type": "roll", "variable": "v", "minimum": 1, "maximum": 6.5},
            {"type": "setVariable", "variable": "v", "value": False},
        ],
    )
    def test_mistyped_fields_are_rejected(self, data):
        with pytest.raises(ValueError):
            effect_from_dict(data)

    def test_set_variable_accepts_string_or_number(self):
        assert effect_from_dict({"type": "setVariable", "variable": "v", "value": "Hero"}).value == "Hero"
        assert effect_from_dict({"type": "setVariable", "variable": "v", "value": 2.5}).value == 2.5
