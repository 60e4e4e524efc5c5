"""
Engine (session controller) for narrative games.

The engine holds the read-only ContentRegistry and the single GameState of
one session. Every player action goes through a method here, and every
method returns a freshly built Snapshot:

    actions in -> effects/conditions over state -> new state -> Snapshot out

Dialogue walking rules:
- Arriving at a node moves the cursor there and applies the node's effects.
- A node without choices then takes one auto-resolve hop: the first passing
  conditional branch, else the default next, else the dialogue ends.
  The hop only moves the cursor; continue_dialogue() takes the next one.
- An effect that starts a dialogue leaves the cursor on an empty node id;
  the engine enters that dialogue at its start node before producing a view.

The runtime never raises on missing content. Lookups that fail leave the
state unchanged or end the dialogue.
"""

import logging
import math
import uuid
from dataclasses import replace
from typing import Any, Iterable, Optional, Union

from narrative_engine.conditions.evaluator import evaluate_condition, evaluate_conditions
from narrative_engine.config import EngineConfig
from narrative_engine.data_models import (
    ContentRegistry,
    Dialogue,
    DialogueNode,
    GameConfig,
    GameMap,
    MapLocation,
)
from narrative_engine.dice import DiceResult, DiceRoller
from narrative_engine.effects.processor import EffectProcessor
from narrative_engine.effects.types import Effect
from narrative_engine.game_state.save_data import SaveData
from narrative_engine.game_state.state import (
    INVENTORY_LOCATION,
    CharacterState,
    DialogueCursor,
    GameState,
    PlayerNote,
)
from narrative_engine.game_state.state_machine import DialogueStateMachine
from narrative_engine.observability.run_log import RunLog
from narrative_engine.snapshot import Snapshot, build_snapshot

logger = logging.getLogger(__name__)


class Engine:
    """
    Session controller.

    Args:
        registry: Static content shared by all sessions
        state: Optional starting state (restored as if loaded)
        config: Engine configuration (defaults if None)
        dice: Random source for roll conditions and effects. A roller seeded
            from config.seed is created if None.
        run_log: Event log for this session (a fresh one if None)
    """

    def __init__(
        self,
        registry: ContentRegistry,
        state: Optional[GameState] = None,
        config: Optional[EngineConfig] = None,
        dice: Optional[DiceRoller] = None,
        run_log: Optional[RunLog] = None,
    ):
        self.registry = registry
        self.config = config or EngineConfig()
        self.run_log = run_log or RunLog()
        self.dice = dice or DiceRoller(seed=self.config.seed)
        if self.dice.on_roll is None:
            self.dice.on_roll = self._on_roll

        self._effects = EffectProcessor(self.dice)
        self.state_machine = DialogueStateMachine(run_log=self.run_log)
        self._state = GameState(
            current_location="",
            map_enabled=self.config.map_enabled,
            current_locale=self.config.default_locale,
        )

        self.run_log.set_seed(self.dice.seed)
        self.run_log.set_game_time_provider(lambda: str(self._state.current_time))

        if state is not None:
            self._state = state
            self._follow_redirect()
            self.state_machine.observe(self._state.dialogue_state, "load_game")

        logger.debug(f"Engine created with registry {registry.summary()}")

    @property
    def state(self) -> GameState:
        """The current session state (immutable)."""
        return self._state

    # =========================================================================
    # SESSION
    # =========================================================================

    def new_game(self, game_config: GameConfig) -> Snapshot:
        """
        Start a new session from starting conditions.

        Character and item state are initialized from the registry, then
        dialogues and interludes triggered at the start location fire.

        Args:
            game_config: Start location, time, flags, variables and inventory

        Returns:
            The first view of the session
        """
        self.run_log.log_action("new_game", start_location=game_config.start_location)

        character_state = {
            character_id: CharacterState(
                location=character.location,
                in_party=False,
                relationship=0,
                stats=dict(character.stats),
            )
            for character_id, character in self.registry.characters.items()
        }
        item_locations = {
            item_id: item.location for item_id, item in self.registry.items.items()
        }

        self._state = GameState(
            current_location=game_config.start_location,
            current_time=game_config.start_time,
            flags=dict(game_config.start_flags),
            variables=dict(game_config.start_variables),
            inventory=tuple(game_config.start_inventory),
            character_state=character_state,
            item_locations=item_locations,
            map_enabled=self.config.map_enabled,
            current_locale=self.config.default_locale,
        )
        logger.info(
            f"New game at '{game_config.start_location}', {game_config.start_time}"
        )

        self._check_triggers()
        return self._finish("new_game")

    def load_game(self, save_data: Union[SaveData, dict[str, Any]]) -> Snapshot:
        """
        Replace the session state with a saved one.

        Args:
            save_data: SaveData or its dictionary form

        Returns:
            View of the restored session

        Raises:
            SaveDataError: If a dictionary record is malformed (the session
                is left untouched)
        """
        if not isinstance(save_data, SaveData):
            save_data = SaveData.from_dict(save_data)

        self.run_log.log_action("load_game", timestamp=save_data.timestamp)
        self._state = GameState.from_dict(save_data.state.to_dict())
        logger.info(f"Loaded save from {save_data.timestamp} (version {save_data.version})")
        return self._finish("load_game")

    def save_game(self) -> SaveData:
        """Capture the current state with a format version and timestamp."""
        self.run_log.log_action("save_game")
        logger.info(f"Saved session at '{self._state.current_location}', {self._state.current_time}")
        # Detached copy; the save never shares containers with the live session
        state = GameState.from_dict(self._state.to_dict())
        return SaveData(version=self.config.save_version, state=state)

    # =========================================================================
    # DIALOGUE
    # =========================================================================

    def select_choice(self, choice_id: str) -> Snapshot:
        """
        Select a choice on the current node.

        Choice visibility is not re-checked here; an unknown choice id or a
        call outside dialogue changes nothing.

        Args:
            choice_id: Id of the chosen choice

        Returns:
            View after the choice's effects and the move to its target
        """
        self.run_log.log_action("select_choice", choice_id=choice_id)

        dialogue, node = self._current_node()
        choice = node.get_choice(choice_id) if node else None
        if choice is None:
            logger.debug(f"Choice '{choice_id}' not available")
            return self._finish("select_choice")

        self._apply(choice.effects, reason=f"choice {choice_id}")

        if not self._follow_redirect():
            next_node = dialogue.get_node(choice.next) if choice.next else None
            if next_node is None:
                self._end_dialogue()
            else:
                self._arrive(dialogue, next_node)

        return self._finish("select_choice")

    def talk_to(self, character_id: str) -> Snapshot:
        """Start the dialogue associated with a character, if any."""
        self.run_log.log_action("talk_to", character_id=character_id)

        character = self.registry.characters.get(character_id)
        if character is None or not character.dialogue:
            logger.debug(f"Character '{character_id}' has nothing to say")
            return self._finish("talk_to")

        self._enter_dialogue(character.dialogue)
        return self._finish("talk_to")

    def continue_dialogue(self) -> Snapshot:
        """Take one auto-resolve hop from the current node if it has no choices."""
        self.run_log.log_action("continue_dialogue")

        dialogue, node = self._current_node()
        if node is not None and not node.choices:
            self._auto_resolve(dialogue, node)
        return self._finish("continue_dialogue")

    # =========================================================================
    # WORLD
    # =========================================================================

    def take_item(self, item_id: str) -> Snapshot:
        """Pick up an item lying at the current location."""
        self.run_log.log_action("take_item", item_id=item_id)

        if self._state.item_locations.get(item_id) != self._state.current_location:
            logger.debug(f"Item '{item_id}' is not at {self._state.current_location}")
            return self._finish("take_item")

        inventory = self._state.inventory
        if item_id not in inventory:
            inventory = inventory + (item_id,)
        self._state = replace(
            self._state,
            inventory=inventory,
            item_locations={**self._state.item_locations, item_id: INVENTORY_LOCATION},
        )
        return self._finish("take_item")

    def travel_to(self, location_id: str) -> Snapshot:
        """
        Travel along the map to another location.

        Travel time is the straight-line distance times the map scale,
        rounded to the nearest hour. Travel ends any dialogue, then the
        first matching dialogue and interlude at the destination fire.

        Args:
            location_id: Destination location id

        Returns:
            View at the destination (unchanged view if travel is impossible)
        """
        self.run_log.log_action("travel", location_id=location_id)

        if not self._state.map_enabled:
            logger.debug("Travel attempted while the map is disabled")
            return self._finish("travel")

        route = self._find_route(location_id)
        if route is None:
            logger.debug(
                f"No map lists both '{self._state.current_location}' and '{location_id}'"
            )
            return self._finish("travel")

        game_map, origin, destination = route
        distance = math.hypot(destination.x - origin.x, destination.y - origin.y)
        hours = math.floor(distance * game_map.scale + 0.5)

        self._state = replace(self._state, current_location=location_id, dialogue_state=None)
        self._advance_clock(hours, reason=f"travel to {location_id}")
        logger.info(f"Travelled to '{location_id}' on map '{game_map.id}' in {hours}h")

        self._check_triggers()
        return self._finish("travel")

    def _find_route(
        self, location_id: str
    ) -> Optional[tuple[GameMap, MapLocation, MapLocation]]:
        for game_map in self.registry.maps.values():
            origin = game_map.find_location(self._state.current_location)
            destination = game_map.find_location(location_id)
            if origin is not None and destination is not None:
                return game_map, origin, destination
        return None

    # =========================================================================
    # NOTES AND LOCALE
    # =========================================================================

    def write_note(self, title: str, text: str) -> Snapshot:
        """Add a free-text player note."""
        note = PlayerNote(id=f"note_{uuid.uuid4().hex}", title=title, text=text)
        self.run_log.log_action("write_note", note_id=note.id)
        self._state = replace(self._state, player_notes=self._state.player_notes + (note,))
        return self._finish("write_note")

    def delete_note(self, note_id: str) -> Snapshot:
        """Remove a player note by id."""
        self.run_log.log_action("delete_note", note_id=note_id)
        self._state = replace(
            self._state,
            player_notes=tuple(n for n in self._state.player_notes if n.id != note_id),
        )
        return self._finish("delete_note")

    def set_locale(self, locale: str) -> Snapshot:
        """Change the active locale; text resolves against it from this view on."""
        self.run_log.log_action("set_locale", locale=locale)
        if locale not in self.registry.locales:
            logger.warning(f"Locale '{locale}' has no strings; keys will show unresolved")
        self._state = replace(self._state, current_locale=locale)
        logger.info(f"Locale set to '{locale}'")
        return self._finish("set_locale")

    def get_snapshot(self) -> Snapshot:
        """Produce the current view without any player action."""
        return self._finish("get_snapshot")

    # =========================================================================
    # DEBUG SURFACE
    # =========================================================================

    def apply_debug_effects(self, effects: Iterable[Effect], label: str = "debug") -> Snapshot:
        """
        Apply effects outside any dialogue or choice.

        Debugging superset of the action surface, used by DebugConsole.

        Args:
            effects: Effects to fold over the state in order
            label: Name of the debug command, recorded in the run log

        Returns:
            View after the effects
        """
        self.run_log.log_action("debug", command=label)
        self._apply(effects, reason=f"debug {label}")
        return self._finish("debug")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _finish(self, trigger: str) -> Snapshot:
        """Resolve pending dialogue starts, build the view, clear transients."""
        self._follow_redirect()
        self.state_machine.observe(self._state.dialogue_state, trigger)

        snapshot = build_snapshot(self._state, self.registry, self.config, self.dice)
        self._state = self._state.clear_transients()
        return snapshot

    def _apply(self, effects: Iterable[Effect], reason: str) -> None:
        before = self._state.current_time
        self._state = self._effects.apply_all(effects, self._state)
        after = self._state.current_time
        if after != before:
            self.run_log.log_time_step(
                old_time=str(before),
                new_time=str(after),
                hours_advanced=(after.day - before.day) * 24 + (after.hour - before.hour),
                reason=reason,
            )

    def _advance_clock(self, hours: int, reason: str) -> None:
        before = self._state.current_time
        after = before.advance(hours)
        self._state = replace(self._state, current_time=after)
        self.run_log.log_time_step(
            old_time=str(before), new_time=str(after), hours_advanced=hours, reason=reason
        )

    def _current_node(self) -> tuple[Optional[Dialogue], Optional[DialogueNode]]:
        cursor = self._state.dialogue_state
        if cursor is None:
            return None, None
        dialogue = self.registry.dialogues.get(cursor.dialogue_id)
        if dialogue is None:
            return None, None
        return dialogue, dialogue.get_node(cursor.node_id)

    def _end_dialogue(self) -> None:
        if self._state.dialogue_state is not None:
            logger.info(f"Dialogue '{self._state.dialogue_state.dialogue_id}' ended")
        self._state = replace(self._state, dialogue_state=None)

    def _enter_dialogue(self, dialogue_id: str, redirects: int = 0) -> None:
        """Enter a dialogue at its start node; a missing one changes nothing."""
        dialogue = self.registry.dialogues.get(dialogue_id)
        start = dialogue.get_node(dialogue.start_node) if dialogue else None
        if start is None:
            logger.warning(f"Dialogue '{dialogue_id}' or its start node not found")
            cursor = self._state.dialogue_state
            if cursor is not None and cursor.needs_start:
                self._end_dialogue()
            return
        logger.info(f"Dialogue '{dialogue_id}' started")
        self._arrive(dialogue, start, redirects)

    def _arrive(self, dialogue: Dialogue, node: DialogueNode, redirects: int = 0) -> None:
        cursor = DialogueCursor(dialogue_id=dialogue.id, node_id=node.id)
        self._state = replace(self._state, dialogue_state=cursor)
        self._apply(node.effects, reason=f"node {dialogue.id}:{node.id}")

        if self._follow_redirect(redirects):
            return
        # Node effects may have ended the dialogue or moved the cursor
        if node.choices or self._state.dialogue_state != cursor:
            return
        self._auto_resolve(dialogue, node)

    def _auto_resolve(self, dialogue: Dialogue, node: DialogueNode) -> None:
        target = self._resolve_next(node)
        if target is None or dialogue.get_node(target) is None:
            self._end_dialogue()
            return
        logger.debug(f"Auto-advancing {dialogue.id}:{node.id} -> {target}")
        self._state = replace(
            self._state,
            dialogue_state=DialogueCursor(dialogue_id=dialogue.id, node_id=target),
        )

    def _resolve_next(self, node: DialogueNode) -> Optional[str]:
        """First passing conditional branch, else the default next."""
        for branch in node.conditional_next:
            if evaluate_condition(branch.condition, self._state, self.dice):
                return branch.next
        return node.next or None

    def _follow_redirect(self, redirects: int = 0) -> bool:
        """Enter a dialogue started by an effect. Returns True if one was pending."""
        cursor = self._state.dialogue_state
        if cursor is None or not cursor.needs_start:
            return False
        if redirects >= self.config.max_dialogue_redirects:
            logger.warning(
                f"Dialogue '{cursor.dialogue_id}' exceeded "
                f"{self.config.max_dialogue_redirects} chained starts; ending dialogue"
            )
            self._end_dialogue()
            return True
        self._enter_dialogue(cursor.dialogue_id, redirects + 1)
        return True

    def _check_triggers(self) -> None:
        """Fire the first matching dialogue, then the first matching interlude."""
        location = self._state.current_location

        for dialogue in self.registry.dialogues.values():
            if dialogue.trigger_location != location:
                continue
            if not evaluate_conditions(dialogue.conditions, self._state, self.dice):
                continue
            if dialogue.get_node(dialogue.start_node) is None:
                continue
            logger.info(f"Dialogue '{dialogue.id}' triggered at '{location}'")
            self._enter_dialogue(dialogue.id)
            break

        for interlude in self.registry.interludes.values():
            if interlude.trigger_location != location:
                continue
            if not evaluate_conditions(interlude.trigger_conditions, self._state, self.dice):
                continue
            logger.info(f"Interlude '{interlude.id}' triggered at '{location}'")
            self._state = replace(self._state, pending_interlude=interlude.id)
            self._apply(interlude.effects, reason=f"interlude {interlude.id}")
            break

    def _on_roll(self, result: DiceResult) -> None:
        self.run_log.log_roll(
            notation=result.notation,
            rolls=result.rolls,
            modifier=0,
            total=result.total,
            reason=result.reason,
        )

    def __repr__(self) -> str:
        return (
            f"Engine(location={self._state.current_location!r}, "
            f"phase={self.state_machine.current_state.value})"
        )
