"""
Debug console for a running session.

DebugConsole offers developer commands (set flags, teleport, start
dialogues, edit inventory, inspect state). Every mutation is expressed as
effects applied through Engine.apply_debug_effects(), so the console never
touches engine internals and every change shows up in the run log.

Commands can also be issued as text lines, e.g. from a REPL:

    console.run("set_variable gold 50")
    console.run("teleport tavern")
"""

import inspect
import logging
import shlex
from typing import Any, Callable, Optional

from narrative_engine.dsl.expressions import parse_value
from narrative_engine.effects.types import (
    AddItemEffect,
    ClearFlagEffect,
    GoToLocationEffect,
    RemoveItemEffect,
    SetFlagEffect,
    SetQuestStageEffect,
    SetVariableEffect,
    StartDialogueEffect,
)
from narrative_engine.engine.engine import Engine
from narrative_engine.game_state.state import Scalar
from narrative_engine.snapshot import Snapshot

logger = logging.getLogger(__name__)

COMMANDS = (
    "set_flag",
    "clear_flag",
    "set_variable",
    "get_variable",
    "teleport",
    "trigger_dialogue",
    "set_quest_stage",
    "add_item",
    "remove_item",
    "inspect",
    "inspect_state",
    "inspect_registry",
)


class DebugConsole:
    """
    Scoped debugging API over one engine.

    Args:
        engine: The session to debug
        on_update: Optional callback receiving the view after each mutation
    """

    def __init__(
        self,
        engine: Engine,
        on_update: Optional[Callable[[Snapshot], None]] = None,
    ):
        self.engine = engine
        self.on_update = on_update

    def _mutate(self, label: str, effects: list) -> Snapshot:
        snapshot = self.engine.apply_debug_effects(effects, label=label)
        if self.on_update:
            self.on_update(snapshot)
        return snapshot

    # =========================================================================
    # FLAGS AND VARIABLES
    # =========================================================================

    def set_flag(self, flag: str) -> Snapshot:
        snapshot = self._mutate("set_flag", [SetFlagEffect(flag=flag)])
        logger.info(f"Flag set: {flag}")
        return snapshot

    def clear_flag(self, flag: str) -> Snapshot:
        snapshot = self._mutate("clear_flag", [ClearFlagEffect(flag=flag)])
        logger.info(f"Flag cleared: {flag}")
        return snapshot

    def set_variable(self, variable: str, value: Scalar) -> Snapshot:
        snapshot = self._mutate(
            "set_variable", [SetVariableEffect(variable=variable, value=value)]
        )
        logger.info(f"Variable set: {variable} = {value}")
        return snapshot

    def get_variable(self, variable: str) -> Optional[Scalar]:
        value = self.engine.state.variables.get(variable)
        logger.info(f"Variable: {variable} = {value}")
        return value

    # =========================================================================
    # WORLD AND DIALOGUE
    # =========================================================================

    def teleport(self, location_id: str) -> Optional[Snapshot]:
        """
        Move straight to a location.

        No time passes and no dialogues or interludes trigger.
        """
        if location_id not in self.engine.registry.locations:
            logger.error(f"Location not found: {location_id}")
            return None
        snapshot = self._mutate("teleport", [GoToLocationEffect(location_id=location_id)])
        logger.info(f"Teleported to: {location_id}")
        return snapshot

    def trigger_dialogue(self, dialogue_id: str) -> Optional[Snapshot]:
        """
        Start a dialogue at its start node.

        Returns:
            The view inside the dialogue, or None if the dialogue or its
            start node does not exist
        """
        dialogue = self.engine.registry.dialogues.get(dialogue_id)
        if dialogue is None:
            logger.error(f"Dialogue not found: {dialogue_id}")
            return None
        if dialogue.get_node(dialogue.start_node) is None:
            logger.error(f"Start node not found for dialogue: {dialogue_id}")
            return None

        snapshot = self._mutate(
            "trigger_dialogue", [StartDialogueEffect(dialogue_id=dialogue_id)]
        )
        logger.info(f"Triggered dialogue: {dialogue_id}")
        return snapshot

    def set_quest_stage(self, quest_id: str, stage_id: str) -> Snapshot:
        snapshot = self._mutate(
            "set_quest_stage", [SetQuestStageEffect(quest_id=quest_id, stage_id=stage_id)]
        )
        logger.info(f"Quest stage set: {quest_id} -> {stage_id}")
        return snapshot

    # =========================================================================
    # INVENTORY
    # =========================================================================

    def add_item(self, item_id: str) -> Optional[Snapshot]:
        if item_id in self.engine.state.inventory:
            logger.info(f"Item already in inventory: {item_id}")
            return None
        snapshot = self._mutate("add_item", [AddItemEffect(item_id=item_id)])
        logger.info(f"Item added: {item_id}")
        return snapshot

    def remove_item(self, item_id: str) -> Optional[Snapshot]:
        if item_id not in self.engine.state.inventory:
            logger.info(f"Item not in inventory: {item_id}")
            return None
        snapshot = self._mutate("remove_item", [RemoveItemEffect(item_id=item_id)])
        logger.info(f"Item removed: {item_id}")
        return snapshot

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def inspect_state(self) -> dict[str, Any]:
        """The session state in dictionary form."""
        return self.engine.state.to_dict()

    def inspect_registry(self) -> dict[str, int]:
        """Entity counts of the content registry."""
        return self.engine.registry.summary()

    def inspect(self) -> str:
        """Human-readable overview of the session and the available commands."""
        state = self.engine.state
        lines = [
            "=== NARRATIVE ENGINE INSPECTOR ===",
            f"Location: {state.current_location}",
            f"Time: {state.current_time}",
            f"Phase: {self.engine.state_machine.current_state.value}",
            f"Flags: {sorted(k for k, v in state.flags.items() if v)}",
            f"Variables: {dict(state.variables)}",
            f"Inventory: {list(state.inventory)}",
            f"Quests: {dict(state.quest_progress)}",
            "",
            "Commands: " + ", ".join(COMMANDS),
        ]
        report = "\n".join(lines)
        logger.info(report)
        return report

    # =========================================================================
    # TEXT COMMANDS
    # =========================================================================

    def run(self, command_line: str) -> Any:
        """
        Run a command written as text.

        The first word names the command, the rest are its arguments.
        set_variable values are coerced to numbers where they parse.

        Args:
            command_line: e.g. "set_quest_stage main_quest act_two"

        Returns:
            The command's return value, or None if the command is unknown
            or its arguments do not fit
        """
        parts = shlex.split(command_line)
        if not parts:
            return None

        name, args = parts[0], parts[1:]
        if name not in COMMANDS:
            logger.error(f"Unknown debug command: {name}")
            return None
        if name == "set_variable" and len(args) == 2:
            args = [args[0], parse_value(args[1])]

        command = getattr(self, name)
        try:
            inspect.signature(command).bind(*args)
        except TypeError as e:
            logger.error(f"Bad arguments for {name}: {e}")
            return None

        self.engine.run_log.log_custom("debug_command", {"command": name, "arguments": args})
        return command(*args)
