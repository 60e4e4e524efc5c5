"""
Snapshot builder.

build_snapshot() projects (state, registry) into an immutable Snapshot.
It never changes the state; clearing transient fields after a view is
produced is the engine's job.
"""

import logging
from typing import Callable, Optional

from narrative_engine.conditions.evaluator import evaluate_conditions
from narrative_engine.config import EngineConfig
from narrative_engine.data_models import ContentRegistry
from narrative_engine.dice import DiceRoller
from narrative_engine.game_state.state import CharacterState, GameState
from narrative_engine.localization import create_resolver
from narrative_engine.snapshot.models import (
    Snapshot,
    SnapshotCharacter,
    SnapshotChoice,
    SnapshotDialogue,
    SnapshotInterlude,
    SnapshotItem,
    SnapshotJournalEntry,
    SnapshotLocation,
    SnapshotMap,
    SnapshotMapLocation,
    SnapshotNote,
    SnapshotQuest,
    SnapshotTime,
    frozen_mapping,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[str], str]


def build_snapshot(
    state: GameState,
    registry: ContentRegistry,
    config: Optional[EngineConfig] = None,
    dice: Optional[DiceRoller] = None,
) -> Snapshot:
    """
    Build a view of the current state.

    Args:
        state: Current game state
        registry: Static content
        config: Narrator label and interlude defaults (defaults if None)
        dice: Random source for roll conditions on choices

    Returns:
        A fully resolved Snapshot
    """
    config = config or EngineConfig()
    dice = dice or DiceRoller()

    locale_data = registry.locales.get(state.current_locale, {})
    resolve = create_resolver(locale_data, state.variables)

    dialogue, choices = _build_dialogue(state, registry, resolve, config, dice)
    location_data = registry.locations.get(state.current_location)

    return Snapshot(
        location=_build_location(state.current_location, registry, resolve),
        characters_here=tuple(
            _character_view(registry, cid, cs, resolve)
            for cid, cs in state.character_state.items()
            if cs.location == state.current_location and cid in registry.characters
        ),
        items_here=tuple(
            _item_view(registry, item_id, resolve)
            for item_id, location_id in state.item_locations.items()
            if location_id == state.current_location and item_id in registry.items
        ),
        choices=choices,
        dialogue=dialogue,
        party=tuple(
            _character_view(registry, cid, cs, resolve)
            for cid, cs in state.character_state.items()
            if cs.in_party and cid in registry.characters
        ),
        inventory=tuple(
            _item_view(registry, item_id, resolve)
            for item_id in state.inventory
            if item_id in registry.items
        ),
        quests=_build_quests(state, registry, resolve),
        journal=tuple(
            SnapshotJournalEntry(
                id=entry.id,
                title=resolve(entry.title),
                text=resolve(entry.text),
                category=entry.category,
            )
            for entry in (
                registry.journal_entries.get(eid) for eid in state.unlocked_journal_entries
            )
            if entry is not None
        ),
        notes=tuple(
            SnapshotNote(id=note.id, title=note.title, text=note.text)
            for note in state.player_notes
        ),
        variables=frozen_mapping(state.variables),
        time=SnapshotTime(day=state.current_time.day, hour=state.current_time.hour),
        map=_build_map(state, registry, resolve) if state.map_enabled else None,
        music=location_data.music if location_data else "",
        ambient=location_data.ambient if location_data else "",
        notifications=tuple(resolve(n) for n in state.notifications),
        pending_sounds=tuple(state.pending_sounds),
        pending_video=state.pending_video,
        pending_interlude=_build_interlude(state, registry, resolve, config),
        locale=state.current_locale,
    )


# =============================================================================
# SECTION BUILDERS
# =============================================================================


def _build_location(location_id: str, registry: ContentRegistry, resolve: Resolver) -> SnapshotLocation:
    location = registry.locations.get(location_id)
    if location is None:
        return SnapshotLocation(
            id=location_id,
            name=location_id,
            description=f"Location not found: {location_id}",
            banner="",
        )
    return SnapshotLocation(
        id=location.id,
        name=resolve(location.name),
        description=resolve(location.description),
        banner=location.banner,
    )


def _character_view(
    registry: ContentRegistry,
    character_id: str,
    character_state: CharacterState,
    resolve: Resolver,
) -> SnapshotCharacter:
    character = registry.characters[character_id]
    return SnapshotCharacter(
        id=character.id,
        name=resolve(character.name),
        biography=resolve(character.biography),
        portrait=character.portrait,
        location=character_state.location,
        in_party=character_state.in_party,
        relationship=character_state.relationship,
        stats=frozen_mapping(character_state.stats),
    )


def _item_view(registry: ContentRegistry, item_id: str, resolve: Resolver) -> SnapshotItem:
    item = registry.items[item_id]
    return SnapshotItem(
        id=item.id,
        name=resolve(item.name),
        description=resolve(item.description),
        icon=item.icon,
        image=item.image,
        stats=frozen_mapping(item.stats),
    )


def _build_dialogue(
    state: GameState,
    registry: ContentRegistry,
    resolve: Resolver,
    config: EngineConfig,
    dice: DiceRoller,
) -> tuple[Optional[SnapshotDialogue], tuple[SnapshotChoice, ...]]:
    cursor = state.dialogue_state
    if cursor is None:
        return None, ()

    dialogue = registry.dialogues.get(cursor.dialogue_id)
    node = dialogue.get_node(cursor.node_id) if dialogue else None
    if node is None:
        return None, ()

    character = registry.characters.get(node.speaker) if node.speaker else None
    if node.speaker is None:
        speaker_name = config.narrator_label
    else:
        speaker_name = resolve(character.name if character else node.speaker)

    view = SnapshotDialogue(
        speaker=node.speaker,
        speaker_name=speaker_name,
        text=resolve(node.text),
        portrait=node.portrait or (character.portrait if character else None) or None,
        voice=node.voice,
    )
    choices = tuple(
        SnapshotChoice(id=choice.id, text=resolve(choice.text))
        for choice in node.choices
        if evaluate_conditions(choice.conditions, state, dice)
    )
    return view, choices


def _build_quests(
    state: GameState, registry: ContentRegistry, resolve: Resolver
) -> tuple[SnapshotQuest, ...]:
    quests = []
    for quest_id, stage_id in state.quest_progress.items():
        quest = registry.quests.get(quest_id)
        stage = quest.get_stage(stage_id) if quest else None
        if stage is None:
            continue
        quests.append(SnapshotQuest(
            id=quest.id,
            name=resolve(quest.name),
            description=resolve(quest.description),
            current_stage=stage.id,
            current_stage_description=resolve(stage.description),
        ))
    return tuple(quests)


def _build_map(
    state: GameState, registry: ContentRegistry, resolve: Resolver
) -> Optional[SnapshotMap]:
    # First map in registry order, regardless of the current location
    game_map = next(iter(registry.maps.values()), None)
    if game_map is None:
        return None

    markers = []
    for marker in game_map.locations:
        location = registry.locations.get(marker.id)
        markers.append(SnapshotMapLocation(
            id=marker.id,
            name=resolve(location.name) if location else marker.id,
            x=marker.x,
            y=marker.y,
            is_current=marker.id == state.current_location,
        ))
    return SnapshotMap(
        id=game_map.id,
        name=resolve(game_map.name),
        image=game_map.image,
        scale=game_map.scale,
        locations=tuple(markers),
    )


def _build_interlude(
    state: GameState,
    registry: ContentRegistry,
    resolve: Resolver,
    config: EngineConfig,
) -> Optional[SnapshotInterlude]:
    if not state.pending_interlude:
        return None
    interlude = registry.interludes.get(state.pending_interlude)
    if interlude is None:
        logger.debug(f"Pending interlude '{state.pending_interlude}' not in registry")
        return None
    return SnapshotInterlude(
        id=interlude.id,
        background=interlude.background,
        text=resolve(interlude.text),
        banner=interlude.banner,
        music=interlude.music,
        voice=interlude.voice,
        sounds=tuple(interlude.sounds),
        scroll=config.interlude_scroll if interlude.scroll is None else interlude.scroll,
        scroll_speed=(
            config.interlude_scroll_speed
            if interlude.scroll_speed is None
            else interlude.scroll_speed
        ),
    )
