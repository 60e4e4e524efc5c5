"""Immutable render-ready views of a session."""

from narrative_engine.snapshot.builder import build_snapshot
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
)

__all__ = [
    "Snapshot",
    "SnapshotCharacter",
    "SnapshotChoice",
    "SnapshotDialogue",
    "SnapshotInterlude",
    "SnapshotItem",
    "SnapshotJournalEntry",
    "SnapshotLocation",
    "SnapshotMap",
    "SnapshotMapLocation",
    "SnapshotNote",
    "SnapshotQuest",
    "SnapshotTime",
    "build_snapshot",
]
