"""
Run Log for session event tracking.

Captures the deterministic events of a session (dice draws, dialogue
transitions, player actions, clock changes) so a session can be inspected
and replayed. Each engine owns one RunLog.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be logged."""

    ROLL = "roll"  # Random draw
    TRANSITION = "transition"  # Dialogue phase or node change
    ACTION = "action"  # Player action on the engine
    TIME_STEP = "time_step"  # Game clock advancement
    CUSTOM = "custom"  # Custom event


@dataclass
class LogEvent:
    """Base class for all logged events."""

    # Subclasses set the correct value in __post_init__
    event_type: EventType = EventType.CUSTOM
    timestamp: datetime = field(default_factory=datetime.now)
    sequence_number: int = 0
    game_time: Optional[str] = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "game_time": self.game_time,
            "context": self.context,
        }

    @classmethod
    def _base_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": datetime.fromisoformat(data["timestamp"]),
            "sequence_number": data.get("sequence_number", 0),
            "game_time": data.get("game_time"),
            "context": data.get("context", {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEvent":
        """Create from dictionary."""
        return cls(event_type=EventType(data["event_type"]), **cls._base_kwargs(data))

    def __str__(self) -> str:
        name = self.context.get("event_name", self.event_type.value)
        return f"[{self.sequence_number}] {self.event_type.value.upper()} {name}"


@dataclass
class RollEvent(LogEvent):
    """A random draw."""

    notation: str = ""  # e.g. "1..20"
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    reason: str = ""

    def __post_init__(self):
        self.event_type = EventType.ROLL

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "notation": self.notation,
                "rolls": self.rolls,
                "modifier": self.modifier,
                "total": self.total,
                "reason": self.reason,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RollEvent":
        return cls(
            notation=data.get("notation", ""),
            rolls=data.get("rolls", []),
            modifier=data.get("modifier", 0),
            total=data.get("total", 0),
            reason=data.get("reason", ""),
            **cls._base_kwargs(data),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] ROLL {self.notation}: {self.rolls} = {self.total} ({self.reason})"


@dataclass
class TransitionEvent(LogEvent):
    """A dialogue state transition."""

    from_state: str = ""
    to_state: str = ""
    trigger: str = ""

    def __post_init__(self):
        self.event_type = EventType.TRANSITION

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "from_state": self.from_state,
                "to_state": self.to_state,
                "trigger": self.trigger,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransitionEvent":
        return cls(
            from_state=data.get("from_state", ""),
            to_state=data.get("to_state", ""),
            trigger=data.get("trigger", ""),
            **cls._base_kwargs(data),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] TRANSITION {self.from_state} -> {self.to_state} (trigger: {self.trigger})"


@dataclass
class ActionEvent(LogEvent):
    """A player action on the engine."""

    action: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.event_type = EventType.ACTION

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update({"action": self.action, "arguments": self.arguments})
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionEvent":
        return cls(
            action=data.get("action", ""),
            arguments=data.get("arguments", {}),
            **cls._base_kwargs(data),
        )

    def __str__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.arguments.items())
        return f"[{self.sequence_number}] ACTION {self.action}({args})"


@dataclass
class TimeStepEvent(LogEvent):
    """A game clock advancement."""

    old_time: str = ""
    new_time: str = ""
    hours_advanced: float = 0
    reason: str = ""

    def __post_init__(self):
        self.event_type = EventType.TIME_STEP

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "old_time": self.old_time,
                "new_time": self.new_time,
                "hours_advanced": self.hours_advanced,
                "reason": self.reason,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeStepEvent":
        return cls(
            old_time=data.get("old_time", ""),
            new_time=data.get("new_time", ""),
            hours_advanced=data.get("hours_advanced", 0),
            reason=data.get("reason", ""),
            **cls._base_kwargs(data),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] TIME {self.old_time} -> {self.new_time} (+{self.hours_advanced}h, {self.reason})"


_EVENT_CLASSES: dict[EventType, type[LogEvent]] = {
    EventType.ROLL: RollEvent,
    EventType.TRANSITION: TransitionEvent,
    EventType.ACTION: ActionEvent,
    EventType.TIME_STEP: TimeStepEvent,
    EventType.CUSTOM: LogEvent,
}


class RunLog:
    """
    Event log for one session.

    Captures rolls, dialogue transitions, actions and time changes, and
    notifies subscribers as events arrive.
    """

    def __init__(self):
        self._events: list[LogEvent] = []
        self._sequence: int = 0
        self._seed: Optional[int] = None
        self._session_start: datetime = datetime.now()
        self._game_time_provider: Optional[Callable[[], str]] = None
        self._subscribers: list[Callable[[LogEvent], None]] = []
        self._paused: bool = False

    def reset(self) -> None:
        """Reset the log for a new session."""
        self._events = []
        self._sequence = 0
        self._session_start = datetime.now()
        logger.info("RunLog reset")

    def set_seed(self, seed: Optional[int]) -> None:
        """Record the RNG seed used for this session."""
        self._seed = seed
        logger.info(f"RunLog seed set: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def set_game_time_provider(self, provider: Callable[[], str]) -> None:
        """Set a callback returning the current in-game time as text."""
        self._game_time_provider = provider

    def pause(self) -> None:
        """Pause logging."""
        self._paused = True

    def resume(self) -> None:
        """Resume logging."""
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Callable[[LogEvent], None]) -> None:
        """Subscribe to receive events as they are logged."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogEvent], None]) -> None:
        """Unsubscribe from events."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _log_event(self, event: LogEvent) -> None:
        if self._paused:
            return

        self._sequence += 1
        event.sequence_number = self._sequence
        if self._game_time_provider:
            event.game_time = self._game_time_provider()
        self._events.append(event)

        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(f"Subscriber error: {e}")

    def log_roll(
        self,
        notation: str,
        rolls: list[int],
        modifier: int,
        total: int,
        reason: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> RollEvent:
        """Log a random draw."""
        event = RollEvent(
            notation=notation,
            rolls=list(rolls),
            modifier=modifier,
            total=total,
            reason=reason,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_transition(
        self,
        from_state: str,
        to_state: str,
        trigger: str,
        context: Optional[dict[str, Any]] = None,
    ) -> TransitionEvent:
        """Log a dialogue state transition."""
        event = TransitionEvent(
            from_state=from_state,
            to_state=to_state,
            trigger=trigger,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_action(self, action: str, **arguments: Any) -> ActionEvent:
        """Log a player action and its arguments."""
        event = ActionEvent(action=action, arguments=arguments)
        self._log_event(event)
        return event

    def log_time_step(
        self,
        old_time: str,
        new_time: str,
        hours_advanced: float = 0,
        reason: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> TimeStepEvent:
        """Log a clock advancement."""
        event = TimeStepEvent(
            old_time=old_time,
            new_time=new_time,
            hours_advanced=hours_advanced,
            reason=reason,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_custom(self, event_name: str, details: dict[str, Any]) -> LogEvent:
        """Log a custom event."""
        event = LogEvent(
            event_type=EventType.CUSTOM,
            context={"event_name": event_name, **details},
        )
        self._log_event(event)
        return event

    def get_events(
        self,
        event_type: Optional[EventType] = None,
        since_sequence: int = 0,
    ) -> list[LogEvent]:
        """
        Get logged events.

        Args:
            event_type: Filter by event type (None = all)
            since_sequence: Only events after this sequence number

        Returns:
            List of events
        """
        events = [e for e in self._events if e.sequence_number > since_sequence]
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        return events

    def get_rolls(self) -> list[RollEvent]:
        return [e for e in self._events if isinstance(e, RollEvent)]

    def get_transitions(self) -> list[TransitionEvent]:
        return [e for e in self._events if isinstance(e, TransitionEvent)]

    def get_actions(self) -> list[ActionEvent]:
        return [e for e in self._events if isinstance(e, ActionEvent)]

    def get_time_steps(self) -> list[TimeStepEvent]:
        return [e for e in self._events if isinstance(e, TimeStepEvent)]

    def get_roll_stream(self) -> list[int]:
        """Totals of every draw in order, for replay."""
        return [e.total for e in self.get_rolls()]

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the run log."""
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "total_events": len(self._events),
            "rolls": len(self.get_rolls()),
            "transitions": len(self.get_transitions()),
            "actions": len(self.get_actions()),
            "time_steps": len(self.get_time_steps()),
            "last_sequence": self._sequence,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize the entire log to a dictionary."""
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "sequence": self._sequence,
            "events": [e.to_dict() for e in self._events],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunLog":
        """Rebuild a log from to_dict() output."""
        log = cls()
        log._session_start = datetime.fromisoformat(data["session_start"])
        log._seed = data.get("seed")
        log._sequence = data.get("sequence", 0)
        for event_data in data.get("events", []):
            event_class = _EVENT_CLASSES[EventType(event_data["event_type"])]
            log._events.append(event_class.from_dict(event_data))
        return log

    def format_log(
        self,
        event_types: Optional[list[EventType]] = None,
        max_events: Optional[int] = None,
    ) -> str:
        """
        Format the log as a human-readable string.

        Args:
            event_types: Filter by event types (None = all)
            max_events: Maximum number of events to include

        Returns:
            Formatted log string
        """
        lines = [
            "=== Run Log ===",
            f"Session: {self._session_start.isoformat()}",
            f"Seed: {self._seed if self._seed is not None else 'not set'}",
            f"Total Events: {len(self._events)}",
            "",
        ]

        events = self._events
        if event_types:
            events = [e for e in events if e.event_type in event_types]
        if max_events:
            events = events[-max_events:]

        for event in events:
            lines.append(str(event))

        return "\n".join(lines)
