"""
Acer Challenge - Round Event Definitions

Events the round engine emits to its presentation collaborator, and the
narrow interfaces it uses for speech and sound cues.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol

from src.engine.base import GamePhase


class RoundEvent(Enum):
    """Things that can happen during a round."""

    ROUND_REVEALED = auto()
    TILE_REVEALED = auto()
    TARGET_ROLLING = auto()
    DIGIT_LOCKED = auto()
    TARGET_COMMITTED = auto()
    TIMER_STARTED = auto()
    TIMER_TICK = auto()
    SELECTION_CHANGED = auto()
    OPERATION_APPLIED = auto()
    RULE_VIOLATION = auto()
    UNDONE = auto()
    WORK_RESET = auto()
    ROUND_ENDED = auto()


@dataclass
class EventPayload:
    """Wrapper for round event data."""

    event: RoundEvent
    phase: GamePhase
    data: dict[str, Any] = field(default_factory=dict)


class Cue(Enum):
    """Tone cues the engine may ask for."""

    BUZZER = "buzzer"
    BOOM = "boom"


class Announcer(Protocol):
    """Speech and sound collaborator; the engine never owns its lifecycle."""

    def announce(self, text: str) -> None: ...

    def play_cue(self, cue: Cue) -> None: ...


class SilentAnnouncer:
    """Announcer that does nothing; the default for headless use."""

    def announce(self, text: str) -> None:
        return None

    def play_cue(self, cue: Cue) -> None:
        return None
