"""
Acer Challenge - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the round engine. Value types are immutable (frozen dataclasses) so that round
snapshots and undo checkpoints can be shared freely without defensive copies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence


class TileKind(Enum):
    """Where a tile came from."""
    LARGE = "large"
    SMALL = "small"
    RESULT = "result"


class Operation(Enum):
    """The four arithmetic operations a player may apply to two tiles."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @property
    def symbol(self) -> str:
        """Display symbol used in work log and solution steps."""
        return _OPERATION_SYMBOLS[self]

    @property
    def is_commutative(self) -> bool:
        return self in (Operation.ADD, Operation.MULTIPLY)

    @classmethod
    def parse(cls, op: "Operation | str") -> "Operation":
        """Accept an Operation, its ASCII value, or its display symbol."""
        if isinstance(op, Operation):
            return op
        for candidate in cls:
            if op in (candidate.value, candidate.symbol):
                return candidate
        raise ValueError(f"Unsupported operation {op!r}.")


_OPERATION_SYMBOLS = {
    Operation.ADD: "+",
    Operation.SUBTRACT: "-",
    Operation.MULTIPLY: "×",
    Operation.DIVIDE: "÷",
}


class GamePhase(Enum):
    """Position of a round in its lifecycle."""
    IDLE = "IDLE"
    REVEALING_TILES = "REVEALING_TILES"
    TARGET_ROLLING = "TARGET_ROLLING"
    READY = "READY"
    RUNNING = "RUNNING"
    ENDED = "ENDED"

    @property
    def is_active(self) -> bool:
        """True while a round is in progress (neither at rest nor finished)."""
        return self not in (GamePhase.IDLE, GamePhase.ENDED)


class ScoringPolicy(Enum):
    """Named scoring presets."""
    ACCURACY_ONLY = "accuracy_only"
    ACCURACY_PLUS_TIME = "accuracy_plus_time"


# Allowed timer settings in seconds; 0 means unlimited.
TIMER_CHOICES: tuple[int, ...] = (30, 60, 0)

TILE_COUNT = 6
MAX_LARGE_COUNT = 4
TARGET_MIN = 100
TARGET_MAX = 999


@dataclass(frozen=True)
class Tile:
    """
    A numeric playing piece.

    Attributes:
        id: Opaque identifier, stable for the life of the tile
        value: Positive integer value
        kind: Whether the tile was drawn large, drawn small, or produced by an operation
        revealed: Whether the tile has been flipped face up
    """
    id: str
    value: int
    kind: TileKind
    revealed: bool = False

    def __post_init__(self) -> None:
        """Validate tile value is a positive integer."""
        if not isinstance(self.value, int) or isinstance(self.value, bool) or self.value < 1:
            raise ValueError(f"Tile value must be a positive integer, got {self.value!r}.")

    def with_revealed(self, revealed: bool = True) -> "Tile":
        """Return a copy with the revealed flag set."""
        return Tile(id=self.id, value=self.value, kind=self.kind, revealed=revealed)


@dataclass(frozen=True)
class OperationResult:
    """
    Output of combining two tile values.

    Attributes:
        value: The positive integer result
        expression: Human-readable step, e.g. "25 × 8 = 200"
    """
    value: int
    expression: str


@dataclass(frozen=True)
class BestSolution:
    """
    Closest value the solver could reach, with one derivation.

    Attributes:
        value: Best reachable value
        diff: Absolute distance to the target (0 if exact)
        steps: Ordered expression strings that produce the value
    """
    value: int
    diff: int
    steps: tuple[str, ...] = ()

    @property
    def exact(self) -> bool:
        return self.diff == 0

    def __str__(self) -> str:
        if not self.steps:
            return f"{self.value} (no steps)"
        return "\n".join(self.steps)


@dataclass(frozen=True)
class ChallengeScore:
    """
    Points awarded for one round.

    Attributes:
        points: Total points (accuracy + time)
        accuracy_component: Points from closeness to the target
        time_component: Points from unused time (accuracy-plus-time policy only)
        final_value: The value the player locked in, or None on timeout
        diff: Distance of final_value from the target, or None on timeout
        exact: Whether the locked-in value hit the target
        time_remaining: Seconds left on the clock when the round ended
    """
    points: int
    accuracy_component: int
    time_component: int
    final_value: int | None
    diff: int | None
    exact: bool
    time_remaining: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": self.points,
            "accuracy_component": self.accuracy_component,
            "time_component": self.time_component,
            "final_value": self.final_value,
            "diff": self.diff,
            "exact": self.exact,
            "time_remaining": self.time_remaining,
        }


@dataclass(frozen=True)
class TargetDigit:
    """One slot of the target display; "-" before rolling begins."""
    value: str = "-"
    locked: bool = False


BLANK_DIGITS: tuple[TargetDigit, ...] = (TargetDigit(), TargetDigit(), TargetDigit())


@dataclass(frozen=True)
class RoundPayload:
    """
    Everything needed to replay a round elsewhere.

    A server handing the same payload (or the same seed) to several
    clients gives every player an identical puzzle.
    """
    tiles: tuple[int, ...]
    target: int
    seed: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"tiles": list(self.tiles), "target": self.target}
        if self.seed is not None:
            data["seed"] = self.seed
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundPayload":
        seed = data.get("seed")
        return cls(
            tiles=tuple(int(v) for v in data["tiles"]),
            target=int(data["target"]),
            seed=str(seed) if seed is not None else None,
        )


@dataclass(frozen=True)
class RoundResult:
    """
    Record emitted once per finished round for the persistence collaborator.

    Attributes:
        tiles_at_start: The six original tile values
        target: The committed target
        user_final_value: Locked-in value, or None on timeout
        work_steps: Expressions the player applied, in order
        best_solution: Solver output, or None if no value was reachable
        points: Points awarded
        did_submit: Whether the player locked in before time ran out
        diff: Distance of user_final_value from target, or None on timeout
        exact: Whether the player hit the target
        score: Full scoring breakdown
        finished_at: UTC timestamp of the end of the round
    """
    tiles_at_start: tuple[int, ...]
    target: int
    user_final_value: int | None
    work_steps: tuple[str, ...]
    best_solution: BestSolution | None
    points: int
    did_submit: bool
    diff: int | None
    exact: bool
    score: ChallengeScore
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def outcome(self) -> str:
        return "OK" if self.did_submit else "FAIL"

    def to_dict(self) -> dict[str, Any]:
        best = self.best_solution
        return {
            "tiles_at_start": list(self.tiles_at_start),
            "target": self.target,
            "user_final_value": self.user_final_value,
            "work_steps": list(self.work_steps),
            "best_solution": (
                {"value": best.value, "diff": best.diff, "steps": list(best.steps)}
                if best is not None else None
            ),
            "points": self.points,
            "did_submit": self.did_submit,
            "diff": self.diff,
            "exact": self.exact,
            "outcome": self.outcome,
            "score": self.score.to_dict(),
            "finished_at": self.finished_at.isoformat(),
        }


@dataclass(frozen=True)
class RoundConfig:
    """
    Configuration for a round engine.

    Attributes:
        large_count: Default number of large tiles (clamped to 0-4)
        timer_seconds: Countdown length, one of TIMER_CHOICES (0 = unlimited)
        scoring_policy: Which scoring preset to apply
        auto_start_delay: Seconds between READY and RUNNING (0 = immediately)
        tile_reveal_interval: Seconds between successive tile reveals
        target_roll_pause: Pause after the last tile before the target rolls
        digit_lock_times: Elapsed roll seconds at which each digit locks
        frame_interval: Seconds between target animation frames
        countdown_announce_from: Announce remaining seconds at or below this
    """
    large_count: int = 1
    timer_seconds: int = 30
    scoring_policy: ScoringPolicy = ScoringPolicy.ACCURACY_ONLY
    auto_start_delay: float = 10.0
    tile_reveal_interval: float = 1.0
    target_roll_pause: float = 2.0
    digit_lock_times: tuple[float, float, float] = (4.0, 6.0, 7.0)
    frame_interval: float = 1 / 60
    countdown_announce_from: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        # validators imports this module, so import at call time.
        from src.engine.validators import validate_large_count

        object.__setattr__(self, "large_count", validate_large_count(self.large_count))

        if self.timer_seconds not in TIMER_CHOICES:
            raise ValueError(
                f"Timer must be one of {TIMER_CHOICES} seconds, got {self.timer_seconds}."
            )

        for name in ("auto_start_delay", "tile_reveal_interval", "target_roll_pause"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative.")

        if self.frame_interval <= 0:
            raise ValueError("frame_interval must be positive.")

        times = tuple(self.digit_lock_times)
        if len(times) != 3:
            raise ValueError("digit_lock_times needs exactly 3 entries.")
        if any(later <= earlier for earlier, later in zip(times, times[1:])) or times[0] < 0:
            raise ValueError("digit_lock_times must be non-negative and strictly increasing.")
        object.__setattr__(self, "digit_lock_times", times)

    @property
    def is_unlimited(self) -> bool:
        return self.timer_seconds == 0

    @classmethod
    def from_settings(cls, settings: Any) -> "RoundConfig":
        """Build a config from application Settings."""
        return cls(
            large_count=settings.large_count,
            timer_seconds=settings.timer_seconds,
            scoring_policy=ScoringPolicy(settings.scoring_policy),
            auto_start_delay=settings.auto_start_delay,
        )


def tile_values(tiles: Sequence[Tile]) -> tuple[int, ...]:
    """Values of a tile sequence, in order."""
    return tuple(tile.value for tile in tiles)
