"""
Acer Challenge Round Engine.

Pure Python game logic with zero UI/database dependencies.
Handles puzzle generation, operation rules, the best-answer solver,
the round state machine, and scoring.
"""

from src.engine.base import (
    BestSolution,
    ChallengeScore,
    GamePhase,
    Operation,
    OperationResult,
    RoundConfig,
    RoundPayload,
    RoundResult,
    ScoringPolicy,
    TargetDigit,
    Tile,
    TileKind,
)
from src.engine.events import Announcer, Cue, EventPayload, RoundEvent, SilentAnnouncer
from src.engine.puzzle import PuzzleGenerator
from src.engine.random_source import RandomSource
from src.engine.round_engine import RoundEngine, RoundSnapshot, RoundState
from src.engine.rules import RuleViolation, apply_operation
from src.engine.scheduler import AsyncioScheduler, CancelToken, ManualScheduler
from src.engine.scoring import ScoringModel, score_for_diff
from src.engine.solver import solve

__all__ = [
    # Data Classes
    "BestSolution",
    "ChallengeScore",
    "OperationResult",
    "RoundConfig",
    "RoundPayload",
    "RoundResult",
    "RoundSnapshot",
    "RoundState",
    "TargetDigit",
    "Tile",
    # Enums
    "Cue",
    "GamePhase",
    "Operation",
    "RoundEvent",
    "ScoringPolicy",
    "TileKind",
    # Collaborator interfaces
    "Announcer",
    "EventPayload",
    "SilentAnnouncer",
    # Scheduling
    "AsyncioScheduler",
    "CancelToken",
    "ManualScheduler",
    # Engine
    "PuzzleGenerator",
    "RandomSource",
    "RoundEngine",
    "RuleViolation",
    "ScoringModel",
    "apply_operation",
    "score_for_diff",
    "solve",
]
