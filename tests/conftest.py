"""
Acer Challenge - Test Configuration and Fixtures

Common fixtures and test doubles for all test modules.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Sequence
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from src.engine.base import BestSolution, ChallengeScore, GamePhase, RoundConfig, RoundResult, Tile
from src.engine.events import Cue, EventPayload, RoundEvent
from src.engine.random_source import RandomSource
from src.engine.round_engine import RoundEngine
from src.engine.scheduler import ManualScheduler


# =============================================================================
# TEST DOUBLES
# =============================================================================

class FixedRandom(RandomSource):
    """
    Random source that never shuffles and always draws the same uniform.

    With the default 0.0 a one-large round deals 25, 1, 1, 2, 2, 3 and
    rolls the target 100.
    """

    def __init__(self, uniform: float = 0.0) -> None:
        super().__init__()
        self.uniform = uniform

    def next_uniform(self) -> float:
        return self.uniform

    def shuffle(self, items: Sequence[Any]) -> list[Any]:
        return list(items)


class RecordingAnnouncer:
    """Announcer that remembers everything it was asked to say or play."""

    def __init__(self) -> None:
        self.texts: list[str] = []
        self.cues: list[Cue] = []

    def announce(self, text: str) -> None:
        self.texts.append(text)

    def play_cue(self, cue: Cue) -> None:
        self.cues.append(cue)


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def announcer() -> RecordingAnnouncer:
    return RecordingAnnouncer()


@pytest.fixture
def events() -> list[EventPayload]:
    return []


@pytest.fixture
def fast_config() -> RoundConfig:
    """Short timings; the clock starts as soon as the target locks."""
    return RoundConfig(
        auto_start_delay=0,
        tile_reveal_interval=0.1,
        target_roll_pause=0.1,
        digit_lock_times=(0.1, 0.2, 0.3),
        frame_interval=0.05,
    )


@pytest.fixture
def make_engine(scheduler, announcer, events, fast_config) -> Callable[..., RoundEngine]:
    """Factory for engines on the shared scheduler, announcer and event list."""
    def _make(config: RoundConfig | None = None, **kwargs: Any) -> RoundEngine:
        kwargs.setdefault("rng", FixedRandom())
        return RoundEngine(
            config or fast_config,
            scheduler=scheduler,
            announcer=announcer,
            on_event=events.append,
            **kwargs,
        )

    return _make


@pytest.fixture
def run_until(scheduler) -> Callable[..., None]:
    """Advance the virtual clock in small steps until a condition holds."""
    def _run(predicate: Callable[[], bool], step: float = 0.05, limit: float = 120.0) -> None:
        elapsed = 0.0
        while not predicate():
            if elapsed >= limit:
                raise AssertionError(f"Condition not reached within {limit} virtual seconds")
            scheduler.advance(step)
            elapsed += step

    return _run


@pytest.fixture
def running_engine(make_engine, run_until) -> RoundEngine:
    """Engine in RUNNING with tiles 25, 1, 1, 2, 2, 3 and target 100."""
    engine = make_engine()
    engine.reveal_round()
    run_until(lambda: engine.phase is GamePhase.RUNNING)
    return engine


def tile_ids(engine: RoundEngine) -> list[str]:
    return [tile.id for tile in engine.state.tiles]


def find_value(tiles: Sequence[Tile], value: int, skip: int = 0) -> Tile:
    """The (skip+1)-th tile with a given value."""
    matches = [tile for tile in tiles if tile.value == value]
    return matches[skip]


def event_names(events: Sequence[EventPayload]) -> list[RoundEvent]:
    return [payload.event for payload in events]


# =============================================================================
# SOLVER TEST DATA
# =============================================================================

@pytest.fixture
def exact_puzzles() -> dict[str, tuple[tuple[int, ...], int]]:
    """
    Puzzles with a known exact answer.

    Returns:
        Dict mapping name to (tile_values, target)
    """
    return {
        "classic_952": ((25, 50, 75, 100, 3, 6), 952),
        "three_large": ((25, 8, 3, 7, 2, 1), 503),
        "single_tile": ((100, 1, 1, 2, 2, 3), 100),
        "product": ((25, 1, 1, 2, 2, 3), 100),
        "small_only": ((1, 2, 3, 4, 5, 6), 720),
    }


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

USER_ID = str(uuid4())


@pytest.fixture
def mock_client():
    """Mock Supabase client; every table shares one chainable mock."""
    return MagicMock()


@pytest.fixture
def table(mock_client):
    return mock_client.table.return_value


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def profile_row(user_id) -> dict:
    return {
        "id": user_id,
        "username": "acer",
        "email": "acer@example.com",
        "age_band": "16+",
        "created_at": "2026-10-19T09:00:00+00:00",
    }


def score_row(score: int = 7) -> dict:
    return {
        "score": score,
        "accuracy": score,
        "time_bonus": 0,
        "final_value": 500,
        "diff": 3,
        "exact": False,
        "time_remaining": 10,
    }


@pytest.fixture
def daily_row(user_id):
    def _row(scores: int = 0) -> dict:
        return {
            "user_id": user_id,
            "game_date": "2026-10-19",
            "total_score": 7 * scores,
            "challenge_scores": [score_row() for _ in range(scores)],
            "updated_at": "2026-10-19T09:30:00+00:00",
        }

    return _row


@pytest.fixture
def exact_score() -> ChallengeScore:
    return ChallengeScore(
        points=10,
        accuracy_component=10,
        time_component=0,
        final_value=100,
        diff=0,
        exact=True,
        time_remaining=21,
    )


@pytest.fixture
def round_result(exact_score) -> RoundResult:
    return RoundResult(
        tiles_at_start=(25, 1, 1, 2, 2, 3),
        target=100,
        user_final_value=100,
        work_steps=("2 + 2 = 4", "25 × 4 = 100"),
        best_solution=BestSolution(value=100, diff=0, steps=("2 + 2 = 4", "25 × 4 = 100")),
        points=10,
        did_submit=True,
        diff=0,
        exact=True,
        score=exact_score,
        finished_at=datetime(2026, 10, 19, 9, 15, tzinfo=timezone.utc),
    )
