"""
Acer Challenge - Database Models

Pydantic models that mirror the Supabase table schemas and the local
history file.
"""

from datetime import date, datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field

from src.engine.base import ChallengeScore, RoundResult


class Profile(BaseModel):
    """Mirrors the `profiles` table."""

    id: UUID
    username: str = Field(max_length=30)
    email: str
    age_band: str = "16+"
    created_at: datetime

    model_config = {"from_attributes": True}


class ChallengeScoreRecord(BaseModel):
    """One round's score as stored inside `daily_scores.challenge_scores`."""

    score: int = 0
    accuracy: int = 0
    time_bonus: int = 0
    final_value: int | None = None
    diff: int | None = None
    exact: bool = False
    time_remaining: int | None = None

    @classmethod
    def from_score(cls, score: ChallengeScore) -> "ChallengeScoreRecord":
        return cls(
            score=score.points,
            accuracy=score.accuracy_component,
            time_bonus=score.time_component,
            final_value=score.final_value,
            diff=score.diff,
            exact=score.exact,
            time_remaining=score.time_remaining,
        )


class DailyScore(BaseModel):
    """Mirrors the `daily_scores` table (one row per user per day)."""

    user_id: UUID
    game_date: date
    total_score: int = 0
    challenge_scores: list[ChallengeScoreRecord] = Field(default_factory=list)
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class HistoryItem(BaseModel):
    """One finished round in the local history file."""

    ts: datetime
    tiles_at_start: list[int]
    target: int
    user_final_value: int | None = None
    user_steps: list[str] = Field(default_factory=list)
    best_final_value: int | None = None
    best_steps: list[str] = Field(default_factory=list)
    points: int = 0
    did_submit: bool = True
    outcome: str = "OK"

    @property
    def is_exact(self) -> bool:
        return self.user_final_value is not None and self.user_final_value == self.target

    @classmethod
    def from_result(cls, result: RoundResult) -> "HistoryItem":
        best = result.best_solution
        return cls(
            ts=result.finished_at.astimezone(timezone.utc),
            tiles_at_start=list(result.tiles_at_start),
            target=result.target,
            user_final_value=result.user_final_value,
            user_steps=list(result.work_steps),
            best_final_value=best.value if best is not None else None,
            best_steps=list(best.steps) if best is not None else [],
            points=result.points,
            did_submit=result.did_submit,
            outcome=result.outcome,
        )
