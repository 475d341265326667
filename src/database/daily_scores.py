"""
Acer Challenge - Daily Score Manager

CRUD operations for the `daily_scores` table. Each player gets one row per
day holding up to MAX_DAILY_CHALLENGES round scores and their total.
"""

import logging
from datetime import date
from typing import Callable

from supabase import Client

from src.database.models import ChallengeScoreRecord, DailyScore
from src.engine.base import ChallengeScore

logger = logging.getLogger(__name__)

MAX_DAILY_CHALLENGES = 5

DAILY_COLUMNS = "user_id, game_date, total_score, challenge_scores, updated_at"


class DailyScoreManager:
    """Manages per-day score rows in Supabase."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("daily_scores")

    def get_user_day(self, user_id: str, game_date: date) -> DailyScore | None:
        """Get a player's row for one day."""
        data = (
            self.table
            .select(DAILY_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("game_date", game_date.isoformat())
            .execute()
        )
        if data.data:
            return DailyScore.model_validate(data.data[0])
        return None

    def upsert_user_day(
        self,
        user_id: str,
        game_date: date,
        challenge_score: ChallengeScore | ChallengeScoreRecord,
    ) -> DailyScore:
        """
        Append a round score to the player's day and recompute the total.

        Scores beyond MAX_DAILY_CHALLENGES are dropped.
        """
        record = (
            challenge_score
            if isinstance(challenge_score, ChallengeScoreRecord)
            else ChallengeScoreRecord.from_score(challenge_score)
        )
        existing = self.get_user_day(user_id, game_date)
        scores = list(existing.challenge_scores) if existing else []
        if len(scores) >= MAX_DAILY_CHALLENGES:
            logger.warning("Daily limit reached for %s on %s; score not recorded", user_id, game_date)
            return existing  # type: ignore[return-value]

        scores.append(record)
        data = (
            self.table
            .upsert(
                {
                    "user_id": str(user_id),
                    "game_date": game_date.isoformat(),
                    "total_score": sum(item.score for item in scores),
                    "challenge_scores": [item.model_dump() for item in scores],
                },
                on_conflict="user_id,game_date",
            )
            .execute()
        )
        if not data.data:
            raise ValueError("Unable to update daily score.")
        return DailyScore.model_validate(data.data[0])

    def challenges_remaining(self, user_id: str, game_date: date) -> int:
        """How many more rounds count toward today's total."""
        existing = self.get_user_day(user_id, game_date)
        played = len(existing.challenge_scores) if existing else 0
        return max(0, MAX_DAILY_CHALLENGES - played)

    def daily_limit_hook(self, user_id: str, game_date: Callable[[], date] = date.today) -> Callable[[], bool]:
        """Build a `can_start_round` callable for the round engine."""
        def can_start_round() -> bool:
            return self.challenges_remaining(user_id, game_date()) > 0

        return can_start_round
