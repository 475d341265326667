"""
Acer Challenge - Round Recorder

Sink for RoundEngine.on_round_end: writes each finished round to the local
history and, for a signed-in player, to today's Supabase score row.
"""

import logging
from datetime import date
from typing import Callable
from uuid import UUID

from src.database.daily_scores import DailyScoreManager
from src.database.history import HistoryStore
from src.database.models import DailyScore, HistoryItem
from src.engine.base import RoundResult

logger = logging.getLogger(__name__)


class RoundRecorder:
    """
    Persists round results.

    Args:
        history: Local history store
        daily_scores: Supabase daily score manager (None = local only)
        user_id: Profile id of the signed-in player
        today: Supplies the game date (injectable for tests)
    """

    def __init__(
        self,
        history: HistoryStore,
        daily_scores: DailyScoreManager | None = None,
        user_id: UUID | str | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.history = history
        self.daily_scores = daily_scores
        self.user_id = str(user_id) if user_id is not None else None
        self._today = today
        self.last_daily: DailyScore | None = None

    @property
    def is_remote(self) -> bool:
        return self.daily_scores is not None and self.user_id is not None

    def __call__(self, result: RoundResult) -> None:
        self.record(result)

    def record(self, result: RoundResult) -> HistoryItem:
        """Store one result locally and, when signed in, remotely."""
        item = HistoryItem.from_result(result)
        self.history.append(item)
        logger.info("Recorded round (%s, %d points)", item.outcome, item.points)

        if self.daily_scores is not None and self.user_id is not None:
            self.last_daily = self.daily_scores.upsert_user_day(self.user_id, self._today(), result.score)
        return item
