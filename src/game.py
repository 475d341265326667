"""
Acer Challenge - Engine Wiring

Builds a RoundEngine from application settings, connected to the local
history file and, for a signed-in player, to the Supabase daily scores.
"""

import logging
from typing import Callable
from uuid import UUID

from supabase import Client

from src.config.settings import Settings, get_settings
from src.database.client import get_supabase_client
from src.database.daily_scores import DailyScoreManager
from src.database.history import HistoryStore
from src.database.recorder import RoundRecorder
from src.engine.base import RoundConfig
from src.engine.events import Announcer, EventPayload, SilentAnnouncer
from src.engine.random_source import RandomSource
from src.engine.round_engine import RoundEngine
from src.engine.scheduler import Scheduler

logger = logging.getLogger(__name__)


def create_engine(
    settings: Settings | None = None,
    *,
    scheduler: Scheduler | None = None,
    announcer: Announcer | None = None,
    on_event: Callable[[EventPayload], None] | None = None,
    user_id: UUID | str | None = None,
    client: Client | None = None,
) -> RoundEngine:
    """
    Create a round engine for one player session.

    Args:
        settings: Application settings (defaults to get_settings())
        scheduler: Timer source; the engine defaults to a ManualScheduler
        announcer: Speech/sound collaborator, silenced when sounds are disabled
        on_event: Presentation listener
        user_id: Signed-in profile id; enables daily score tracking
        client: Supabase client (defaults to the cached client when configured)

    Returns:
        A RoundEngine in the IDLE phase
    """
    settings = settings or get_settings()

    if not settings.enable_sounds or announcer is None:
        announcer = SilentAnnouncer()

    daily_scores: DailyScoreManager | None = None
    can_start_round: Callable[[], bool] | None = None
    if user_id is not None and (client is not None or settings.supabase_configured):
        daily_scores = DailyScoreManager(client or get_supabase_client())
        can_start_round = daily_scores.daily_limit_hook(str(user_id))
    elif user_id is not None:
        logger.warning("Supabase not configured; daily scores for %s stay local", user_id)

    recorder = RoundRecorder(
        HistoryStore(settings.history_path),
        daily_scores=daily_scores,
        user_id=user_id,
    )

    return RoundEngine(
        RoundConfig.from_settings(settings),
        scheduler=scheduler,
        rng=RandomSource(settings.seed),
        announcer=announcer,
        on_event=on_event,
        on_round_end=recorder,
        can_start_round=can_start_round,
    )
