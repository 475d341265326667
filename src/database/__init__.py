"""
Acer Challenge Database Layer.

Supabase integration for profiles and daily scores, plus the local
round history file.
"""

from src.database.client import get_supabase_client
from src.database.daily_scores import MAX_DAILY_CHALLENGES, DailyScoreManager
from src.database.history import HistoryStore
from src.database.models import ChallengeScoreRecord, DailyScore, HistoryItem, Profile
from src.database.profile import ProfileManager
from src.database.recorder import RoundRecorder

__all__ = [
    "get_supabase_client",
    "ChallengeScoreRecord",
    "DailyScore",
    "DailyScoreManager",
    "HistoryItem",
    "HistoryStore",
    "MAX_DAILY_CHALLENGES",
    "Profile",
    "ProfileManager",
    "RoundRecorder",
]
