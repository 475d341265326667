"""
Acer Challenge - Application Settings

Loads configuration from environment variables using Pydantic Settings.
On Streamlit Cloud, bridges st.secrets into env vars so Pydantic can read them.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from src.engine.base import TIMER_CHOICES, ScoringPolicy

logger = logging.getLogger(__name__)

_SECRET_KEYS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "DEBUG",
    "LOG_LEVEL",
    "ENABLE_SOUNDS",
    "LARGE_COUNT",
    "TIMER_SECONDS",
    "SCORING_POLICY",
    "AUTO_START_DELAY",
    "SEED",
    "HISTORY_PATH",
)


def _load_streamlit_secrets() -> None:
    """Bridge Streamlit Cloud secrets into environment variables."""
    try:
        import streamlit as st

        for key in _SECRET_KEYS:
            if key not in os.environ and key in st.secrets:
                os.environ[key] = str(st.secrets[key])
    except Exception:
        # Not running under Streamlit, or no secrets file.
        logger.debug("Streamlit secrets unavailable; using environment only")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (optional: rounds still play without remote persistence)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Audio
    enable_sounds: bool = True

    # Rounds
    large_count: int = 1  # clamped to 0-4 by RoundConfig
    timer_seconds: int = 30
    scoring_policy: ScoringPolicy = ScoringPolicy.ACCURACY_ONLY
    auto_start_delay: float = Field(default=10.0, ge=0)
    seed: str | None = None

    # Local history
    history_path: Path = Path("acer_history.json")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("timer_seconds")
    @classmethod
    def _check_timer(cls, value: int) -> int:
        if value not in TIMER_CHOICES:
            raise ValueError(f"timer_seconds must be one of {TIMER_CHOICES}")
        return value

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    _load_streamlit_secrets()
    return Settings()
