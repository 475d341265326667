"""Tests for src/database/recorder.py."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from src.database.history import HistoryStore
from src.database.recorder import RoundRecorder


class TestRoundRecorder:
    def test_local_only(self, tmp_path, round_result):
        store = HistoryStore(tmp_path / "history.json")
        recorder = RoundRecorder(store)

        recorder(round_result)

        assert not recorder.is_remote
        assert len(store.load()) == 1
        assert recorder.last_daily is None

    def test_remote_upsert(self, tmp_path, round_result, user_id):
        daily = MagicMock()
        recorder = RoundRecorder(
            HistoryStore(tmp_path / "history.json"),
            daily_scores=daily,
            user_id=user_id,
            today=lambda: date(2026, 10, 19),
        )

        item = recorder.record(round_result)

        daily.upsert_user_day.assert_called_once_with(user_id, date(2026, 10, 19), round_result.score)
        assert recorder.last_daily is daily.upsert_user_day.return_value
        assert item.points == 10

    def test_manager_without_user_stays_local(self, tmp_path, round_result):
        daily = MagicMock()
        recorder = RoundRecorder(HistoryStore(tmp_path / "history.json"), daily_scores=daily)

        recorder(round_result)

        daily.upsert_user_day.assert_not_called()

    def test_storage_errors_propagate(self, round_result):
        store = MagicMock()
        store.append.side_effect = OSError("read-only")

        with pytest.raises(OSError):
            RoundRecorder(store)(round_result)
