"""Tests for src/database/daily_scores.py: DailyScoreManager with a mocked client."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from src.database.daily_scores import MAX_DAILY_CHALLENGES, DailyScoreManager
from src.database.models import ChallengeScoreRecord

GAME_DATE = date(2026, 10, 19)


def _select_returns(table, rows):
    table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=rows)


class TestGetUserDay:
    def test_found(self, mock_client, table, daily_row, user_id):
        _select_returns(table, [daily_row(2)])

        day = DailyScoreManager(mock_client).get_user_day(user_id, GAME_DATE)

        mock_client.table.assert_called_once_with("daily_scores")
        table.select.return_value.eq.assert_called_once_with("user_id", user_id)
        table.select.return_value.eq.return_value.eq.assert_called_once_with("game_date", "2026-10-19")
        assert day is not None
        assert len(day.challenge_scores) == 2

    def test_missing(self, mock_client, table, user_id):
        _select_returns(table, [])
        assert DailyScoreManager(mock_client).get_user_day(user_id, GAME_DATE) is None


class TestUpsertUserDay:
    def test_first_round_of_day(self, mock_client, table, daily_row, user_id, exact_score):
        _select_returns(table, [])
        table.upsert.return_value.execute.return_value = MagicMock(data=[daily_row(1)])

        DailyScoreManager(mock_client).upsert_user_day(user_id, GAME_DATE, exact_score)

        payload = table.upsert.call_args[0][0]
        assert payload["user_id"] == user_id
        assert payload["game_date"] == "2026-10-19"
        assert payload["total_score"] == 10
        assert len(payload["challenge_scores"]) == 1
        assert table.upsert.call_args[1] == {"on_conflict": "user_id,game_date"}

    def test_appends_and_recomputes_total(self, mock_client, table, daily_row, user_id, exact_score):
        _select_returns(table, [daily_row(2)])
        table.upsert.return_value.execute.return_value = MagicMock(data=[daily_row(3)])

        day = DailyScoreManager(mock_client).upsert_user_day(user_id, GAME_DATE, exact_score)

        payload = table.upsert.call_args[0][0]
        assert payload["total_score"] == 7 + 7 + 10
        assert [s["score"] for s in payload["challenge_scores"]] == [7, 7, 10]
        assert len(day.challenge_scores) == 3

    def test_accepts_record(self, mock_client, table, daily_row, user_id):
        _select_returns(table, [])
        table.upsert.return_value.execute.return_value = MagicMock(data=[daily_row(1)])

        DailyScoreManager(mock_client).upsert_user_day(user_id, GAME_DATE, ChallengeScoreRecord(score=5))

        assert table.upsert.call_args[0][0]["total_score"] == 5

    def test_limit_reached_skips_write(self, mock_client, table, daily_row, user_id, exact_score):
        _select_returns(table, [daily_row(MAX_DAILY_CHALLENGES)])

        day = DailyScoreManager(mock_client).upsert_user_day(user_id, GAME_DATE, exact_score)

        table.upsert.assert_not_called()
        assert len(day.challenge_scores) == MAX_DAILY_CHALLENGES

    def test_failed_write(self, mock_client, table, user_id, exact_score):
        _select_returns(table, [])
        table.upsert.return_value.execute.return_value = MagicMock(data=[])
        with pytest.raises(ValueError, match="Unable to update"):
            DailyScoreManager(mock_client).upsert_user_day(user_id, GAME_DATE, exact_score)


class TestDailyLimit:
    @pytest.mark.parametrize("played,remaining", [(0, 5), (3, 2), (5, 0)])
    def test_challenges_remaining(self, mock_client, table, daily_row, user_id, played, remaining):
        _select_returns(table, [daily_row(played)] if played else [])
        assert DailyScoreManager(mock_client).challenges_remaining(user_id, GAME_DATE) == remaining

    def test_hook_allows_until_limit(self, mock_client, table, daily_row, user_id):
        manager = DailyScoreManager(mock_client)
        can_start_round = manager.daily_limit_hook(user_id, lambda: GAME_DATE)

        _select_returns(table, [daily_row(4)])
        assert can_start_round()

        _select_returns(table, [daily_row(5)])
        assert not can_start_round()
