"""Tests for src/engine/scheduler.py."""

import asyncio
from unittest.mock import MagicMock

from src.engine.scheduler import AsyncioScheduler, CancelToken, ManualScheduler


class TestManualScheduler:
    def test_runs_due_calls_in_order(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("b"))
        scheduler.call_later(1.0, lambda: calls.append("a"))
        scheduler.call_later(1.0, lambda: calls.append("a2"))

        assert scheduler.advance(1.0) == 2
        assert calls == ["a", "a2"]
        assert scheduler.advance(5.0) == 1
        assert calls == ["a", "a2", "b"]

    def test_clock_moves_to_deadline(self):
        scheduler = ManualScheduler(start=10.0)
        scheduler.advance(2.5)
        assert scheduler.now() == 12.5

    def test_callback_sees_its_due_time(self):
        scheduler = ManualScheduler()
        seen = []
        scheduler.call_later(1.5, lambda: seen.append(scheduler.now()))
        scheduler.advance(3.0)
        assert seen == [1.5]

    def test_calls_scheduled_during_advance_run_if_due(self):
        scheduler = ManualScheduler()
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(0.5, lambda: calls.append("second"))

        scheduler.call_later(1.0, first)
        scheduler.advance(2.0)
        assert calls == ["first", "second"]

    def test_cancelled_calls_skipped(self):
        scheduler = ManualScheduler()
        calls = []
        handle = scheduler.call_later(1.0, lambda: calls.append("x"))
        handle.cancel()
        assert scheduler.pending == 0
        assert scheduler.advance(2.0) == 0
        assert calls == []

    def test_run_until_idle(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(5.0, lambda: calls.append(1))
        scheduler.call_later(50.0, lambda: calls.append(2))
        assert scheduler.run_until_idle() == 2
        assert scheduler.now() == 50.0

    def test_run_until_idle_respects_limit(self):
        scheduler = ManualScheduler()
        scheduler.call_later(10.0, lambda: None)
        assert scheduler.run_until_idle(limit=5.0) == 0
        assert scheduler.pending == 1


class TestCancelToken:
    def test_cancel_cancels_bound_handles(self):
        scheduler = ManualScheduler()
        token = CancelToken()
        calls = []
        token.bind(scheduler.call_later(1.0, lambda: calls.append("x")))

        token.cancel()
        scheduler.advance(2.0)

        assert token.cancelled
        assert calls == []

    def test_bind_after_cancel_cancels_immediately(self):
        scheduler = ManualScheduler()
        token = CancelToken()
        token.cancel()
        token.bind(scheduler.call_later(1.0, lambda: None))
        assert scheduler.pending == 0

    def test_released_handle_not_cancelled(self):
        token = CancelToken()
        handle = MagicMock()
        token.bind(handle)

        token.release(handle)
        token.cancel()

        handle.cancel.assert_not_called()
        assert token.handle_count == 0


class TestAsyncioScheduler:
    def test_call_later_fires_on_loop(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = asyncio.Event()
            start = scheduler.now()
            scheduler.call_later(0.01, fired.set)
            await asyncio.wait_for(fired.wait(), timeout=1.0)
            return scheduler.now() - start

        assert asyncio.run(scenario()) >= 0

    def test_token_cancels_asyncio_handle(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            token = CancelToken()
            calls = []
            token.bind(scheduler.call_later(0.01, lambda: calls.append("x")))
            token.cancel()
            await asyncio.sleep(0.05)
            return calls

        assert asyncio.run(scenario()) == []
