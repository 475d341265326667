"""
Acer Challenge - Cooperative Scheduling

Deferred callbacks for the round engine's timers and animation frames.

Everything runs on one control thread: a scheduler only decides *when*
a callback is dispatched, never runs two at once. Each scheduled
activity is guarded by a CancelToken so a superseded round can never be
mutated by a late callback.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Minimal timer interface the round engine depends on."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class CancelToken:
    """Validity flag for one scheduled activity.

    Cancelling the token also cancels every scheduler handle bound to it.
    """

    __slots__ = ("_cancelled", "_handles")

    def __init__(self) -> None:
        self._cancelled = False
        self._handles: list[Handle] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, handle: Handle) -> None:
        if self._cancelled:
            handle.cancel()
            return
        self._handles.append(handle)

    def release(self, handle: Handle) -> None:
        """Forget a handle whose call has already run."""
        if handle in self._handles:
            self._handles.remove(handle)

    @property
    def handle_count(self) -> int:
        return len(self._handles)

    def cancel(self) -> None:
        self._cancelled = True
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.cancel()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self._cancelled})"


class _ScheduledCall:
    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler driven explicitly by `advance`.

    Callbacks due at the same instant run in the order they were
    scheduled. Used by tests and by hosts that own their own frame loop.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, _ScheduledCall]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ScheduledCall:
        call = _ScheduledCall(self._now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (call.when, next(self._counter), call))
        return call

    @property
    def pending(self) -> int:
        """Number of calls still scheduled (not cancelled)."""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every call that falls due.

        Returns:
            Number of callbacks run
        """
        deadline = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            when, _, call = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        self._now = deadline
        return ran

    def run_until_idle(self, limit: float = 3600.0) -> int:
        """Run calls in time order until none remain or `limit` seconds pass."""
        deadline = self._now + limit
        ran = 0
        while self._queue:
            when = self._queue[0][0]
            if when > deadline:
                break
            ran += self.advance(when - self._now)
        return ran


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(max(delay, 0.0), callback)
