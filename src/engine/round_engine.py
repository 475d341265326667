"""
Acer Challenge - Round Engine

State machine for one round of play:

    IDLE -> REVEALING_TILES -> TARGET_ROLLING -> READY -> RUNNING -> ENDED

Tiles flip one at a time, the target digits roll and lock left to right,
the clock starts (after a delay or immediately), and the player combines
tiles until they lock in an answer or time runs out. Ending a round runs
the solver for the best answer, scores the attempt, and hands a
RoundResult to the persistence collaborator.

Player intents arriving in the wrong phase are ignored, not errors: the
presentation layer may send redundant or late events.

All timing goes through a Scheduler. Each scheduled activity (tile
reveal, target roll, auto start, countdown, end-of-round effects) owns a
CancelToken; superseding it cancels the token before anything new is
scheduled, and every deferred callback checks its token first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Callable

from src.engine.base import (
    BLANK_DIGITS,
    GamePhase,
    Operation,
    RoundConfig,
    RoundPayload,
    RoundResult,
    TargetDigit,
    Tile,
    TILE_COUNT,
    tile_values,
)
from src.engine.events import Announcer, Cue, EventPayload, RoundEvent, SilentAnnouncer
from src.engine.puzzle import PuzzleGenerator, digits_to_target
from src.engine.random_source import RandomSource
from src.engine.rules import RuleViolation, apply_operation
from src.engine.scheduler import CancelToken, ManualScheduler, Scheduler
from src.engine.scoring import ScoringModel
from src.engine.solver import solve
from src.engine.validators import validate_large_count

logger = logging.getLogger(__name__)

COUNTDOWN_TICK = 1.0
END_ANNOUNCE_DELAY = 0.45
EXACT_BOOM_DELAY = 1.2


class Activity(Enum):
    """Scheduled activities, each guarded by its own CancelToken."""
    REVEAL = auto()
    TARGET_ROLL = auto()
    AUTO_START = auto()
    COUNTDOWN = auto()
    END_EFFECTS = auto()


@dataclass(frozen=True)
class Checkpoint:
    """Pre-operation snapshot pushed for undo."""
    tiles: tuple[Tile, ...]
    work_log: tuple[str, ...]


@dataclass(frozen=True)
class RoundState:
    """
    Live, player-mutable part of a round.

    Attributes:
        tiles: Live tile set (size is 6 minus operations applied)
        work_log: Expressions applied so far, in order
        pending_first: Id of the first selected tile
        pending_op: Selected operation
        pending_second: Id of the second selected tile while an operation is attempted
    """
    tiles: tuple[Tile, ...] = ()
    work_log: tuple[str, ...] = ()
    pending_first: str | None = None
    pending_op: Operation | None = None
    pending_second: str | None = None

    def find(self, tile_id: str | None) -> Tile | None:
        if tile_id is None:
            return None
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None

    @property
    def has_pending(self) -> bool:
        return self.pending_first is not None or self.pending_op is not None

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(tiles=self.tiles, work_log=self.work_log)


@dataclass(frozen=True)
class RoundSnapshot:
    """Read-only view of the engine for the presentation collaborator."""
    phase: GamePhase
    tiles: tuple[Tile, ...]
    tiles_at_start: tuple[Tile, ...]
    pending_first: str | None
    pending_op: Operation | None
    pending_second: str | None
    work_log: tuple[str, ...]
    time_remaining: int | None
    target_digits: tuple[TargetDigit, ...]
    target: int | None
    result: RoundResult | None
    can_undo: bool
    can_reset: bool
    can_lock_in: bool
    hint: str


class RoundEngine:
    """
    Drives rounds from reveal through scoring.

    Args:
        config: Timing, timer and scoring configuration
        scheduler: Source of deferred callbacks (defaults to a ManualScheduler)
        rng: Random source for tiles and targets
        announcer: Speech/sound collaborator
        on_event: Called with an EventPayload for every state change
        on_round_end: Called once with the RoundResult of each finished round
        can_start_round: Returns False when a session/daily limit is exhausted
        seed_hook: Returns a seed for the next round, or None to keep the current stream
    """

    def __init__(
        self,
        config: RoundConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        rng: RandomSource | None = None,
        announcer: Announcer | None = None,
        on_event: Callable[[EventPayload], None] | None = None,
        on_round_end: Callable[[RoundResult], None] | None = None,
        can_start_round: Callable[[], bool] | None = None,
        seed_hook: Callable[[], str | int | None] | None = None,
    ) -> None:
        self.config = config or RoundConfig()
        self.scheduler: Scheduler = scheduler or ManualScheduler()
        self._generator = PuzzleGenerator(rng or RandomSource())
        # Rolling-display digits are cosmetic; keep them off the puzzle stream.
        self._animation = PuzzleGenerator(RandomSource())
        self._scoring = ScoringModel(self.config.scoring_policy, self.config.timer_seconds)
        self._announcer: Announcer = announcer or SilentAnnouncer()
        self._on_event = on_event
        self._on_round_end = on_round_end
        self._can_start_round = can_start_round
        self._seed_hook = seed_hook
        self._tokens: dict[Activity, CancelToken] = {}
        self._disposed = False
        self._reset_round()

    # -- Read-only state --------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def target(self) -> int | None:
        return self._target

    @property
    def time_remaining(self) -> int | None:
        return self._time_remaining

    @property
    def result(self) -> RoundResult | None:
        return self._result

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> RoundSnapshot:
        state = self._state
        running = self._phase is GamePhase.RUNNING
        return RoundSnapshot(
            phase=self._phase,
            tiles=state.tiles,
            tiles_at_start=self._tiles_at_start,
            pending_first=state.pending_first,
            pending_op=state.pending_op,
            pending_second=state.pending_second,
            work_log=state.work_log,
            time_remaining=self._time_remaining,
            target_digits=self._digits,
            target=self._target,
            result=self._result,
            can_undo=running and (state.has_pending or bool(self._history)),
            can_reset=running and (state.has_pending or bool(self._history) or bool(state.work_log)),
            can_lock_in=running and state.pending_first is not None and state.pending_op is None,
            hint=self._hint(),
        )

    def round_payload(self) -> RoundPayload | None:
        """Tiles, target and seed of the current round once the target is committed."""
        if self._target is None:
            return None
        return RoundPayload(
            tiles=tile_values(self._tiles_at_start),
            target=self._target,
            seed=self._round_seed,
        )

    # -- Round lifecycle --------------------------------------------------

    def reveal_round(self, large_count: int | None = None) -> None:
        """
        Start a new round: draw tiles and begin revealing them.

        Ignored while a round is in progress or when the session limit
        collaborator refuses a new round.

        Args:
            large_count: Number of large tiles (clamped to 0-4); defaults to config
        """
        if self._disposed:
            logger.debug("Ignoring reveal_round on disposed engine")
            return
        if self._phase.is_active:
            logger.debug("Ignoring reveal_round during %s", self._phase.value)
            return
        if not self._round_allowed():
            return

        count = validate_large_count(self.config.large_count if large_count is None else large_count)

        self._cancel_all()
        self._reset_round()
        self._apply_seed_hook()

        tiles = self._generator.draw_tiles(count)
        self._tiles_at_start = tuple(tile.with_revealed() for tile in tiles)
        self._state = RoundState(tiles=tiles)
        self._phase = GamePhase.REVEALING_TILES

        small_count = TILE_COUNT - count
        logger.info("Round revealed: %d large, %d small", count, small_count)
        self._announce(f"That's {count} large and {small_count} small numbers")
        self._emit(RoundEvent.ROUND_REVEALED, large_count=count, small_count=small_count)

        token = self._renew(Activity.REVEAL)
        self._defer(token, self.config.tile_reveal_interval, self._reveal_tile, token, 0)

    def clear(self) -> None:
        """Abandon any round and return to IDLE."""
        if self._disposed:
            return
        self._cancel_all()
        self._reset_round()

    def dispose(self) -> None:
        """Cancel every pending activity; the engine ignores all later intents."""
        self._cancel_all()
        self._disposed = True

    def _reset_round(self) -> None:
        self._phase = GamePhase.IDLE
        self._state = RoundState()
        self._history: list[Checkpoint] = []
        self._tiles_at_start: tuple[Tile, ...] = ()
        self._target: int | None = None
        self._digits: tuple[TargetDigit, ...] = BLANK_DIGITS
        self._final_digits: tuple[int, int, int] | None = None
        self._roll_started = 0.0
        self._time_remaining: int | None = None
        self._result: RoundResult | None = None
        self._round_seed: str | None = None

    def _round_allowed(self) -> bool:
        if self._can_start_round is None:
            return True
        try:
            allowed = self._can_start_round()
        except Exception:
            logger.exception("Round limit check failed; refusing new round")
            return False
        if not allowed:
            logger.info("New round refused: session limit reached")
        return bool(allowed)

    def _apply_seed_hook(self) -> None:
        rng = self._generator.rng
        if self._seed_hook is not None:
            try:
                seed = self._seed_hook()
            except Exception:
                logger.exception("Seed hook failed; keeping the current stream")
                seed = None
            if seed is not None:
                rng.reseed(seed)
                logger.debug("Round seeded from hook")
        self._round_seed = rng.seed

    # -- Reveal and target roll -------------------------------------------

    def _reveal_tile(self, token: CancelToken, index: int) -> None:
        tiles = list(self._state.tiles)
        tiles[index] = tiles[index].with_revealed()
        self._state = replace(self._state, tiles=tuple(tiles))
        self._emit(RoundEvent.TILE_REVEALED, index=index, tile_id=tiles[index].id, value=tiles[index].value)

        if index + 1 < len(tiles):
            self._defer(token, self.config.tile_reveal_interval, self._reveal_tile, token, index + 1)
            return

        self._phase = GamePhase.TARGET_ROLLING
        self._emit(RoundEvent.TARGET_ROLLING)
        roll_token = self._renew(Activity.TARGET_ROLL)
        self._defer(roll_token, self.config.target_roll_pause, self._begin_target_roll, roll_token)

    def _begin_target_roll(self, token: CancelToken) -> None:
        self._announce("And the number is")
        self._final_digits = self._generator.roll_target_digits()
        self._roll_started = self.scheduler.now()
        self._roll_frame(token)

    def _roll_frame(self, token: CancelToken) -> None:
        final = self._final_digits
        if final is None:
            return
        elapsed = self.scheduler.now() - self._roll_started
        digits = list(self._digits)
        newly_locked: list[int] = []

        for i, lock_at in enumerate(self.config.digit_lock_times):
            if digits[i].locked:
                continue
            if elapsed >= lock_at:
                digits[i] = TargetDigit(value=str(final[i]), locked=True)
                newly_locked.append(i)
            else:
                digits[i] = TargetDigit(value=str(self._animation.random_digit()), locked=False)

        self._digits = tuple(digits)
        for i in newly_locked:
            self._emit(RoundEvent.DIGIT_LOCKED, index=i, digit=final[i])

        if all(digit.locked for digit in self._digits):
            self._cancel(Activity.TARGET_ROLL)
            self._commit_target(digits_to_target(final))
            return

        self._defer(token, self.config.frame_interval, self._roll_frame, token)

    def _commit_target(self, target: int) -> None:
        self._target = target
        self._phase = GamePhase.READY
        logger.info("Target committed: %d", target)
        self._announce(str(target))
        self._emit(RoundEvent.TARGET_COMMITTED, target=target)

        delay = self.config.auto_start_delay
        if delay <= 0:
            self._start_running()
            return

        self._announce(f"Timer starts in {delay:g} seconds")
        token = self._renew(Activity.AUTO_START)
        self._defer(token, delay, self._auto_start)

    def _auto_start(self) -> None:
        if self._phase is GamePhase.READY:
            self._start_running()

    # -- Countdown ----------------------------------------------------------

    def _start_running(self) -> None:
        self._cancel(Activity.AUTO_START)
        self._phase = GamePhase.RUNNING
        self._time_remaining = None if self.config.is_unlimited else self.config.timer_seconds
        logger.info("Round running (timer: %s)", self._time_remaining or "unlimited")
        self._emit(RoundEvent.TIMER_STARTED, time_remaining=self._time_remaining)

        if self._time_remaining is not None:
            token = self._renew(Activity.COUNTDOWN)
            self._defer(token, COUNTDOWN_TICK, self._tick, token)

    def _tick(self, token: CancelToken) -> None:
        if self._phase is not GamePhase.RUNNING or self._time_remaining is None:
            return

        remaining = self._time_remaining - 1
        self._time_remaining = max(remaining, 0)
        if 1 <= remaining <= self.config.countdown_announce_from:
            self._announce(str(remaining))
        self._emit(RoundEvent.TIMER_TICK, time_remaining=self._time_remaining)

        if remaining <= 0:
            self._time_up()
            return
        self._defer(token, COUNTDOWN_TICK, self._tick, token)

    def _time_up(self) -> None:
        logger.info("Time up with %d step(s) applied", len(self._state.work_log))
        self._play_cue(Cue.BUZZER)
        self._end_round(did_submit=False, final_value=None, skip_buzzer=True)

    # -- Player intents -----------------------------------------------------

    def select_tile(self, tile_id: str) -> None:
        """Pick a tile as first operand, second operand, or toggle the first off."""
        if not self._accepting("select_tile"):
            return

        state = self._state
        tile = state.find(tile_id)
        if tile is None or not tile.revealed:
            logger.debug("Ignoring selection of unknown or hidden tile %s", tile_id)
            return

        if state.pending_first is None:
            self._state = replace(state, pending_first=tile_id, pending_op=None, pending_second=None)
        elif state.pending_op is None:
            first = None if state.pending_first == tile_id else tile_id
            self._state = replace(state, pending_first=first, pending_second=None)
        elif state.pending_first != tile_id:
            self._state = replace(state, pending_second=tile_id)
            self._apply_pending()
            return
        else:
            return

        self._emit_selection()

    def select_operator(self, op: Operation | str) -> None:
        """Choose the operation to apply to the pending first tile."""
        if not self._accepting("select_operator"):
            return
        if self._state.pending_first is None:
            logger.debug("Ignoring operator with no tile selected")
            return

        self._state = replace(self._state, pending_op=Operation.parse(op), pending_second=None)
        self._emit_selection()

    def undo(self) -> None:
        """Clear the pending operator, else the pending tile, else the last operation."""
        if not self._accepting("undo"):
            return

        state = self._state
        if state.pending_op is not None:
            self._state = replace(state, pending_op=None, pending_second=None)
        elif state.pending_first is not None:
            self._state = replace(state, pending_first=None, pending_second=None)
        elif self._history:
            checkpoint = self._history.pop()
            self._state = RoundState(tiles=checkpoint.tiles, work_log=checkpoint.work_log)
        else:
            return

        self._emit(RoundEvent.UNDONE, history_depth=len(self._history))

    def reset_work(self) -> None:
        """Discard every applied step and selection, restoring the original tiles."""
        if not self._accepting("reset_work"):
            return

        self._history.clear()
        self._state = RoundState(tiles=self._tiles_at_start)
        self._emit(RoundEvent.WORK_RESET)

    def lock_in(self) -> None:
        """Submit the selected tile as the final answer."""
        if not self._accepting("lock_in"):
            return

        state = self._state
        tile = state.find(state.pending_first)
        if tile is None or state.pending_op is not None:
            logger.debug("Ignoring lock_in without a single selected tile")
            return

        self._end_round(did_submit=True, final_value=tile.value)

    def _accepting(self, intent: str) -> bool:
        if self._disposed or self._phase is not GamePhase.RUNNING:
            logger.debug("Ignoring %s during %s", intent, self._phase.value)
            return False
        return True

    def _apply_pending(self) -> None:
        state = self._state
        first = state.find(state.pending_first)
        second = state.find(state.pending_second)
        if first is None or second is None or state.pending_op is None:
            return

        try:
            result = apply_operation(first.value, second.value, state.pending_op)
        except RuleViolation as exc:
            logger.warning("Rejected %d %s %d: %s", first.value, state.pending_op.symbol, second.value, exc.reason)
            self._state = replace(state, pending_second=None)
            self._announce(f"Not allowed {exc.message}")
            self._emit(RoundEvent.RULE_VIOLATION, reason=exc.reason, message=exc.message)
            return

        self._history.append(state.checkpoint())
        result_tile = PuzzleGenerator.result_tile(result.value)
        remaining = tuple(tile for tile in state.tiles if tile.id not in (first.id, second.id))
        self._state = RoundState(
            tiles=remaining + (result_tile,),
            work_log=state.work_log + (result.expression,),
        )
        logger.debug("Applied %s", result.expression)
        self._emit(
            RoundEvent.OPERATION_APPLIED,
            expression=result.expression,
            value=result.value,
            tile_id=result_tile.id,
        )

    # -- Ending -------------------------------------------------------------

    def _end_round(self, *, did_submit: bool, final_value: int | None, skip_buzzer: bool = False) -> None:
        self._cancel(Activity.COUNTDOWN)
        self._cancel(Activity.AUTO_START)
        self._phase = GamePhase.ENDED

        target = self._target
        if target is None:
            return

        best = solve(tile_values(self._tiles_at_start), target)
        score = self._scoring.score(
            final_value,
            target,
            did_submit=did_submit,
            time_remaining=self._time_remaining,
        )
        result = RoundResult(
            tiles_at_start=tile_values(self._tiles_at_start),
            target=target,
            user_final_value=score.final_value,
            work_steps=self._state.work_log,
            best_solution=best,
            points=score.points,
            did_submit=did_submit,
            diff=score.diff,
            exact=score.exact,
            score=score,
        )
        self._result = result
        logger.info(
            "Round ended: %s, answer=%s target=%d best=%s points=%d",
            result.outcome,
            result.user_final_value,
            target,
            best.value if best is not None else None,
            result.points,
        )

        self._emit(RoundEvent.ROUND_ENDED, result=result)
        if self._on_round_end is not None:
            try:
                self._on_round_end(result)
            except Exception:
                logger.exception("Round result sink failed")

        if not skip_buzzer:
            self._play_cue(Cue.BUZZER)
        token = self._renew(Activity.END_EFFECTS)
        self._defer(token, END_ANNOUNCE_DELAY, self._announce, "Let's see how you did")
        if result.exact:
            self._defer(token, EXACT_BOOM_DELAY, self._play_cue, Cue.BOOM)

    # -- Scheduling and collaborators -----------------------------------------

    def _renew(self, activity: Activity) -> CancelToken:
        self._cancel(activity)
        token = CancelToken()
        self._tokens[activity] = token
        return token

    def _cancel(self, activity: Activity) -> None:
        token = self._tokens.pop(activity, None)
        if token is not None:
            token.cancel()

    def _cancel_all(self) -> None:
        for activity in list(self._tokens):
            self._cancel(activity)

    def _defer(self, token: CancelToken, delay: float, callback: Callable[..., None], *args: Any) -> None:
        def run() -> None:
            token.release(handle)
            if token.cancelled:
                return
            callback(*args)

        handle = self.scheduler.call_later(delay, run)
        token.bind(handle)

    def _emit(self, event: RoundEvent, **data: Any) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(EventPayload(event=event, phase=self._phase, data=data))
        except Exception:
            logger.exception("Event listener failed on %s", event.name)

    def _emit_selection(self) -> None:
        state = self._state
        self._emit(
            RoundEvent.SELECTION_CHANGED,
            first=state.pending_first,
            op=state.pending_op,
            second=state.pending_second,
        )

    def _announce(self, text: str) -> None:
        try:
            self._announcer.announce(text)
        except Exception:
            logger.exception("Announcer failed")

    def _play_cue(self, cue: Cue) -> None:
        try:
            self._announcer.play_cue(cue)
        except Exception:
            logger.exception("Cue %s failed", cue.value)

    def _hint(self) -> str:
        phase = self._phase
        if not phase.is_active:
            return "Reveal a round to begin."
        if phase is GamePhase.REVEALING_TILES:
            return "Revealing tiles..."
        if phase is GamePhase.TARGET_ROLLING:
            return "Generating target..."
        if phase is GamePhase.READY:
            return "Timer starts soon."
        if self._state.pending_first is None:
            return "Pick a number"
        if self._state.pending_op is None:
            return "Pick an operator"
        return "Pick the next number"
