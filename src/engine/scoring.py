"""
Acer Challenge - Scoring Model

Two named presets:
- Accuracy only: 10 for exact, 7 within 5, 5 within 10, otherwise 0
- Accuracy plus time: the accuracy score times 10, plus up to 10 points
  for the fraction of the clock left unused

A round that ends without a lock-in always scores 0.
"""

import math

from src.engine.base import ChallengeScore, ScoringPolicy
from src.engine.validators import validate_timer_seconds

ACCURACY_MULTIPLIER = 10
MAX_TIME_BONUS = 10


def score_for_diff(diff: int) -> int:
    """Accuracy points for a distance from the target."""
    if diff < 0:
        raise ValueError(f"Diff cannot be negative, got {diff}.")
    if diff == 0:
        return 10
    if diff <= 5:
        return 7
    if diff <= 10:
        return 5
    return 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ScoringModel:
    """
    Converts a finished round into a ChallengeScore.

    Attributes:
        policy: Which preset to apply
        timer_seconds: Length of the countdown (0 = unlimited, no time bonus)
    """

    def __init__(
        self,
        policy: ScoringPolicy = ScoringPolicy.ACCURACY_ONLY,
        timer_seconds: int = 30
    ) -> None:
        self.policy = policy
        self.timer_seconds = validate_timer_seconds(timer_seconds)

    def time_bonus(self, time_remaining: int | None) -> int:
        if self.timer_seconds == 0 or time_remaining is None:
            return 0
        return max(0, _round_half_up(time_remaining / self.timer_seconds * MAX_TIME_BONUS))

    def score(
        self,
        final_value: int | None,
        target: int,
        *,
        did_submit: bool,
        time_remaining: int | None = None,
    ) -> ChallengeScore:
        """
        Score one round.

        Args:
            final_value: The locked-in value (None if nothing was submitted)
            target: The round target
            did_submit: Whether the player locked in before time ran out
            time_remaining: Seconds left when the round ended

        Returns:
            ChallengeScore with the point breakdown
        """
        if not did_submit or final_value is None:
            return ChallengeScore(
                points=0,
                accuracy_component=0,
                time_component=0,
                final_value=None,
                diff=None,
                exact=False,
                time_remaining=time_remaining,
            )

        diff = abs(target - final_value)
        accuracy = score_for_diff(diff)

        if self.policy is ScoringPolicy.ACCURACY_PLUS_TIME:
            accuracy *= ACCURACY_MULTIPLIER
            time_component = self.time_bonus(time_remaining)
        else:
            time_component = 0

        return ChallengeScore(
            points=accuracy + time_component,
            accuracy_component=accuracy,
            time_component=time_component,
            final_value=final_value,
            diff=diff,
            exact=diff == 0,
            time_remaining=time_remaining,
        )
