"""
Acer Challenge - Input Validation Utilities

Provides validation functions for round engine inputs. Validators either
return validated (and where the policy says so, clamped) data or raise
descriptive ValueError exceptions.
"""

import logging
from typing import Sequence

from src.engine.base import MAX_LARGE_COUNT, TARGET_MAX, TARGET_MIN, TILE_COUNT, TIMER_CHOICES

logger = logging.getLogger(__name__)


def validate_large_count(count: int) -> int:
    """
    Clamp the requested number of large tiles to 0-4.

    Out-of-range requests are not errors; they are clamped and logged.

    Args:
        count: Requested number of large tiles

    Returns:
        The count, clamped to [0, MAX_LARGE_COUNT]

    Raises:
        ValueError: If count is not an integer
    """
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"Large count must be an integer, got {type(count).__name__}.")

    clamped = min(max(count, 0), MAX_LARGE_COUNT)
    if clamped != count:
        logger.warning("Large count %d out of range, clamped to %d", count, clamped)
    return clamped


def validate_operand(value: int, name: str = "Operand") -> int:
    """
    Validate a single operand is a positive integer.

    Raises:
        ValueError: If value is not a positive integer
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}.")
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}.")
    return value


def validate_tile_values(
    values: Sequence[int],
    min_count: int = 1,
    max_count: int | None = TILE_COUNT
) -> tuple[int, ...]:
    """
    Validate and normalize a sequence of tile values.

    Args:
        values: Sequence of tile values to validate
        min_count: Minimum number of tiles required
        max_count: Maximum number of tiles allowed (None = no limit)

    Returns:
        Validated values as a tuple

    Raises:
        ValueError: If validation fails
    """
    values_tuple = tuple(values)
    count = len(values_tuple)

    if count < min_count:
        raise ValueError(f"At least {min_count} tiles required, got {count}.")

    if max_count is not None and count > max_count:
        raise ValueError(f"At most {max_count} tiles allowed, got {count}.")

    for i, value in enumerate(values_tuple):
        validate_operand(value, name=f"Tile value at index {i}")

    return values_tuple


def validate_target(target: int, bounded: bool = True) -> int:
    """
    Validate a target number.

    Args:
        target: Target to validate
        bounded: Require the round range 100-999 (the solver itself accepts any integer)

    Returns:
        Validated target

    Raises:
        ValueError: If target is invalid
    """
    if not isinstance(target, int) or isinstance(target, bool):
        raise ValueError(f"Target must be an integer, got {type(target).__name__}.")

    if bounded and not (TARGET_MIN <= target <= TARGET_MAX):
        raise ValueError(f"Target must be between {TARGET_MIN} and {TARGET_MAX}, got {target}.")

    return target


def validate_timer_seconds(seconds: int) -> int:
    """
    Validate a timer setting.

    Raises:
        ValueError: If seconds is not one of the allowed timer choices
    """
    if seconds not in TIMER_CHOICES:
        raise ValueError(f"Timer must be one of {TIMER_CHOICES}, got {seconds}.")
    return seconds
