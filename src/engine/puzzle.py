"""
Acer Challenge - Puzzle Generator

Draws six tiles from the large and small pools and rolls a three-digit
target. All randomness comes from the injected RandomSource.
"""

import secrets
from typing import ClassVar

from src.engine.base import RoundPayload, Tile, TileKind, TILE_COUNT
from src.engine.random_source import RandomSource
from src.engine.validators import validate_large_count

LARGE_POOL: tuple[int, ...] = (25, 50, 75, 100)
SMALL_POOL: tuple[int, ...] = tuple(n for n in range(1, 11) for _ in range(2))


def new_tile_id() -> str:
    """Fresh opaque tile identifier."""
    return secrets.token_hex(8)


class PuzzleGenerator:
    """Generates tiles and targets from a RandomSource."""

    HUNDREDS_RANGE: ClassVar[tuple[int, int]] = (1, 9)
    DIGIT_RANGE: ClassVar[tuple[int, int]] = (0, 9)

    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng = rng if rng is not None else RandomSource()

    def draw_tiles(self, large_count: int) -> tuple[Tile, ...]:
        """
        Draw six face-down tiles.

        Large tiles come first, then small tiles, each group in drawn
        order. Every large value appears at most once and every small
        value at most twice.

        Args:
            large_count: Number of large tiles (clamped to 0-4)

        Returns:
            Tuple of six unrevealed tiles
        """
        large_count = validate_large_count(large_count)
        small_count = TILE_COUNT - large_count

        large = self.rng.shuffle(LARGE_POOL)[:large_count]
        small = self.rng.shuffle(SMALL_POOL)[:small_count]

        return tuple(
            [Tile(id=new_tile_id(), value=v, kind=TileKind.LARGE) for v in large]
            + [Tile(id=new_tile_id(), value=v, kind=TileKind.SMALL) for v in small]
        )

    def roll_target_digits(self) -> tuple[int, int, int]:
        """Hundreds digit 1-9, tens and units 0-9."""
        hundreds = self.rng.next_int(*self.HUNDREDS_RANGE)
        tens = self.rng.next_int(*self.DIGIT_RANGE)
        units = self.rng.next_int(*self.DIGIT_RANGE)
        return (hundreds, tens, units)

    def roll_target(self) -> int:
        """Target in [100, 999]."""
        hundreds, tens, units = self.roll_target_digits()
        return digits_to_target((hundreds, tens, units))

    def random_digit(self) -> int:
        """A throwaway digit for rolling-display frames."""
        return self.rng.next_int(*self.DIGIT_RANGE)

    def generate(self, large_count: int) -> RoundPayload:
        """Tiles and target in one call, e.g. for a server handing out rounds."""
        tiles = self.draw_tiles(large_count)
        return RoundPayload(
            tiles=tuple(tile.value for tile in tiles),
            target=self.roll_target(),
            seed=self.rng.seed,
        )

    @staticmethod
    def result_tile(value: int) -> Tile:
        """New face-up tile holding the result of an operation."""
        return Tile(id=new_tile_id(), value=value, kind=TileKind.RESULT, revealed=True)


def digits_to_target(digits: tuple[int, int, int]) -> int:
    hundreds, tens, units = digits
    return 100 * hundreds + 10 * tens + units
