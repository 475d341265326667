"""Tests for src/engine/puzzle.py."""

from collections import Counter

import pytest
from conftest import FixedRandom
from src.engine.base import TileKind
from src.engine.puzzle import LARGE_POOL, SMALL_POOL, PuzzleGenerator, digits_to_target
from src.engine.random_source import RandomSource


class TestPools:
    def test_large_pool(self):
        assert LARGE_POOL == (25, 50, 75, 100)

    def test_small_pool_has_each_value_twice(self):
        assert Counter(SMALL_POOL) == {n: 2 for n in range(1, 11)}


class TestDrawTiles:
    @pytest.mark.parametrize("large_count", [0, 1, 2, 3, 4])
    def test_counts(self, large_count):
        tiles = PuzzleGenerator(RandomSource(f"count-{large_count}")).draw_tiles(large_count)
        assert len(tiles) == 6
        kinds = [tile.kind for tile in tiles]
        assert kinds == [TileKind.LARGE] * large_count + [TileKind.SMALL] * (6 - large_count)

    @pytest.mark.parametrize("requested,expected", [(-2, 0), (7, 4)])
    def test_out_of_range_clamped(self, requested, expected):
        tiles = PuzzleGenerator(RandomSource("clamp")).draw_tiles(requested)
        assert sum(1 for tile in tiles if tile.kind is TileKind.LARGE) == expected

    def test_values_come_from_pools(self):
        generator = PuzzleGenerator(RandomSource("pools"))
        for _ in range(50):
            tiles = generator.draw_tiles(2)
            large = Counter(t.value for t in tiles if t.kind is TileKind.LARGE)
            small = Counter(t.value for t in tiles if t.kind is TileKind.SMALL)
            assert all(value in LARGE_POOL and n == 1 for value, n in large.items())
            assert all(1 <= value <= 10 and n <= 2 for value, n in small.items())

    def test_unique_ids_and_hidden(self):
        tiles = PuzzleGenerator(RandomSource("ids")).draw_tiles(1)
        assert len({tile.id for tile in tiles}) == 6
        assert not any(tile.revealed for tile in tiles)

    def test_seeded_draws_repeat(self):
        first = PuzzleGenerator(RandomSource("repeat")).draw_tiles(2)
        second = PuzzleGenerator(RandomSource("repeat")).draw_tiles(2)
        assert [t.value for t in first] == [t.value for t in second]

    def test_large_before_small_in_drawn_order(self):
        tiles = PuzzleGenerator(FixedRandom()).draw_tiles(1)
        assert [tile.value for tile in tiles] == [25, 1, 1, 2, 2, 3]


class TestTarget:
    def test_digit_ranges(self):
        generator = PuzzleGenerator(RandomSource("digits"))
        for _ in range(200):
            hundreds, tens, units = generator.roll_target_digits()
            assert 1 <= hundreds <= 9
            assert 0 <= tens <= 9
            assert 0 <= units <= 9

    def test_target_range(self):
        generator = PuzzleGenerator(RandomSource("targets"))
        for _ in range(200):
            assert 100 <= generator.roll_target() <= 999

    def test_lowest_and_highest(self):
        assert PuzzleGenerator(FixedRandom(0.0)).roll_target() == 100
        assert PuzzleGenerator(FixedRandom(0.9999)).roll_target() == 999

    def test_digits_to_target(self):
        assert digits_to_target((5, 0, 7)) == 507

    def test_random_digit(self):
        generator = PuzzleGenerator(RandomSource("frames"))
        assert all(0 <= generator.random_digit() <= 9 for _ in range(50))


class TestGenerate:
    def test_payload(self):
        payload = PuzzleGenerator(FixedRandom()).generate(1)
        assert payload.tiles == (25, 1, 1, 2, 2, 3)
        assert payload.target == 100
        assert payload.seed is None

    def test_payload_carries_seed(self):
        payload = PuzzleGenerator(RandomSource("room-7")).generate(2)
        assert payload.seed == "room-7"
        assert payload == PuzzleGenerator(RandomSource("room-7")).generate(2)


class TestResultTile:
    def test_result_tile_is_revealed(self):
        tile = PuzzleGenerator.result_tile(42)
        assert tile.kind is TileKind.RESULT
        assert tile.revealed
        assert tile.value == 42
