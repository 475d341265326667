"""
Acer Challenge - Random Source

Seeded or unseeded random numbers for puzzle generation.

Unseeded sources draw fresh entropy from the `random` module. Seeded sources
hash the seed with 32-bit FNV-1a and expand it with mulberry32, so the same
seed yields the same tiles and target on every client that shares it.
"""

import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply, unsigned result."""
    return (a * b) & _MASK32


def _first_code_unit(char: str) -> int:
    """Leading UTF-16 code unit of one character (the high surrogate if astral)."""
    code_point = ord(char)
    if code_point > 0xFFFF:
        return 0xD800 + ((code_point - 0x10000) >> 10)
    return code_point


def hash_seed(seed: str) -> int:
    """
    FNV-1a over the seed, one 16-bit unit per character.

    Characters outside the Basic Multilingual Plane contribute only their
    high surrogate, so seeds hash identically on JavaScript clients that
    iterate by code point and read `charCodeAt(0)`.
    """
    h = _FNV_OFFSET
    for char in seed:
        h ^= _first_code_unit(char)
        h = _imul(h, _FNV_PRIME)
    return h


class _Mulberry32:
    """Small, fast 32-bit generator; state is a single word."""

    def __init__(self, seed: int) -> None:
        self._state = seed & _MASK32

    def __call__(self) -> float:
        self._state = (self._state + _MULBERRY_INCREMENT) & _MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), 1 | t)
        r ^= (r + _imul(r ^ (r >> 7), 61 | r)) & _MASK32
        return ((r ^ (r >> 14)) & _MASK32) / _TWO_POW_32


class RandomSource:
    """
    Uniform floats, bounded integers and shuffles from one stream.

    Two sources built with the same seed produce identical outputs
    for identical call sequences.
    """

    def __init__(self, seed: str | int | None = None) -> None:
        self._seed: str | None = None
        self._next = random.random
        self.reseed(seed)

    @property
    def seed(self) -> str | None:
        return self._seed

    @property
    def is_seeded(self) -> bool:
        return self._seed is not None

    def reseed(self, seed: str | int | None) -> None:
        """Reseed the stream (None or empty string -> fresh unseeded entropy)."""
        text = str(seed) if seed is not None else ""
        if not text:
            self._seed = None
            self._next = random.random
            return
        self._seed = text
        self._next = _Mulberry32(hash_seed(text))

    def next_uniform(self) -> float:
        """Float in [0, 1)."""
        return self._next()

    def next_int(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi], inclusive at both ends."""
        if hi < lo:
            raise ValueError(f"Empty range [{lo}, {hi}].")
        return math.floor(self.next_uniform() * (hi - lo + 1)) + lo

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy (Fisher-Yates, walking from the end)."""
        copy = list(items)
        for i in range(len(copy) - 1, 0, -1):
            j = math.floor(self.next_uniform() * (i + 1))
            copy[i], copy[j] = copy[j], copy[i]
        return copy
