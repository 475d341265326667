"""
Acer Challenge - Best Solution Solver

Finds the reachable value closest to the target from up to six tiles.

Subsets of tile positions are bitmasks. Each mask gets a table of the
values reachable from exactly those tiles, built from every split of the
mask into two disjoint halves whose tables are already complete. Masks
are processed in increasing order, so both halves of any split are
always finished before the mask that needs them.

Derivations live in an arena of parallel lists indexed by node number.
A node with no operation is a leaf (an original tile).
"""

import logging
from typing import Sequence

from src.engine.base import BestSolution, Operation
from src.engine.rules import format_expression
from src.engine.validators import validate_tile_values

logger = logging.getLogger(__name__)

# Intermediate values above this are discarded.
MAX_INTERMEDIATE = 50_000

_LEAF = -1


class _Arena:
    """Derivation nodes stored column-wise."""

    __slots__ = ("values", "lefts", "rights", "ops")

    def __init__(self) -> None:
        self.values: list[int] = []
        self.lefts: list[int] = []
        self.rights: list[int] = []
        self.ops: list[Operation | None] = []

    def add(self, value: int, left: int = _LEAF, right: int = _LEAF, op: Operation | None = None) -> int:
        self.values.append(value)
        self.lefts.append(left)
        self.rights.append(right)
        self.ops.append(op)
        return len(self.values) - 1

    def steps(self, node: int) -> list[str]:
        """Post-order walk: left subtree, right subtree, then this node."""
        op = self.ops[node]
        if op is None:
            return []
        left, right = self.lefts[node], self.rights[node]
        return [
            *self.steps(left),
            *self.steps(right),
            format_expression(self.values[left], op, self.values[right], self.values[node]),
        ]


def _record(table: dict[int, int], arena: _Arena, value: int, left: int, right: int, op: Operation) -> None:
    # First derivation found for a value wins.
    if value <= 0 or value > MAX_INTERMEDIATE or value in table:
        return
    table[value] = arena.add(value, left, right, op)


def _combine(table: dict[int, int], arena: _Arena, left_table: dict[int, int], right_table: dict[int, int]) -> None:
    """Every legal combination of one value from each half."""
    for va, node_a in left_table.items():
        for vb, node_b in right_table.items():
            _record(table, arena, va + vb, node_a, node_b, Operation.ADD)
            _record(table, arena, va * vb, node_a, node_b, Operation.MULTIPLY)

            if va > vb:
                _record(table, arena, va - vb, node_a, node_b, Operation.SUBTRACT)
            elif vb > va:
                _record(table, arena, vb - va, node_b, node_a, Operation.SUBTRACT)

            if va % vb == 0:
                _record(table, arena, va // vb, node_a, node_b, Operation.DIVIDE)
            if vb % va == 0:
                _record(table, arena, vb // va, node_b, node_a, Operation.DIVIDE)


def solve(tile_values: Sequence[int], target: int) -> BestSolution | None:
    """
    Find the closest reachable value to the target and one way to reach it.

    Any subset of the tiles may be used. Ties on distance go to the value
    found first; an exact hit ends the search immediately.

    Args:
        tile_values: Up to six positive integers
        target: The number to approach

    Returns:
        BestSolution, or None if there are no tiles at all

    Raises:
        ValueError: If a tile value is not a positive integer
    """
    values = validate_tile_values(tile_values, min_count=0)
    if not isinstance(target, int) or isinstance(target, bool):
        raise ValueError(f"Target must be an integer, got {type(target).__name__}.")

    n = len(values)
    full = 1 << n
    arena = _Arena()
    reachable: list[dict[int, int]] = [{} for _ in range(full)]

    for i, value in enumerate(values):
        reachable[1 << i][value] = arena.add(value)

    best_node: int | None = None
    best_diff = 0

    for mask in range(1, full):
        table = reachable[mask]

        # Submask enumeration; each unordered split is visited once (a < b).
        a = (mask - 1) & mask
        while a > 0:
            b = mask ^ a
            if a < b and reachable[a] and reachable[b]:
                _combine(table, arena, reachable[a], reachable[b])
            a = (a - 1) & mask

        for value, node in table.items():
            diff = abs(target - value)
            if best_node is None or diff < best_diff:
                best_node, best_diff = node, diff
                if diff == 0:
                    logger.debug("Exact solution for %d found at mask %#x", target, mask)
                    return BestSolution(value=value, diff=0, steps=tuple(arena.steps(node)))

    if best_node is None:
        return None

    logger.debug("Closest to %d is %d (diff %d)", target, arena.values[best_node], best_diff)
    return BestSolution(
        value=arena.values[best_node],
        diff=best_diff,
        steps=tuple(arena.steps(best_node)),
    )
