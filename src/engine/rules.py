"""
Acer Challenge - Operation Rules

Game-legal arithmetic on two tile values.

Rules:
- Addition and multiplication are always legal
- Subtraction takes larger minus smaller; equal operands would make 0 and are illegal
- Division must be exact, in whichever direction divides evenly
- Every result must be a positive integer
- Digits are never concatenated (no such operation exists)
"""

import re
from collections import Counter
from typing import Sequence

from src.engine.base import Operation, OperationResult
from src.engine.validators import validate_operand

ZERO_RESULT = "zero result"
INEXACT_DIVISION = "inexact division"
NON_POSITIVE_RESULT = "non-positive or non-integer result"

_MESSAGES = {
    ZERO_RESULT: "Subtraction would make 0, not allowed.",
    INEXACT_DIVISION: "Division must be exact.",
    NON_POSITIVE_RESULT: "Result must be a positive integer.",
}

_EXPRESSION_RE = re.compile(r"^\s*(\d+)\s*([-+*/×÷])\s*(\d+)\s*=\s*(\d+)\s*$")


class RuleViolation(ValueError):
    """
    An operation broke a game-legality constraint.

    Attributes:
        reason: Machine-readable code (ZERO_RESULT, INEXACT_DIVISION, NON_POSITIVE_RESULT)
        message: Sentence suitable for showing or speaking to the player
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or _MESSAGES.get(reason, reason)
        super().__init__(self.message)


def format_expression(left: int, op: Operation, right: int, value: int) -> str:
    """Render one step, e.g. "75 - 25 = 50"."""
    return f"{left} {op.symbol} {right} = {value}"


def apply_operation(a: int, b: int, op: Operation | str) -> OperationResult:
    """
    Combine two positive integers with one operation.

    Subtraction and division are order-tolerant: the larger operand is
    always the left-hand side, so apply_operation(a, b, op) and
    apply_operation(b, a, op) produce the same value.

    Args:
        a: First selected value
        b: Second selected value
        op: Operation, or its ASCII/display symbol

    Returns:
        OperationResult with the value and a display expression

    Raises:
        RuleViolation: If the combination is not game-legal
        ValueError: If an operand is not a positive integer or op is unknown
    """
    validate_operand(a, "First operand")
    validate_operand(b, "Second operand")
    op = Operation.parse(op)

    if op is Operation.ADD:
        left, right, value = a, b, a + b
    elif op is Operation.MULTIPLY:
        left, right, value = a, b, a * b
    elif op is Operation.SUBTRACT:
        if a == b:
            raise RuleViolation(ZERO_RESULT)
        left, right = (a, b) if a > b else (b, a)
        value = left - right
    else:
        if a % b == 0:
            left, right = a, b
        elif b % a == 0:
            left, right = b, a
        else:
            raise RuleViolation(INEXACT_DIVISION)
        value = left // right

    if not isinstance(value, int) or value <= 0:
        raise RuleViolation(NON_POSITIVE_RESULT)

    return OperationResult(value=value, expression=format_expression(left, op, right, value))


def evaluate_expression(expression: str) -> tuple[int, Operation, int, int]:
    """
    Parse one step string and check it is a legal, correct operation.

    Args:
        expression: A step such as "25 × 8 = 200"

    Returns:
        Tuple of (left, operation, right, value)

    Raises:
        ValueError: If the string is malformed or its arithmetic is wrong
        RuleViolation: If the step is not game-legal
    """
    match = _EXPRESSION_RE.match(expression)
    if match is None:
        raise ValueError(f"Malformed step {expression!r}.")

    left, symbol, right, stated = match.groups()
    left_value, right_value, stated_value = int(left), int(right), int(stated)
    op = Operation.parse(symbol)

    result = apply_operation(left_value, right_value, op)
    if result.value != stated_value:
        raise ValueError(
            f"Step {expression!r} is wrong: {left} {op.symbol} {right} is {result.value}."
        )

    return (left_value, op, right_value, stated_value)


def replay_steps(tile_values: Sequence[int], steps: Sequence[str]) -> int | None:
    """
    Replay a derivation against the starting tiles.

    Each step must consume two values still available (original tiles or
    earlier results) and puts its result back into the pool.

    Args:
        tile_values: The starting tile values
        steps: Step strings in evaluation order

    Returns:
        The value produced by the last step, or None if there are no steps

    Raises:
        ValueError: If a step is malformed, wrong, or uses an unavailable value
    """
    pool = Counter(tile_values)
    value: int | None = None
    for step in steps:
        left, _, right, value = evaluate_expression(step)
        for operand in (left, right):
            if pool[operand] < 1:
                raise ValueError(f"Step {step!r} uses {operand}, which is not available.")
            pool[operand] -= 1
        pool[value] += 1
    return value
