"""Demand-driven cell evaluation with cycle detection.

Every call to :func:`evaluate` starts from the raw text in the sheet and
builds its own bookkeeping, so nothing is cached between calls and an edit is
visible on the very next evaluation.

Two explicit stacks replace Python recursion:

* a stack of *positions* walks cell references depth-first. A cell enters the
  in-progress set when first reached and leaves it once its value settles;
  meeting an in-progress cell again means the chain has looped back on itself
  and that reference evaluates to ``#CYCLE!``.
* a stack of *expression nodes* evaluates one formula tree in post-order,
  left operand before right, so the first error in that order wins.

Long reference chains and long operator chains therefore never approach the
interpreter's recursion limit.
"""

from __future__ import annotations

import logging
import math
import operator
from typing import TYPE_CHECKING, Callable, Iterator

from cellsheet._position import Position
from cellsheet.calc._errors import CellError, first_error, is_error
from cellsheet.calc._nodes import (
    BinaryOp,
    CellValue,
    Expr,
    Formula,
    Negate,
    Number,
    NumberLiteral,
    ParseFailure,
    Reference,
    TextLiteral,
    iter_references,
)
from cellsheet.calc._parser import parse_cell

if TYPE_CHECKING:
    from cellsheet._sheet import Sheet

logger = logging.getLogger(__name__)

# What a cell evaluates to: a number, literal text, an error, or None (blank).
Value = float | str | CellError | None

_OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------


def _operand(value: Value) -> float | CellError:
    """Coerce a referenced cell's value for use in arithmetic."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        return CellError.VALUE
    return value


def _binary_op(left: float | CellError, op: str, right: float | CellError) -> float | CellError:
    err = first_error(left, right)
    if err is not None:
        return err
    if op == "/" and right == 0:
        return CellError.DIV0
    result = _OPERATORS[op](left, right)
    if not math.isfinite(result):
        return CellError.NUM
    return result


def _negate(value: float | CellError) -> float | CellError:
    if is_error(value):
        return value
    return -value


def evaluate_expr(
    expr: Expr,
    resolve: Callable[[Position], Value],
) -> float | CellError:
    """Evaluate an expression tree, looking up references through *resolve*."""
    operands: list[float | CellError] = []
    stack: list[tuple[Expr, bool]] = [(expr, False)]
    while stack:
        node, ready = stack.pop()
        match node:
            case Number(value):
                operands.append(value)
            case Reference(position):
                operands.append(_operand(resolve(position)))
            case Negate(inner):
                if ready:
                    operands.append(_negate(operands.pop()))
                else:
                    stack.append((node, True))
                    stack.append((inner, False))
            case BinaryOp(op, left, right):
                if ready:
                    rhs = operands.pop()
                    lhs = operands.pop()
                    operands.append(_binary_op(lhs, op, rhs))
                else:
                    stack.append((node, True))
                    stack.append((right, False))
                    stack.append((left, False))
    return operands.pop()


def _literal_value(cell: CellValue | None) -> Value:
    match cell:
        case None:
            return None
        case NumberLiteral(value):
            return value
        case TextLiteral(text):
            return text
        case ParseFailure():
            return CellError.PARSE
    raise TypeError(f"Not a literal cell value: {cell!r}")


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class _Evaluation:
    """State for one top-level :func:`evaluate` call. Never reused."""

    __slots__ = ("_sheet", "_parsed", "_values", "_in_progress")

    def __init__(self, sheet: Sheet) -> None:
        self._sheet = sheet
        self._parsed: dict[Position, CellValue | None] = {}
        # settled cells -> value
        self._values: dict[Position, Value] = {}
        # cells whose references are still being resolved
        self._in_progress: set[Position] = set()

    def run(self, root: Position) -> Value:
        # Each frame keeps its formula's reference iterator, so the references
        # are walked once however often the frame is resumed.
        stack: list[tuple[Position, Expr | None, Iterator[Position] | None]] = [(root, None, None)]
        while stack:
            position, expr, refs = stack[-1]
            if expr is None or refs is None:
                if position in self._values:
                    stack.pop()
                    continue
                cell = self._cell(position)
                if not isinstance(cell, Formula):
                    self._values[position] = _literal_value(cell)
                    stack.pop()
                    continue
                self._in_progress.add(position)
                expr, refs = cell.expr, iter_references(cell.expr)
                stack[-1] = (position, expr, refs)

            pending = self._next_unresolved(refs)
            if pending is not None:
                stack.append((pending, None, None))
                continue

            self._values[position] = evaluate_expr(expr, self._resolve)
            self._in_progress.discard(position)
            stack.pop()

        return self._values[root]

    def _cell(self, position: Position) -> CellValue | None:
        if position not in self._parsed:
            raw = self._sheet.raw(position)
            self._parsed[position] = parse_cell(raw) if raw else None
        return self._parsed[position]

    def _next_unresolved(self, refs: Iterator[Position]) -> Position | None:
        for ref in refs:
            if ref not in self._values and ref not in self._in_progress:
                return ref
        return None

    def _resolve(self, position: Position) -> Value:
        if position in self._in_progress:
            logger.debug("Circular reference through %s", position)
            return CellError.CYCLE
        return self._values[position]


def evaluate(position: Position, sheet: Sheet) -> Value:
    """Evaluate the cell at *position*.

    Returns a float for numbers and formulas, the text itself for text
    literals, None for a blank cell, or a :class:`CellError`. Never raises
    for any cell content.
    """
    result = _Evaluation(sheet).run(position)
    if is_error(result):
        logger.debug("%s evaluated to %s", position, result)
    return result
