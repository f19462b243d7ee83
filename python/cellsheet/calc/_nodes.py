"""Expression tree and parsed cell-value variants."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from cellsheet._position import Position

# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Number:
    """A numeric literal inside a formula."""

    value: float


@dataclass(frozen=True)
class Reference:
    """A reference to another cell, resolved only at evaluation time."""

    position: Position


@dataclass(frozen=True)
class Negate:
    """Unary minus."""

    operand: Expr


@dataclass(frozen=True)
class BinaryOp:
    op: str  # one of "+", "-", "*", "/"
    left: Expr
    right: Expr


Expr = Number | Reference | Negate | BinaryOp


def iter_references(expr: Expr) -> Iterator[Position]:
    """Yield every referenced position in left-to-right order.

    Walks with an explicit stack so long operator chains do not recurse.
    """
    stack: list[Expr] = [expr]
    while stack:
        node = stack.pop()
        match node:
            case Reference(position):
                yield position
            case Negate(operand):
                stack.append(operand)
            case BinaryOp(_, left, right):
                # right pushed first so left pops first
                stack.append(right)
                stack.append(left)


# ---------------------------------------------------------------------------
# Cell values: what a cell's raw text means
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberLiteral:
    value: float


@dataclass(frozen=True)
class TextLiteral:
    """Non-numeric, non-formula text, displayed verbatim."""

    text: str


@dataclass(frozen=True)
class Formula:
    expr: Expr


@dataclass(frozen=True)
class ParseFailure:
    """A formula that could not be parsed.

    ``offset`` is the character index into the formula body (the text after
    the leading ``=``) where parsing stopped.
    """

    message: str
    offset: int = 0


CellValue = NumberLiteral | TextLiteral | Formula | ParseFailure
