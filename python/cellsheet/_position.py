"""Grid addressing: positions, directions and selection movement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cellsheet._utils import a1_to_rowcol, rowcol_to_a1


class Direction(Enum):
    """Cardinal direction for keyboard-driven selection movement."""

    UP = "up"  # decreasing row
    DOWN = "down"  # increasing row
    LEFT = "left"  # decreasing column
    RIGHT = "right"  # increasing column


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


@dataclass(frozen=True)
class GridSize:
    """Upper bounds of the visible grid, owned by the presentation layer."""

    rows: int
    columns: int

    def __post_init__(self) -> None:
        if self.rows < 1 or self.columns < 1:
            raise ValueError(f"Grid must have at least one row and column: {self}")


@dataclass(frozen=True, order=True)
class Position:
    """A 1-based ``(row, column)`` cell address.

    Ordering is row-major, so ``sorted()`` walks a sheet top-to-bottom,
    left-to-right.
    """

    row: int
    column: int

    def __post_init__(self) -> None:
        if self.row < 1 or self.column < 1:
            raise ValueError(
                f"Position coordinates must be >= 1: row={self.row}, column={self.column}"
            )

    @classmethod
    def from_a1(cls, ref: str) -> Position:
        row, column = a1_to_rowcol(ref)
        return cls(row, column)

    @property
    def a1(self) -> str:
        return rowcol_to_a1(self.row, self.column)

    def moved(self, direction: Direction, bounds: GridSize | None = None) -> Position:
        """Shorthand for :func:`next_position`."""
        return next_position(direction, self, bounds)

    def __str__(self) -> str:
        return self.a1


def next_position(
    direction: Direction,
    position: Position,
    bounds: GridSize | None = None,
) -> Position:
    """Step one cell in *direction*, clamping at the grid edges.

    Row and column never drop below 1. Without *bounds* there is no upper
    limit; with them the result stays inside ``bounds.rows`` x
    ``bounds.columns``.
    """
    d_row, d_col = _DELTAS[direction]
    row = max(1, position.row + d_row)
    column = max(1, position.column + d_col)
    if bounds is not None:
        row = min(row, bounds.rows)
        column = min(column, bounds.columns)
    return Position(row, column)
