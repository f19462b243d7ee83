"""Sheet: the cell store mapping positions to the raw text the user typed.

A Sheet is immutable. Edits return a new Sheet and leave the original
untouched, so a sheet handed to the presentation layer can never change
underneath it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from cellsheet._position import Position
from cellsheet.calc._errors import CellError
from cellsheet.calc._evaluator import Value, evaluate

logger = logging.getLogger(__name__)

DISPLAY_PRECISION = 15  # significant digits shown for numbers

CellKey = Position | str


def _as_position(key: CellKey) -> Position:
    if isinstance(key, Position):
        return key
    if isinstance(key, str):
        return Position.from_a1(key)
    raise TypeError(f"Cell key must be a Position or an A1 string, not {type(key).__name__}")


def _check_text(text: object) -> None:
    if not isinstance(text, str):
        raise TypeError(f"Cell text must be str, not {type(text).__name__}")


def format_number(value: float) -> str:
    """Format a number for display with ``DISPLAY_PRECISION`` significant digits.

    Integral values print without a decimal point and negative zero prints
    as ``0``.
    """
    text = format(value, f".{DISPLAY_PRECISION}g")
    if text == "-0":
        return "0"
    return text


def format_value(value: Value) -> str:
    """Display string for an evaluation result."""
    if value is None:
        return ""
    if isinstance(value, CellError):
        return value.code
    if isinstance(value, str):
        return value
    return format_number(value)


class Sheet:
    """Immutable mapping from :class:`Position` to raw cell text.

    Every stored entry is non-empty; storing ``""`` removes the entry.
    """

    __slots__ = ("_cells",)

    def __init__(self) -> None:
        self._cells: dict[Position, str] = {}

    @classmethod
    def _wrap(cls, cells: dict[Position, str]) -> Sheet:
        sheet = object.__new__(cls)
        sheet._cells = cells
        return sheet

    @classmethod
    def from_cells(cls, cells: Mapping[CellKey, str]) -> Sheet:
        """Build a sheet from ``{"A1": "5", Position(1, 2): "=A1*2"}``."""
        store: dict[Position, str] = {}
        for key, text in cells.items():
            _check_text(text)
            if text:
                store[_as_position(key)] = text
        return cls._wrap(store)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def insert_formula(self, position: Position, text: str) -> Sheet:
        """Return a copy with *position* set to *text*, or cleared if empty.

        Nothing is evaluated here; values are computed on demand by
        :meth:`render`.
        """
        _check_text(text)
        cells = dict(self._cells)
        if text:
            cells[position] = text
        else:
            cells.pop(position, None)
        logger.debug("Set %s to %r", position, text)
        return Sheet._wrap(cells)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def raw(self, position: Position) -> str:
        """The text last typed into *position*, or ``""`` for a blank cell."""
        return self._cells.get(position, "")

    def evaluate(self, position: Position) -> Value:
        return evaluate(position, self)

    def render(self, position: Position) -> str:
        """Evaluate *position* and format the result for display.

        Always returns a string; failures show up as error tags such as
        ``#CYCLE!``.
        """
        return format_value(evaluate(position, self))

    def render_all(self) -> dict[Position, str]:
        """Render every stored cell, each through its own evaluation."""
        return {position: self.render(position) for position in self}

    def items(self) -> Iterator[tuple[Position, str]]:
        """``(position, raw_text)`` pairs in row-major order."""
        for position in self:
            yield position, self._cells[position]

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: CellKey) -> str:
        """``sheet['A1']`` -> raw text (``""`` when blank)."""
        return self.raw(_as_position(key))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (Position, str)):
            return False
        return _as_position(key) in self._cells

    def __iter__(self) -> Iterator[Position]:
        return iter(sorted(self._cells))

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sheet):
            return NotImplemented
        return self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<Sheet cells={len(self._cells)}>"


# ---------------------------------------------------------------------------
# Functional boundary used by the presentation layer
# ---------------------------------------------------------------------------


def empty() -> Sheet:
    """A sheet with no entries."""
    return Sheet()


def insert_formula(position: Position, text: str, sheet: Sheet) -> Sheet:
    return sheet.insert_formula(position, text)


def raw(position: Position, sheet: Sheet) -> str:
    return sheet.raw(position)


def render(position: Position, sheet: Sheet) -> str:
    return sheet.render(position)


def render_all(sheet: Sheet) -> dict[Position, str]:
    return sheet.render_all()
